"""FastAPI application for the middle housing permit classifier.

Provides REST API endpoints for single-record classification, dataset
upload, filtered listing, category summaries and geocoded map points.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from middlehousing.classification.rules import ClassificationEngine
from middlehousing.core.config import Settings
from middlehousing.core.logging import configure_logging
from middlehousing.core.types import ClassificationResult
from middlehousing.gis.service import Geocoder, create_geocoder
from middlehousing.ingest.csv_loader import load_default_dataset
from middlehousing.ingest.store import DatasetStore
from middlehousing.web.dataset_router import router as dataset_router

logger = logging.getLogger(__name__)


# --- Request/Response models ---


class ClassifyRequest(BaseModel):
    """Request body for the single-record classify endpoint."""

    description: str = ""
    project_name: str = ""
    address: str = ""


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"
    dataset_loaded: bool = False


# --- Application factory ---


def create_app(
    settings: Settings | None = None,
    engine: ClassificationEngine | None = None,
    geocoder: Geocoder | None = None,
    store: DatasetStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with mock dependencies.

    Args:
        settings: Application settings. Defaults to Settings().
        engine: Optional pre-built ClassificationEngine.
        geocoder: Optional geocoder; defaults to the configured provider.
        store: Optional pre-built DatasetStore.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Middle Housing Filter",
        description="Construction permit classifier for middle housing",
        version="0.1.0",
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if engine is None:
        engine = ClassificationEngine(
            rules_path=settings.classifier.rules_path,
            cache_size=settings.classifier.cache_size,
        )
    if geocoder is None:
        geocoder = create_geocoder(settings.geocoding)
    if store is None:
        store = DatasetStore(engine, max_workers=settings.ingest.max_workers)

    if settings.ingest.autoload_default and not store.is_loaded:
        rows = load_default_dataset(settings.ingest.default_csv_path)
        if rows:
            summary = store.load(rows)
            logger.info("Autoloaded %d default permit rows", summary.total)

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.engine = engine
    app.state.geocoder = geocoder
    app.state.dataset_store = store

    app.include_router(dataset_router)

    # --- Routes ---

    @app.post("/api/classify", response_model=ClassificationResult)
    async def classify(body: ClassifyRequest) -> ClassificationResult:
        """Classify a single permit record."""
        return engine.classify(
            body.description,
            body.project_name,
            body.address,
            original=body.model_dump(),
        )

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="middlehousing",
            dataset_loaded=store.is_loaded,
        )

    return app

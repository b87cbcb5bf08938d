"""FastAPI router for permit dataset endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from middlehousing.core.types import FilterStatus
from middlehousing.gis.service import geocode_results
from middlehousing.ingest.csv_loader import DatasetError, parse_csv
from middlehousing.ingest.store import DatasetStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _store(request: Request) -> DatasetStore:
    store = getattr(request.app.state, "dataset_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Dataset store not available")
    return store


def _loaded_store(request: Request) -> DatasetStore:
    store = _store(request)
    if not store.is_loaded:
        raise HTTPException(status_code=404, detail="No dataset loaded")
    return store


@router.post("/api/dataset")
async def upload_dataset(request: Request) -> dict[str, Any]:
    """Replace the loaded dataset with the CSV in the request body.

    Parsing and classification run in the worker threadpool so a large
    upload never stalls other requests.
    """
    store = _store(request)
    body = await request.body()
    try:
        rows = await run_in_threadpool(parse_csv, body.decode("utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"CSV must be UTF-8: {exc}")
    except DatasetError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    summary = await run_in_threadpool(store.load, rows)
    logger.info("Classified %d uploaded permit rows", summary.total)
    return summary.model_dump(mode="json")


@router.get("/api/dataset")
async def list_results(
    request: Request,
    status: FilterStatus = FilterStatus.ALL,
) -> list[dict[str, Any]]:
    """List classified records, optionally filtered by middle-housing status."""
    store = _loaded_store(request)
    return [r.model_dump(mode="json") for r in store.filtered(status)]


@router.get("/api/dataset/summary")
async def dataset_summary(request: Request) -> dict[str, Any]:
    store = _loaded_store(request)
    return store.summary().model_dump(mode="json")


@router.get("/api/dataset/map")
async def dataset_map(
    request: Request,
    middle_housing_only: bool = True,
) -> list[dict[str, Any]]:
    """Geocode loaded records for the map view.

    Addresses that cannot be geocoded come back with ``location: null``.
    """
    store = _loaded_store(request)
    geocoder = getattr(request.app.state, "geocoder", None)
    if geocoder is None:
        raise HTTPException(status_code=503, detail="Geocoder not available")

    settings = request.app.state.settings
    points = await geocode_results(
        store.results,
        geocoder,
        concurrency=settings.geocoding.concurrency,
        middle_housing_only=middle_housing_only,
    )
    return [p.model_dump(mode="json") for p in points]


@router.delete("/api/dataset")
async def reset_dataset(request: Request) -> dict[str, str]:
    _store(request).reset()
    return {"status": "reset"}

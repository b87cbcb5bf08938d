"""GIS data models."""

from __future__ import annotations

from pydantic import BaseModel

from middlehousing.core.types import ClassificationResult, GeocodedLocation


class MapPoint(BaseModel):
    """A classified permit positioned for the map view.

    ``location`` is None when the address could not be geocoded.
    """

    address: str
    result: ClassificationResult
    location: GeocodedLocation | None = None

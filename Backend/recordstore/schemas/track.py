from typing import Optional

from .base import CamelModel


class TrackCreate(CamelModel):
    """A track created together with its owning musician or ensemble."""
    name: str = ""
    duration: int = 0


class TrackResponse(CamelModel):
    id: int
    name: str
    duration: int  # seconds

    # Exactly one owner is set; the matching display name comes with it
    musician_id: Optional[int] = None
    ensemble_id: Optional[int] = None
    musician_name: Optional[str] = None
    ensemble_name: Optional[str] = None

from typing import List, Optional

from .base import CamelModel
from .track import TrackCreate


class EnsembleCreate(CamelModel):
    name: str = ""
    type: Optional[str] = None
    tracks: List[TrackCreate] = []


class EnsembleResponse(CamelModel):
    id: int
    name: str
    type: Optional[str] = None

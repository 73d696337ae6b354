from typing import List, Optional

from .base import CamelModel
from .track import TrackCreate


class MusicianCreate(CamelModel):
    first_name: str = ""
    last_name: str = ""
    role: Optional[str] = None
    ensemble_id: Optional[int] = None
    tracks: List[TrackCreate] = []


class MusicianResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    role: Optional[str] = None
    ensemble_id: Optional[int] = None
    ensemble_name: Optional[str] = None

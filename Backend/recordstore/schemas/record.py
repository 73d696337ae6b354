from typing import List, Optional

from .base import CamelModel
from .track import TrackResponse


class RecordBase(CamelModel):
    title: str = ""
    label: Optional[str] = None
    wholesale_address: Optional[str] = None
    wholesale_price: float = 0
    retail_price: float = 0
    release_date: Optional[str] = None
    stock: int = 0


class RecordCreate(RecordBase):
    # Existing tracks to list on the record, in order
    track_ids: List[int] = []


class RecordUpdate(RecordBase):
    # None leaves the current value untouched
    sold_last_year: Optional[int] = None
    sold_current_year: Optional[int] = None
    track_ids: Optional[List[int]] = None


class RecordResponse(RecordBase):
    id: int
    sold_last_year: int = 0
    sold_current_year: int = 0

    tracks: List[TrackResponse] = []

from typing import Optional

from .base import CamelModel
from .record import RecordResponse


class CartItemCreate(CamelModel):
    record_id: int
    quantity: int = 1


class CartItemUpdate(CamelModel):
    quantity: int


class CartItemResponse(CamelModel):
    user_id: int
    record_id: int
    quantity: int
    record: Optional[RecordResponse] = None

import logging
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.exceptions import NotFoundException, ValidationError
from recordstore.models.cart_item import CartItem
from recordstore.models.record import Record
from recordstore.schemas.cart import CartItemResponse
from recordstore.services import catalog_service
from recordstore.services.database import transaction

logger = logging.getLogger(__name__)


def _accumulating_upsert(dialect_name: str, user_id: int, record_id: int, quantity: int):
    """
    INSERT ... ON CONFLICT (user_id, record_id)
    DO UPDATE SET quantity = cart_items.quantity + excluded.quantity

    One statement, so concurrent adds from the same user cannot lose updates.
    """
    insert = postgresql.insert if dialect_name == "postgresql" else sqlite.insert
    cart_items = CartItem.__table__
    stmt = insert(cart_items).values(user_id=user_id, record_id=record_id, quantity=quantity)
    return stmt.on_conflict_do_update(
        index_elements=[cart_items.c.user_id, cart_items.c.record_id],
        set_={"quantity": cart_items.c.quantity + stmt.excluded.quantity},
    )


class CartService:
    """Per-user shopping cart: one row per (user, record) holding a quantity >= 1."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def _require_record(self, record_id: int) -> None:
        exists = await self.db.scalar(select(Record.id).where(Record.id == record_id))
        if exists is None:
            raise NotFoundException("Record", record_id)

    async def add_item(self, user_id: int, record_id: int, quantity: int) -> None:
        """Put a record in the cart, or add to the quantity already there."""
        if record_id is None or record_id <= 0 or quantity is None or quantity < 1:
            raise ValidationError("Valid record ID and quantity (>= 1) are required")

        async with transaction(self.db):
            await self._require_record(record_id)
            stmt = _accumulating_upsert(self.db.bind.dialect.name, user_id, record_id, quantity)
            await self.db.execute(stmt)
        logger.info(f"User {user_id} added {quantity} x record {record_id} to cart")

    async def set_quantity(self, user_id: int, record_id: int, quantity: int) -> None:
        """
        Overwrite the quantity of an existing cart row. Zero removes the row.
        Never creates a row.
        """
        if record_id is None or record_id <= 0:
            raise ValidationError("Invalid record ID")
        if quantity is None or quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        if quantity == 0:
            await self.remove_item(user_id, record_id)
            return

        async with transaction(self.db):
            await self._require_record(record_id)
            result = await self.db.execute(
                update(CartItem)
                .where(CartItem.user_id == user_id, CartItem.record_id == record_id)
                .values(quantity=quantity)
            )
            if result.rowcount == 0:
                raise NotFoundException("Cart item")
        logger.info(f"User {user_id} set record {record_id} quantity to {quantity}")

    async def remove_item(self, user_id: int, record_id: int) -> None:
        if record_id is None or record_id <= 0:
            raise ValidationError("Invalid record ID")

        async with transaction(self.db):
            result = await self.db.execute(
                delete(CartItem).where(CartItem.user_id == user_id, CartItem.record_id == record_id)
            )
            if result.rowcount == 0:
                raise NotFoundException("Cart item")
        logger.info(f"User {user_id} removed record {record_id} from cart")

    async def list_items(self, user_id: int) -> List[CartItemResponse]:
        """
        The user's cart, each row carrying its full record and tracks.
        Rows whose record has disappeared are dropped.
        """
        result = await self.db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.record_id)
            .execution_options(populate_existing=True)
        )
        items = result.scalars().all()
        if not items:
            return []

        records_by_id = await catalog_service.fetch_records_by_ids(self.db, [item.record_id for item in items])

        present = []
        for item in items:
            if item.record_id not in records_by_id:
                logger.warning(f"Cart of user {user_id} references missing record {item.record_id}; skipping")
                continue
            present.append(item)

        resolved = await catalog_service.resolve_tracks_for_records(
            self.db, [records_by_id[item.record_id] for item in present]
        )
        return [
            CartItemResponse(
                user_id=item.user_id,
                record_id=item.record_id,
                quantity=item.quantity,
                record=record,
            )
            for item, record in zip(present, resolved)
        ]

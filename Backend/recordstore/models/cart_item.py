from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint

from recordstore.services.database import Base


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    # One row per user and record; repeated adds accumulate into quantity
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    record_id = Column(Integer, ForeignKey("records.id", ondelete="CASCADE"), primary_key=True, index=True)
    quantity = Column(Integer, nullable=False, default=1)

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.security import get_current_user
from recordstore.schemas.base import MessageResponse
from recordstore.schemas.cart import CartItemCreate, CartItemResponse, CartItemUpdate
from recordstore.schemas.user import CurrentUser
from recordstore.services.cart_service import CartService
from recordstore.services.database import get_db

router = APIRouter()


@router.get("/cart", response_model=List[CartItemResponse])
async def get_cart(db: AsyncSession = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    cart_service = CartService(db)
    return await cart_service.list_items(current_user.user_id)


@router.post("/cart", response_model=MessageResponse)
async def add_to_cart(
    item: CartItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    cart_service = CartService(db)
    await cart_service.add_item(current_user.user_id, item.record_id, item.quantity)
    return MessageResponse(message="Item added to cart")


@router.put("/cart/{record_id}", response_model=MessageResponse)
async def update_cart_item(
    record_id: int,
    item: CartItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    cart_service = CartService(db)
    await cart_service.set_quantity(current_user.user_id, record_id, item.quantity)
    if item.quantity == 0:
        return MessageResponse(message="Item removed from cart")
    return MessageResponse(message="Cart item quantity updated")


@router.delete("/cart/{record_id}", response_model=MessageResponse)
async def remove_from_cart(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    cart_service = CartService(db)
    await cart_service.remove_item(current_user.user_id, record_id)
    return MessageResponse(message="Item removed from cart")

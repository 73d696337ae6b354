from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.security import get_current_user
from recordstore.schemas.user import CurrentUser, UserResponse, UserUpdate
from recordstore.services import user_service
from recordstore.services.database import get_db

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def read_profile(db: AsyncSession = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    """
    Fetch the current logged-in user.
    """
    return await user_service.get_user(db, current_user.user_id)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return await user_service.update_profile(db, current_user.user_id, user_data)

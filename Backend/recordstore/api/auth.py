from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.schemas.base import MessageResponse
from recordstore.schemas.user import Token, UserCreate, UserLogin
from recordstore.services import user_service
from recordstore.services.database import get_db

router = APIRouter()


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    await user_service.register_user(db, user_data)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    token = await user_service.authenticate(db, credentials.username, credentials.password)
    return Token(token=token)

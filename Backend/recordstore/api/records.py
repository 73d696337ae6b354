from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.schemas.record import RecordResponse
from recordstore.services import catalog_service
from recordstore.services.database import get_db

router = APIRouter()


@router.get("/records", response_model=List[RecordResponse])
async def list_records(db: AsyncSession = Depends(get_db)) -> List[RecordResponse]:
    """List every record in the catalog with its tracks"""
    return await catalog_service.list_records(db)


@router.get("/records/{record_id}", response_model=RecordResponse)
async def read_record(record_id: int, db: AsyncSession = Depends(get_db)) -> RecordResponse:
    return await catalog_service.get_record(db, record_id)

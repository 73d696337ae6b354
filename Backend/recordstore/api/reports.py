from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.security import get_current_admin
from recordstore.schemas.record import RecordResponse
from recordstore.schemas.report import EnsembleTrackCount
from recordstore.services import catalog_service
from recordstore.services.database import get_db

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/ensemble-tracks/{ensemble_id}", response_model=EnsembleTrackCount)
async def ensemble_track_count(ensemble_id: int, db: AsyncSession = Depends(get_db)):
    """How many tracks the ensemble owns"""
    track_count = await catalog_service.count_ensemble_tracks(db, ensemble_id)
    return EnsembleTrackCount(ensemble_id=ensemble_id, track_count=track_count)


@router.get("/ensemble-records/{ensemble_id}", response_model=List[RecordResponse])
async def ensemble_records(ensemble_id: int, db: AsyncSession = Depends(get_db)):
    """Records carrying at least one of the ensemble's tracks"""
    return await catalog_service.get_records_by_ensemble(db, ensemble_id)


@router.get("/bestsellers", response_model=List[RecordResponse])
async def best_sellers(db: AsyncSession = Depends(get_db)):
    """All records ordered by sales this year, best first"""
    return await catalog_service.get_best_sellers(db)

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.security import get_current_admin
from recordstore.schemas.base import CreatedResponse, MessageResponse
from recordstore.schemas.ensemble import EnsembleCreate, EnsembleResponse
from recordstore.schemas.musician import MusicianCreate, MusicianResponse
from recordstore.schemas.record import RecordCreate, RecordUpdate
from recordstore.schemas.track import TrackResponse
from recordstore.services import admin_service, catalog_service
from recordstore.services.database import get_db

# Every route here requires an admin token
router = APIRouter(dependencies=[Depends(get_current_admin)])


# Records
@router.post("/records", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_record(record_data: RecordCreate, db: AsyncSession = Depends(get_db)):
    record_id = await admin_service.create_record(db, record_data)
    return CreatedResponse(message="Record added successfully", id=record_id)


@router.put("/records/{record_id}", response_model=MessageResponse)
async def update_record(record_id: int, record_data: RecordUpdate, db: AsyncSession = Depends(get_db)):
    await admin_service.update_record(db, record_id, record_data)
    return MessageResponse(message="Record updated successfully")


@router.delete("/records/{record_id}", response_model=MessageResponse)
async def delete_record(record_id: int, db: AsyncSession = Depends(get_db)):
    await admin_service.delete_record(db, record_id)
    return MessageResponse(message="Record deleted successfully")


# Musicians
@router.get("/musicians", response_model=List[MusicianResponse])
async def list_musicians(db: AsyncSession = Depends(get_db)):
    return await admin_service.list_musicians(db)


@router.post("/musicians", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_musician(musician_data: MusicianCreate, db: AsyncSession = Depends(get_db)):
    musician_id = await admin_service.create_musician(db, musician_data)
    return CreatedResponse(message="Musician added successfully", id=musician_id)


@router.delete("/musicians/{musician_id}", response_model=MessageResponse)
async def delete_musician(musician_id: int, db: AsyncSession = Depends(get_db)):
    await admin_service.delete_musician(db, musician_id)
    return MessageResponse(message="Musician deleted successfully")


# Ensembles
@router.get("/ensembles", response_model=List[EnsembleResponse])
async def list_ensembles(db: AsyncSession = Depends(get_db)):
    """Used by the frontend to pick a musician's ensemble"""
    return await admin_service.list_ensembles(db)


@router.post("/ensembles", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_ensemble(ensemble_data: EnsembleCreate, db: AsyncSession = Depends(get_db)):
    ensemble_id = await admin_service.create_ensemble(db, ensemble_data)
    return CreatedResponse(message="Ensemble added successfully", id=ensemble_id)


@router.delete("/ensembles/{ensemble_id}", response_model=MessageResponse)
async def delete_ensemble(ensemble_id: int, db: AsyncSession = Depends(get_db)):
    await admin_service.delete_ensemble(db, ensemble_id)
    return MessageResponse(message="Ensemble deleted successfully")


# Tracks
@router.get("/tracks", response_model=List[TrackResponse])
async def list_tracks(db: AsyncSession = Depends(get_db)):
    """Used by the frontend to pick the tracks of a record"""
    return await catalog_service.list_tracks(db)


@router.get("/tracks/{track_id}", response_model=TrackResponse)
async def read_track(track_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog_service.get_track(db, track_id)

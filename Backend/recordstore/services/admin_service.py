"""
Admin writes for the catalog. Every operation that touches more than one
row runs inside a single transaction: a failure half-way leaves nothing
behind.
"""
import logging
from typing import List, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from recordstore.core.exceptions import ConflictError, NotFoundException, ValidationError
from recordstore.models.ensemble import Ensemble
from recordstore.models.musician import Musician
from recordstore.models.record import Record
from recordstore.models.record_track import record_tracks
from recordstore.models.track import Track
from recordstore.schemas.ensemble import EnsembleCreate, EnsembleResponse
from recordstore.schemas.musician import MusicianCreate, MusicianResponse
from recordstore.schemas.record import RecordBase, RecordCreate, RecordUpdate
from recordstore.schemas.track import TrackCreate
from recordstore.services.database import select_in, transaction

logger = logging.getLogger(__name__)


def _validate_record(record_data: RecordBase) -> None:
    if not record_data.title or not record_data.title.strip():
        raise ValidationError("Title is required for a record")
    if record_data.stock < 0:
        raise ValidationError("Stock cannot be negative")
    if record_data.wholesale_price < 0 or record_data.retail_price < 0:
        raise ValidationError("Prices cannot be negative")


def _valid_tracks(tracks: Sequence[TrackCreate], owner: str) -> List[TrackCreate]:
    """Drop tracks without a name or with a non-positive duration."""
    valid = []
    for track in tracks:
        if not track.name or not track.name.strip() or track.duration <= 0:
            logger.warning(f"Skipping incomplete track {track.name!r} ({track.duration}s) for {owner}")
            continue
        valid.append(track)
    return valid


async def _link_tracks(db: AsyncSession, record_id: int, track_ids: Sequence[int]) -> int:
    """
    Link existing tracks to a record in the given order.
    Unknown IDs are skipped, repeated IDs linked once. Returns the number of links.
    """
    wanted = list(dict.fromkeys(track_ids))
    if not wanted:
        return 0

    existing = set(await select_in(db, select(Track.id), Track.id, wanted, scalars=True))
    links = []
    for track_id in wanted:
        if track_id not in existing:
            logger.warning(f"Track {track_id} does not exist; not linking it to record {record_id}")
            continue
        links.append({"record_id": record_id, "track_id": track_id, "position": len(links)})

    if links:
        await db.execute(insert(record_tracks), links)
    return len(links)


async def create_record(db: AsyncSession, record_data: RecordCreate) -> int:
    _validate_record(record_data)

    async with transaction(db):
        record = Record(
            title=record_data.title.strip(),
            label=record_data.label,
            wholesale_address=record_data.wholesale_address,
            wholesale_price=record_data.wholesale_price,
            retail_price=record_data.retail_price,
            release_date=record_data.release_date,
            stock=record_data.stock,
            sold_last_year=0,
            sold_current_year=0,
        )
        db.add(record)
        await db.flush()  # Use flush to get the ID before the transaction commits.
        linked = await _link_tracks(db, record.id, record_data.track_ids)

    logger.info(f"Created record {record.id} '{record.title}' with {linked} tracks")
    return record.id


async def update_record(db: AsyncSession, record_id: int, record_data: RecordUpdate) -> int:
    _validate_record(record_data)
    for value in (record_data.sold_last_year, record_data.sold_current_year):
        if value is not None and value < 0:
            raise ValidationError("Sales counters cannot be negative")

    async with transaction(db):
        record = await db.get(Record, record_id)
        if record is None:
            raise NotFoundException("Record", record_id)

        record.title = record_data.title.strip()
        record.label = record_data.label
        record.wholesale_address = record_data.wholesale_address
        record.wholesale_price = record_data.wholesale_price
        record.retail_price = record_data.retail_price
        record.release_date = record_data.release_date
        record.stock = record_data.stock
        if record_data.sold_last_year is not None:
            record.sold_last_year = record_data.sold_last_year
        if record_data.sold_current_year is not None:
            record.sold_current_year = record_data.sold_current_year

        if record_data.track_ids is not None:
            await db.execute(delete(record_tracks).where(record_tracks.c.record_id == record_id))
            await _link_tracks(db, record_id, record_data.track_ids)

    logger.info(f"Updated record {record_id}")
    return record_id


async def delete_record(db: AsyncSession, record_id: int) -> None:
    """Cart rows and track links go with the record; the tracks stay."""
    async with transaction(db):
        result = await db.execute(delete(Record).where(Record.id == record_id))
        if result.rowcount == 0:
            raise NotFoundException("Record", record_id)
    logger.info(f"Deleted record {record_id}")


async def create_musician(db: AsyncSession, musician_data: MusicianCreate) -> int:
    first_name = (musician_data.first_name or "").strip()
    last_name = (musician_data.last_name or "").strip()
    if not first_name or not last_name:
        raise ValidationError("First name and last name are required for a musician")
    tracks = _valid_tracks(musician_data.tracks, f"musician {first_name} {last_name}")

    async with transaction(db):
        if musician_data.ensemble_id is not None:
            ensemble = await db.get(Ensemble, musician_data.ensemble_id)
            if ensemble is None:
                raise NotFoundException("Ensemble", musician_data.ensemble_id)

        musician = Musician(
            first_name=first_name,
            last_name=last_name,
            role=musician_data.role,
            ensemble_id=musician_data.ensemble_id,
        )
        db.add(musician)
        await db.flush()

        db.add_all([
            Track(name=track.name.strip(), duration=track.duration, musician_id=musician.id)
            for track in tracks
        ])

    logger.info(f"Created musician {musician.id} with {len(tracks)} tracks")
    return musician.id


async def create_ensemble(db: AsyncSession, ensemble_data: EnsembleCreate) -> int:
    name = (ensemble_data.name or "").strip()
    if not name:
        raise ValidationError("Name is required for an ensemble")
    tracks = _valid_tracks(ensemble_data.tracks, f"ensemble {name}")

    async with transaction(db):
        duplicate = await db.scalar(select(Ensemble.id).where(Ensemble.name == name))
        if duplicate is not None:
            raise ConflictError("Ensemble name already exists")

        ensemble = Ensemble(name=name, type=ensemble_data.type)
        db.add(ensemble)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent insert of the same name
            raise ConflictError("Ensemble name already exists")

        db.add_all([
            Track(name=track.name.strip(), duration=track.duration, ensemble_id=ensemble.id)
            for track in tracks
        ])

    logger.info(f"Created ensemble {ensemble.id} '{name}' with {len(tracks)} tracks")
    return ensemble.id


async def list_ensembles(db: AsyncSession) -> List[EnsembleResponse]:
    result = await db.execute(select(Ensemble).order_by(Ensemble.id).execution_options(populate_existing=True))
    return [EnsembleResponse.model_validate(ensemble) for ensemble in result.scalars().all()]


async def list_musicians(db: AsyncSession) -> List[MusicianResponse]:
    result = await db.execute(
        select(Musician)
        .options(selectinload(Musician.ensemble))
        .order_by(Musician.id)
        .execution_options(populate_existing=True)
    )
    musicians = []
    for musician in result.scalars().all():
        response = MusicianResponse.model_validate(musician)
        response.ensemble_name = musician.ensemble.name if musician.ensemble else None
        musicians.append(response)
    return musicians


async def delete_musician(db: AsyncSession, musician_id: int) -> None:
    """The musician's tracks are deleted with them (and unlinked from records)."""
    async with transaction(db):
        result = await db.execute(delete(Musician).where(Musician.id == musician_id))
        if result.rowcount == 0:
            raise NotFoundException("Musician", musician_id)
    logger.info(f"Deleted musician {musician_id}")


async def delete_ensemble(db: AsyncSession, ensemble_id: int) -> None:
    """Ensemble tracks are deleted; members stay, without an ensemble."""
    async with transaction(db):
        result = await db.execute(delete(Ensemble).where(Ensemble.id == ensemble_id))
        if result.rowcount == 0:
            raise NotFoundException("Ensemble", ensemble_id)
    logger.info(f"Deleted ensemble {ensemble_id}")

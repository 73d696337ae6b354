"""
Catalog aggregation: turns record rows into the nested record -> tracks ->
owner-name tree the API returns.

Every listing (catalog, cart, best sellers, ensemble report) funnels through
``resolve_tracks_for_records``, which fetches in two batched steps no matter
how many records are involved:

1. the (record_id, track_id) links for all requested records;
2. the distinct linked tracks, left-joined with their musician and ensemble.

Links to tracks that cannot be resolved are logged and skipped so one bad
row never takes down a whole listing.
"""
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.exceptions import IntegrityWarning, NotFoundException
from recordstore.models.ensemble import Ensemble
from recordstore.models.musician import Musician
from recordstore.models.record import Record
from recordstore.models.record_track import record_tracks
from recordstore.models.track import Track
from recordstore.schemas.record import RecordResponse
from recordstore.schemas.track import TrackResponse
from recordstore.services.database import select_in

logger = logging.getLogger(__name__)

UNKNOWN_MUSICIAN = "Unknown Musician"
UNKNOWN_ENSEMBLE = "Unknown Ensemble"


def _tracks_with_owners():
    """Tracks left-joined with whichever owner they reference."""
    return (
        select(
            Track.id,
            Track.name,
            Track.duration,
            Track.musician_id,
            Track.ensemble_id,
            Musician.first_name.label("musician_first_name"),
            Musician.last_name.label("musician_last_name"),
            Ensemble.name.label("ensemble_name"),
        )
        .outerjoin(Musician, Track.musician_id == Musician.id)
        .outerjoin(Ensemble, Track.ensemble_id == Ensemble.id)
    )


def musician_display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    name = f"{first_name or ''} {last_name or ''}".strip()
    return name or UNKNOWN_MUSICIAN


def ensemble_display_name(name: Optional[str]) -> str:
    return name or UNKNOWN_ENSEMBLE


def _warn(issue: IntegrityWarning) -> None:
    logger.warning(f"Integrity warning: {issue}")


def track_from_row(row) -> TrackResponse:
    """Build a track response from a ``_tracks_with_owners`` row."""
    track = TrackResponse(id=row.id, name=row.name, duration=row.duration)

    if row.musician_id is not None and row.ensemble_id is not None:
        _warn(IntegrityWarning("Track", row.id, "has both a musician and an ensemble; showing the musician"))
    elif row.musician_id is None and row.ensemble_id is None:
        _warn(IntegrityWarning("Track", row.id, "has no owner"))

    if row.musician_id is not None:
        track.musician_id = row.musician_id
        track.musician_name = musician_display_name(row.musician_first_name, row.musician_last_name)
    elif row.ensemble_id is not None:
        track.ensemble_id = row.ensemble_id
        track.ensemble_name = ensemble_display_name(row.ensemble_name)
    return track


async def resolve_tracks_for_records(db: AsyncSession, records: Sequence[Record]) -> List[RecordResponse]:
    """
    Attach the resolved track list to each record.

    The result has one entry per input record, in input order. A record with
    no links gets an empty track list; links to tracks that no longer exist
    are skipped with a warning.
    """
    if not records:
        return []

    record_ids = [record.id for record in records]

    # 1. Links for all records at once
    link_rows = await select_in(
        db,
        select(record_tracks.c.record_id, record_tracks.c.track_id).order_by(
            record_tracks.c.record_id, record_tracks.c.position, record_tracks.c.track_id
        ),
        record_tracks.c.record_id,
        record_ids,
    )
    links: Dict[int, List[int]] = {}
    for record_id, track_id in link_rows:
        links.setdefault(record_id, []).append(track_id)

    # 2. Every distinct linked track, with its owner
    track_ids = [track_id for track_ids in links.values() for track_id in track_ids]
    tracks_by_id: Dict[int, TrackResponse] = {}
    if track_ids:
        track_rows = await select_in(db, _tracks_with_owners(), Track.id, track_ids)
        for row in track_rows:
            tracks_by_id[row.id] = track_from_row(row)

    # 3. Re-attach, preserving record order
    responses = []
    for record in records:
        response = RecordResponse.model_validate(record)
        response.tracks = []
        for track_id in links.get(record.id, []):
            track = tracks_by_id.get(track_id)
            if track is None:
                _warn(IntegrityWarning("Track", track_id, f"linked from record {record.id} was not found"))
                continue
            response.tracks.append(track)
        responses.append(response)
    return responses


async def fetch_records_by_ids(db: AsyncSession, record_ids: Sequence[int]) -> Dict[int, Record]:
    """Load records for the given IDs, keyed by id. Missing IDs are simply absent."""
    records = await select_in(
        db,
        select(Record).execution_options(populate_existing=True),
        Record.id,
        record_ids,
        scalars=True,
    )
    return {record.id: record for record in records}


async def list_records(db: AsyncSession) -> List[RecordResponse]:
    """The full catalog, in insertion order."""
    result = await db.execute(select(Record).order_by(Record.id).execution_options(populate_existing=True))
    return await resolve_tracks_for_records(db, result.scalars().all())


async def get_record(db: AsyncSession, record_id: int) -> RecordResponse:
    result = await db.execute(
        select(Record).where(Record.id == record_id).execution_options(populate_existing=True)
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundException("Record", record_id)
    resolved = await resolve_tracks_for_records(db, [record])
    return resolved[0]


async def get_best_sellers(db: AsyncSession) -> List[RecordResponse]:
    """Records by current-year sales, highest first; ties keep insertion order."""
    result = await db.execute(
        select(Record)
        .order_by(Record.sold_current_year.desc(), Record.id)
        .execution_options(populate_existing=True)
    )
    return await resolve_tracks_for_records(db, result.scalars().all())


async def _require_ensemble(db: AsyncSession, ensemble_id: int) -> None:
    exists = await db.scalar(select(Ensemble.id).where(Ensemble.id == ensemble_id))
    if exists is None:
        raise NotFoundException("Ensemble", ensemble_id)


async def count_ensemble_tracks(db: AsyncSession, ensemble_id: int) -> int:
    await _require_ensemble(db, ensemble_id)
    count = await db.scalar(select(func.count()).select_from(Track).where(Track.ensemble_id == ensemble_id))
    return count or 0


async def get_records_by_ensemble(db: AsyncSession, ensemble_id: int) -> List[RecordResponse]:
    """
    Records carrying at least one track owned by the ensemble:
    tracks of the ensemble -> distinct records linking them -> full records.
    """
    await _require_ensemble(db, ensemble_id)

    result = await db.execute(select(Track.id).where(Track.ensemble_id == ensemble_id))
    track_ids = result.scalars().all()
    if not track_ids:
        return []

    record_ids = await select_in(
        db,
        select(record_tracks.c.record_id).distinct(),
        record_tracks.c.track_id,
        track_ids,
        scalars=True,
    )
    if not record_ids:
        return []

    records_by_id = await fetch_records_by_ids(db, record_ids)
    records = [records_by_id[record_id] for record_id in sorted(set(record_ids)) if record_id in records_by_id]
    return await resolve_tracks_for_records(db, records)


async def list_tracks(db: AsyncSession) -> List[TrackResponse]:
    """Every track with its owner's display name (used to pick tracks for a record)."""
    result = await db.execute(_tracks_with_owners().order_by(Track.id))
    return [track_from_row(row) for row in result.all()]


async def get_track(db: AsyncSession, track_id: int) -> TrackResponse:
    result = await db.execute(_tracks_with_owners().where(Track.id == track_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundException("Track", track_id)
    return track_from_row(row)

import pytest
from sqlalchemy.exc import OperationalError

from recordstore.core.exceptions import ConflictError, NotFoundException, StorageError, ValidationError
from recordstore.models.track import Track
from recordstore.schemas.ensemble import EnsembleCreate
from recordstore.schemas.musician import MusicianCreate
from recordstore.schemas.record import RecordCreate, RecordUpdate
from recordstore.services import admin_service, catalog_service
from recordstore.services.database import transaction

from factories import add_ensemble, add_musician, add_record, track_ids_by_name


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [
    {"title": "   "},
    {"title": "Fine", "stock": -1},
    {"title": "Fine", "retail_price": -0.5},
    {"title": "Fine", "wholesale_price": -3},
])
async def test_create_record_validation(session, fields):
    with pytest.raises(ValidationError):
        await admin_service.create_record(session, RecordCreate(**fields))

    assert await catalog_service.list_records(session) == []


@pytest.mark.asyncio
async def test_create_record_starts_with_zero_sales(session):
    record_id = await admin_service.create_record(
        session,
        RecordCreate(
            title="  Moanin'  ",
            label="Blue Note",
            wholesale_address="1 Lexington Ave",
            wholesale_price=9.5,
            retail_price=21.0,
            release_date="1958-10-30",
            stock=3,
        ),
    )

    record = await catalog_service.get_record(session, record_id)
    assert record.title == "Moanin'"
    assert record.label == "Blue Note"
    assert record.release_date == "1958-10-30"
    assert (record.sold_last_year, record.sold_current_year) == (0, 0)
    assert record.tracks == []


@pytest.mark.asyncio
async def test_create_record_links_tracks_in_order(session):
    await add_musician(session, "Art", "Blakey", tracks=[("Blues March", 375), ("Along Came Betty", 372)])
    tracks = await track_ids_by_name(session)

    record_id = await add_record(
        session,
        "Moanin'",
        track_ids=[tracks["Along Came Betty"], 9999, tracks["Blues March"], tracks["Along Came Betty"]],
    )

    record = await catalog_service.get_record(session, record_id)
    # Unknown IDs are skipped and repeats linked once
    assert [track.name for track in record.tracks] == ["Along Came Betty", "Blues March"]


@pytest.mark.asyncio
async def test_update_record_replaces_fields_and_tracks(session):
    await add_ensemble(session, "Septet", tracks=[("Old", 100), ("New", 200)])
    tracks = await track_ids_by_name(session)
    record_id = await add_record(session, "Draft", track_ids=[tracks["Old"]])

    await admin_service.update_record(
        session,
        record_id,
        RecordUpdate(title="Final", retail_price=25, stock=8, sold_last_year=40, sold_current_year=12,
                     track_ids=[tracks["New"], tracks["Old"]]),
    )

    record = await catalog_service.get_record(session, record_id)
    assert (record.title, record.retail_price, record.stock) == ("Final", 25, 8)
    assert (record.sold_last_year, record.sold_current_year) == (40, 12)
    assert [track.name for track in record.tracks] == ["New", "Old"]


@pytest.mark.asyncio
async def test_update_record_without_track_ids_keeps_links(session):
    await add_ensemble(session, "Duo", tracks=[("Stay", 100)])
    tracks = await track_ids_by_name(session)
    record_id = await add_record(session, "Steady", track_ids=[tracks["Stay"]])

    await admin_service.update_record(session, record_id, RecordUpdate(title="Steady (Remaster)", stock=2))

    record = await catalog_service.get_record(session, record_id)
    assert record.title == "Steady (Remaster)"
    assert (record.sold_last_year, record.sold_current_year) == (0, 0)
    assert [track.name for track in record.tracks] == ["Stay"]


@pytest.mark.asyncio
async def test_update_record_errors(session):
    record_id = await add_record(session, "Untouched")

    with pytest.raises(NotFoundException):
        await admin_service.update_record(session, 999, RecordUpdate(title="Ghost"))
    with pytest.raises(ValidationError):
        await admin_service.update_record(session, record_id, RecordUpdate(title="Oops", sold_current_year=-1))

    record = await catalog_service.get_record(session, record_id)
    assert record.title == "Untouched"


@pytest.mark.asyncio
async def test_delete_unknown_rows(session):
    with pytest.raises(NotFoundException):
        await admin_service.delete_record(session, 1)
    with pytest.raises(NotFoundException):
        await admin_service.delete_musician(session, 1)
    with pytest.raises(NotFoundException):
        await admin_service.delete_ensemble(session, 1)


@pytest.mark.asyncio
async def test_ensemble_names_are_unique(session):
    await add_ensemble(session, "Quartet A", tracks=[("Intro", 120)])

    with pytest.raises(ConflictError) as exc_info:
        await add_ensemble(session, "  Quartet A ", tracks=[("Copy", 60)])

    assert exc_info.value.status_code == 409
    assert [e.name for e in await admin_service.list_ensembles(session)] == ["Quartet A"]
    assert list(await track_ids_by_name(session)) == ["Intro"]


@pytest.mark.asyncio
async def test_incomplete_tracks_are_skipped(session):
    await add_ensemble(session, "Sloppy", tracks=[("Good", 90), ("", 60), ("Zero", 0), ("Negative", -5)])

    tracks = await catalog_service.list_tracks(session)
    assert [(t.name, t.ensemble_name) for t in tracks] == [("Good", "Sloppy")]


@pytest.mark.asyncio
async def test_required_names(session):
    with pytest.raises(ValidationError):
        await admin_service.create_ensemble(session, EnsembleCreate(name=" "))
    with pytest.raises(ValidationError):
        await admin_service.create_musician(session, MusicianCreate(first_name="Miles", last_name=""))


@pytest.mark.asyncio
async def test_musician_with_unknown_ensemble_leaves_nothing_behind(session):
    with pytest.raises(NotFoundException):
        await add_musician(session, "Lost", "Soul", tracks=[("Wandering", 200)], ensemble_id=77)

    assert await admin_service.list_musicians(session) == []
    assert await catalog_service.list_tracks(session) == []


@pytest.mark.asyncio
async def test_list_musicians_includes_ensemble_name(session):
    ensemble_id = await add_ensemble(session, "Jazz Messengers")
    await add_musician(session, "Lee", "Morgan", ensemble_id=ensemble_id)
    await add_musician(session, "Free", "Agent")

    musicians = await admin_service.list_musicians(session)

    assert [(m.first_name, m.ensemble_id, m.ensemble_name) for m in musicians] == [
        ("Lee", ensemble_id, "Jazz Messengers"),
        ("Free", None, None),
    ]
    assert musicians[0].model_dump(by_alias=True)["ensembleName"] == "Jazz Messengers"


@pytest.mark.asyncio
async def test_failed_track_linking_rolls_back_the_record(session, monkeypatch):
    await add_ensemble(session, "Flaky", tracks=[("Glitch", 100)])
    tracks = await track_ids_by_name(session)

    async def broken_link_tracks(db, record_id, track_ids):
        raise OperationalError("INSERT INTO record_tracks", {}, Exception("disk I/O error"))

    monkeypatch.setattr(admin_service, "_link_tracks", broken_link_tracks)

    with pytest.raises(StorageError):
        await add_record(session, "Half Written", track_ids=[tracks["Glitch"]])

    # The record row was flushed before linking failed; it must be gone too
    assert await catalog_service.list_records(session) == []


@pytest.mark.asyncio
async def test_track_cannot_have_two_owners(session):
    ensemble_id = await add_ensemble(session, "Owners")
    musician_id = await add_musician(session, "Also", "Owner")

    with pytest.raises(StorageError) as exc_info:
        async with transaction(session):
            session.add(Track(name="Disputed", duration=100, musician_id=musician_id, ensemble_id=ensemble_id))

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Internal server error"
    assert await catalog_service.list_tracks(session) == []

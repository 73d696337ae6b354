import sys
import os
import asyncio

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from dotenv import load_dotenv

load_dotenv(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '.env')))

from recordstore.core.config import settings
from recordstore.schemas.ensemble import EnsembleCreate
from recordstore.schemas.musician import MusicianCreate
from recordstore.schemas.record import RecordCreate, RecordUpdate
from recordstore.services import admin_service, catalog_service
from recordstore.services.database import Database


async def create_demo_data():
    database = Database(settings.DATABASE_URL)
    await database.create_all()

    async with database.session() as session:
        # Ensembles with their own tracks
        quintet_id = await admin_service.create_ensemble(session, EnsembleCreate(
            name="Miles Davis Quintet",
            type="quintet",
            tracks=[{"name": "So What", "duration": 562}, {"name": "Freddie Freeloader", "duration": 586}],
        ))
        orchestra_id = await admin_service.create_ensemble(session, EnsembleCreate(
            name="Berliner Philharmoniker",
            type="orchestra",
            tracks=[{"name": "Symphony No. 5: I. Allegro con brio", "duration": 447}],
        ))

        # Musicians, one of them a member of the quintet
        await admin_service.create_musician(session, MusicianCreate(
            first_name="John",
            last_name="Coltrane",
            role="saxophonist",
            ensemble_id=quintet_id,
            tracks=[{"name": "Giant Steps", "duration": 286}],
        ))
        await admin_service.create_musician(session, MusicianCreate(
            first_name="Glenn",
            last_name="Gould",
            role="pianist",
            tracks=[{"name": "Goldberg Variations: Aria", "duration": 187}],
        ))

        tracks = {track.name: track.id for track in await catalog_service.list_tracks(session)}

        # Records linking those tracks
        records = [
            (RecordCreate(
                title="Kind of Blue",
                label="Columbia",
                wholesale_price=12.5,
                retail_price=24.99,
                release_date="1959-08-17",
                stock=40,
                track_ids=[tracks["So What"], tracks["Freddie Freeloader"]],
            ), 120, 310),
            (RecordCreate(
                title="Giant Steps",
                label="Atlantic",
                wholesale_price=10.0,
                retail_price=19.99,
                release_date="1960-01-27",
                stock=25,
                track_ids=[tracks["Giant Steps"]],
            ), 80, 95),
            (RecordCreate(
                title="Beethoven & Bach",
                label="EMI",
                wholesale_price=8.0,
                retail_price=15.99,
                release_date="1981-04-01",
                stock=10,
                track_ids=[tracks["Symphony No. 5: I. Allegro con brio"], tracks["Goldberg Variations: Aria"]],
            ), 30, 12),
        ]
        for record_data, sold_last_year, sold_current_year in records:
            record_id = await admin_service.create_record(session, record_data)
            await admin_service.update_record(session, record_id, RecordUpdate(
                **record_data.model_dump(exclude={"track_ids"}),
                sold_last_year=sold_last_year,
                sold_current_year=sold_current_year,
            ))

        print(f"✅ Demo data created successfully! (ensembles {quintet_id}, {orchestra_id})")

    await database.dispose()


if __name__ == "__main__":
    asyncio.run(create_demo_data())

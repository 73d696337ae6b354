import asyncio
import os
import sys
from dotenv import load_dotenv

# The 'recordstore' package lives under Backend/, and settings come from the root .env
backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend'))
sys.path.append(backend_dir)
load_dotenv(os.path.join(os.path.dirname(backend_dir), ".env"))

# Settings are read on import, so these must come after load_dotenv
from recordstore.core.config import settings  # noqa: E402
from recordstore.services import user_service  # noqa: E402
from recordstore.services.database import Base, Database  # noqa: E402


async def create_all_tables():
    """Create every record store table, then the configured admin account (if any)."""
    print(f"\nCreating tables on {settings.DATABASE_URL.split('@')[-1]} ...")
    database = Database(settings.DATABASE_URL)
    try:
        await database.create_all()
        print(f" Tables ready: {', '.join(sorted(Base.metadata.tables))}")

        async with database.session() as session:
            admin = await user_service.ensure_admin_user(session, settings)
        if admin is not None:
            print(f" Admin account: {admin.username}")
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(create_all_tables())

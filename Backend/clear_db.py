import asyncio

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from recordstore.core.config import settings  # noqa: E402
from recordstore.services.database import Base, Database, register_models  # noqa: E402

# Accounts survive a reset; everything else is catalog or cart data
KEPT_TABLES = {"users"}


async def clear_database():
    """
    Drop the catalog and cart tables (records, tracks, musicians, ensembles,
    their links and every cart). Run scripts/create_tables.py afterwards to
    get empty ones back.
    """
    register_models()
    tables = [table for table in Base.metadata.sorted_tables if table.name not in KEPT_TABLES]

    database = Database(settings.DATABASE_URL)
    try:
        async with database.engine.begin() as conn:
            print(f"Dropping {', '.join(table.name for table in tables)}...")
            # drop_all orders the tables so dependants go first
            await conn.run_sync(Base.metadata.drop_all, tables=tables)
        print("Tables cleared successfully.")
    finally:
        await database.dispose()


if __name__ == "__main__":
    print("This script will permanently delete all records, tracks, musicians, ensembles and carts.")
    confirm = input("Are you sure you want to continue? (y/n): ")
    if confirm.lower() == 'y':
        asyncio.run(clear_database())
    else:
        print("Operation cancelled.")

"""Create the snippet tables in the configured database."""
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text

from snippet_manager.config import settings
from snippet_manager.database import async_session_factory, create_tables, engine


async def init_db():
    print(f"Connecting to {settings.DATABASE_URL.split('@')[-1]}")
    async with async_session_factory() as session:
        await session.execute(text("SELECT 1"))
    print("  Database reachable")

    await create_tables()
    print("  Tables created (existing tables left untouched)")

    await engine.dispose()
    print("Init complete!")


if __name__ == "__main__":
    asyncio.run(init_db())

import asyncio
import sys
import os

# Add backend to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mass_translate.models import init_db, AsyncSessionLocal
from mass_translate.services.user_service import user_service


async def create_tables():
    """Create all database tables and the initial admin"""
    print("Creating database tables...")
    print("Tables to create:")
    print("  - users")

    await init_db()

    async with AsyncSessionLocal() as db:
        await user_service.ensure_admin(db)

    print("✅ All tables created successfully!")


if __name__ == "__main__":
    asyncio.run(create_tables())

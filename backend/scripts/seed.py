"""Database seed script: creates tables and loads the built-in template library.

Run: python -m scripts.seed
"""

import asyncio
import sys
import os

# Ensure project root is in path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


async def seed():
    """Seed the database with default data."""
    from db.database import AsyncSessionLocal, close_db, init_db
    from services.template_library import seed_templates

    # Initialize DB tables
    await init_db()

    async with AsyncSessionLocal() as db:
        count = await seed_templates(db)
        await db.commit()
        print(f"[seed] {count} built-in templates ready")

    await close_db()
    print("[seed] Database seeded successfully!")


if __name__ == "__main__":
    asyncio.run(seed())

"""
Apply the SQL files in migrations/ to the configured database, in name order
"""
import asyncio
import logging
from pathlib import Path

from src.db.connection import db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


async def apply_migrations(dry_run: bool = False) -> list[str]:
    """
    Run every migration file

    Files are written to be idempotent (IF NOT EXISTS / ON CONFLICT), so
    re-running is safe.

    Returns:
        Names of the files applied
    """
    files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not files:
        logger.warning(f"No migrations found in {MIGRATIONS_DIR}")
        return []

    if dry_run:
        for path in files:
            logger.info(f"[dry-run] would apply {path.name}")
        return [path.name for path in files]

    await db.init_pool()
    try:
        async with db.connection() as conn:
            for path in files:
                logger.info(f"Applying {path.name}...")
                await conn.execute(path.read_text(encoding="utf-8"))
                await conn.commit()
    finally:
        await db.close_pool()

    logger.info(f"Applied {len(files)} migration(s)")
    return [path.name for path in files]


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Apply BeeLearn gamification migrations")
    parser.add_argument("--dry-run", action="store_true", help="List migrations without running them")

    args = parser.parse_args()
    asyncio.run(apply_migrations(dry_run=args.dry_run))

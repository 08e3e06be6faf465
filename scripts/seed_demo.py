"""Seed the demo accounts and task into the database.

Usage:
    python scripts/seed_demo.py [--database-url URL]

Creates missing tables, then writes the demo admin (admin@fnds.com), an
approved employee (john@fnds.com) with a GCash profile and one open task.
Existing rows with the same ids are replaced.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from taskpay.config import get_settings
from taskpay.database import create_schema, get_engine, make_session_factory
from taskpay.persistence import SqlAlchemyRepository, demo_snapshot

logger = logging.getLogger("seed_demo")


async def seed(database_url: str) -> None:
    """Write every demo entity through the repository."""
    engine = get_engine(database_url)
    try:
        await create_schema(engine)
        repository = SqlAlchemyRepository(make_session_factory(engine))
        snapshot = demo_snapshot()

        # Users first: the other tables reference them.
        for collection in (snapshot.users, snapshot.profiles, snapshot.tasks):
            for entity in collection:
                await repository.save(entity)

        logger.info(
            "Seeded %d users, %d profiles, %d tasks",
            len(snapshot.users),
            len(snapshot.profiles),
            len(snapshot.tasks),
        )
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed demo data into the database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=settings.database_url,
        help="Database URL (default: from settings)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(message)s")
    asyncio.run(seed(args.database_url))


if __name__ == "__main__":
    main()

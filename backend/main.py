"""
Roadmap worker - main entry point.

Initialises the local database and keeps the periodic milestone progress
recompute running until interrupted.

Usage:
    cd backend
    python main.py           # run the scheduler until Ctrl+C
    python main.py --once    # recompute every open milestone once and exit
"""

import argparse
import asyncio

from roadmap.core.config import get_settings
from roadmap.core.logger import logger


async def run_worker(once: bool = False) -> None:
    settings = get_settings()
    logger.info(f"Starting roadmap worker in {settings.ENVIRONMENT} mode...")

    from roadmap.deps import get_db_engine
    from roadmap.infrastructure.local.database import init_db

    await init_db(get_db_engine())

    from roadmap.services.background_scheduler import (
        get_background_scheduler,
        start_background_scheduler,
        stop_background_scheduler,
    )

    if once:
        scheduler = await get_background_scheduler()
        results = await scheduler.run_progress_recompute()
        logger.info(f"Recompute finished: {results}")
        return

    await start_background_scheduler()
    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down roadmap worker...")
        await stop_background_scheduler()


def main() -> None:
    parser = argparse.ArgumentParser(description="Roadmap milestone worker.")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single progress recompute instead of the scheduler.",
    )
    args = parser.parse_args()
    try:
        asyncio.run(run_worker(once=args.once))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

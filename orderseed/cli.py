"""
Command-line entry point: reset and populate the demo database.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import argparse
import asyncio
import logging
import sys

from config.settings import get_settings
from orderseed.db.seed import populate_database
from orderseed.db.store import OrderStore
from orderseed.errors import OrderSeedError
from orderseed.generation.orchestrator import BatchOrchestrator
from orderseed.reports.sales import summarize_batch
from orderseed.utils.log_config import configure_logging

logger = logging.getLogger(__name__)


async def run(database_url: str, historical_count, recent_count, seed) -> None:
    settings = get_settings()
    if seed is not None:
        settings = settings.model_copy(update={"random_seed": seed})

    store = OrderStore(database_url, echo=settings.database_echo)
    try:
        orchestrator = BatchOrchestrator.from_settings(store, settings)
        specs = await populate_database(
            store,
            orchestrator=orchestrator,
            historical_count=historical_count,
            recent_count=recent_count,
        )
    finally:
        await store.dispose()

    print(summarize_batch(specs).to_string())


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="orderseed",
        description="Populate the kiosk database with a synthetic order history",
    )
    parser.add_argument("--database-url",
                        default=settings.database_url,
                        help="SQLAlchemy async database URL")
    parser.add_argument("--historical",
                        type=int,
                        help="Override the historical order count")
    parser.add_argument("--recent",
                        type=int,
                        help="Override the recent order count")
    parser.add_argument("--seed",
                        type=int,
                        help="Seed for a reproducible run")
    args = parser.parse_args()

    configure_logging(settings.log_level, settings.log_format)

    try:
        asyncio.run(run(args.database_url, args.historical, args.recent, args.seed))
    except OrderSeedError as e:
        logger.error(f"Populate failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

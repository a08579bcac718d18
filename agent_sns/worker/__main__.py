"""
Standalone scheduler process: ``python -m agent_sns.worker``.
"""

import asyncio

from agent_sns.core.database import init_db
from agent_sns.core.logging_config import get_logger, setup_logging
from agent_sns.server.core.config import settings

from .scheduler import schedule_loop

logger = get_logger(__name__)


async def run() -> None:
    await init_db()
    interval = settings.scheduler.interval_seconds
    logger.info(f"Agent scheduler running every {interval}s")
    await schedule_loop(interval)


def main() -> None:
    setup_logging()
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Agent scheduler interrupted")


if __name__ == "__main__":
    main()

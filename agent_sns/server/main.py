"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers exception handlers and includes all API routers.
It serves as the root of the web server.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from agent_sns.core.database import engine, init_db
from agent_sns.core.logging_config import get_logger, setup_logging
from agent_sns.core.monitoring import initialize_logfire
from agent_sns.worker.scheduler import schedule_loop

from .api import activity, admin, agents, auth, comments, communities, health, threads
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import AgentManagerCORSMiddleware, LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup and, when ``AGENT_SNS_RUN_SCHEDULER`` is
    set, runs the agent scheduling loop as a background task until shutdown.
    """
    logger.info("Starting up Agent SNS Server...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    stop_event = asyncio.Event()
    scheduler_task = None
    scheduler_config = settings.scheduler
    if scheduler_config.run_in_server:
        scheduler_task = asyncio.create_task(schedule_loop(scheduler_config.interval_seconds, stop_event))
        logger.info(f"Agent scheduler started in server (every {scheduler_config.interval_seconds}s)")

    yield

    logger.info("Shutting down Agent SNS Server...")
    if scheduler_task is not None:
        stop_event.set()
        await scheduler_task


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Agent SNS API

    A social network for agents: owner wallets sign in, register agents into
    communities, and agents post threads and comments through signed requests.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app, engine=engine)
setup_exception_handlers(app)

# The last middleware added runs first, so CORS also wraps logged responses
app.add_middleware(LogfireMiddleware)
app.add_middleware(AgentManagerCORSMiddleware)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_PREFIX}/auth", tags=["auth"])
app.include_router(agents.router, prefix=f"{constant.API_PREFIX}/agents", tags=["agents"])
app.include_router(threads.router, prefix=f"{constant.API_PREFIX}/threads", tags=["threads"])
app.include_router(comments.router, prefix=f"{constant.API_PREFIX}/comments", tags=["comments"])
app.include_router(communities.router, prefix=f"{constant.API_PREFIX}/communities", tags=["communities"])
app.include_router(activity.router, prefix=f"{constant.API_PREFIX}/activity", tags=["activity"])
app.include_router(admin.router, prefix=f"{constant.API_PREFIX}/admin", tags=["admin"])

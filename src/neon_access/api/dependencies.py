"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from neon_access.config import settings
from neon_access.handlers import NeonHandler
from neon_access.logging_config import setup_logging
from neon_access.repositories import HttpRequestExecutor, InMemoryCacheRepository
from neon_access.services import CacheSweeper, LocationResolver, NeonQueryPlanner

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> NeonHandler:
    """Dependency injection for NeonHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The NeonHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "neon_handler", None)
    if handler is None:
        raise RuntimeError("NeonHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (response cache, request executor)
    2. Services (planner, resolver, sweeper) - planner in app.state.planner
    3. Handler (HTTP endpoints) - stored in app.state.neon_handler

    A transport placed on ``app.state.transport`` before startup is handed
    to the executor; tests use it to stand in for the remote API.

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Stops the sweeper, closes the HTTP client and removes all
        services from app.state on shutdown
    """
    setup_logging(settings.log_level)

    cache = InMemoryCacheRepository.create()
    executor = HttpRequestExecutor.create(transport=getattr(app.state, "transport", None))

    planner = NeonQueryPlanner.create(executor=executor, cache=cache)
    resolver = LocationResolver.create(planner)
    sweeper = CacheSweeper(cache)
    handler = NeonHandler(planner=planner, resolver=resolver, sweeper=sweeper)

    app.state.cache = cache
    app.state.executor = executor
    app.state.planner = planner
    app.state.sweeper = sweeper
    app.state.neon_handler = handler

    await sweeper.start()
    logger.info("NEON access service initialized (base URL: %s)", settings.base_url)
    logger.info(
        "Cache TTL: %ss, data query TTL: %ss, retry attempts: %d",
        settings.cache_ttl,
        settings.data_query_ttl,
        executor.attempts,
    )

    yield

    await sweeper.stop()
    await executor.close()

    del app.state.neon_handler
    del app.state.sweeper
    del app.state.planner
    del app.state.executor
    del app.state.cache
    logger.info("NEON access service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[NeonHandler, Depends(get_handler)]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main FastAPI application setup for Playlength.

Initializes the FastAPI application, sets up lifespan management for services,
registers CORS middleware, and includes API routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import version directly from __init__.py
from __init__ import __version__

from api import dependencies, routes
from config import config
from exceptions import APIConfigurationError
from logging_config import StructuredLogger
from services.engine import PlaylistLengthEngine
from services.youtube_api import YouTubeAPIClient

logger = StructuredLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Populates the global service instances defined in api.dependencies on
    startup and clears the response cache on shutdown.
    """
    logger.info("Starting Playlength FastAPI application lifespan...")

    if not config.API_KEY:
        logger.critical(f"FATAL ERROR: {config.API_KEY_ENV_VAR} is not defined. Services will not be initialized.",
                        exc_info=False)
        dependencies.api_client = None
        dependencies.length_engine = None
    else:
        try:
            logger.info("Initializing services...")
            dependencies.api_client = YouTubeAPIClient(config.API_KEY)
            dependencies.length_engine = PlaylistLengthEngine(api_client=dependencies.api_client)
            logger.info("Playlength services initialized successfully.")
        except APIConfigurationError as api_err:
            logger.critical(f"API configuration error during startup: {api_err}", exc_info=False)
            dependencies.api_client = None
            dependencies.length_engine = None
        except Exception as e:
            logger.critical(f"Critical unexpected error during service initialization: {e}", exc_info=True)
            dependencies.api_client = None
            dependencies.length_engine = None

    yield

    # --- Shutdown ---
    logger.info("Shutting down Playlength FastAPI application lifespan...")
    if dependencies.api_client:
        removed = await dependencies.api_client.cache.clear()
        logger.info(f"Response cache cleared on shutdown ({removed} entries).")
    logger.info("Lifespan cleanup finished.")


app = FastAPI(
    lifespan=lifespan,
    title="Playlength API",
    description="API to compute the total playback duration of YouTube playlists and videos.",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"]
)
logger.debug(f"CORS Middleware added. Allowed origins: {config.ALLOWED_ORIGINS}")

app.include_router(routes.router)
logger.info("FastAPI application setup complete.")

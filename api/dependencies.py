#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI dependency injection functions for Playlength services.

These functions provide instances of the core service classes (API client,
playlist length engine) to the API route handlers and fail with 503 when
startup could not initialize them.
"""

from typing import Optional

from fastapi import HTTPException, status

from logging_config import StructuredLogger
from services.engine import PlaylistLengthEngine
from services.youtube_api import YouTubeAPIClient

logger = StructuredLogger(__name__)

# --- Global Service Instances ---
# Populated during the application lifespan startup.
api_client: Optional[YouTubeAPIClient] = None
length_engine: Optional[PlaylistLengthEngine] = None


def get_api_client() -> YouTubeAPIClient:
    """Dependency function to get the initialized YouTubeAPIClient instance.

    Raises:
        HTTPException: 503 Service Unavailable if the client is not initialized.
    """
    if not api_client:
        logger.critical("Dependency Error: YouTube API Client not initialized.", exc_info=False)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service Initialization Error: YouTube API Client is not available.",
            headers={"X-Error-Code": "SERVICE_UNAVAILABLE_API_CLIENT"}
        )
    return api_client


def get_length_engine() -> PlaylistLengthEngine:
    """Dependency function to get the initialized PlaylistLengthEngine instance.

    Raises:
        HTTPException: 503 Service Unavailable if the engine is not initialized.
    """
    if not length_engine:
        logger.critical("Dependency Error: Playlist length engine not initialized.", exc_info=False)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service Initialization Error: Playlist length engine is not available.",
            headers={"X-Error-Code": "SERVICE_UNAVAILABLE_ENGINE"}
        )
    return length_engine

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
API Routes for the Playlength application using FastAPI.

Defines endpoints for analyzing playlist/video durations, health checks,
and cache clearing.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_api_client, get_length_engine
from exceptions import handle_exception
from logging_config import StructuredLogger
from models import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from services.engine import PlaylistLengthEngine
from services.resolver import split_references
from services.youtube_api import YouTubeAPIClient

# Import version directly from root __init__.py
from __init__ import __version__ as app_version

logger = StructuredLogger(__name__)

router = APIRouter()

# Common error responses for OpenAPI documentation
ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid reference, range or speed"},
    404: {"model": ErrorResponse, "description": "Playlist or video not found"},
    502: {"model": ErrorResponse, "description": "YouTube API reported an error"},
    503: {"model": ErrorResponse, "description": "Service unavailable (initialization failed, YouTube API unreachable)"}
}


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses=ERROR_RESPONSES,
    summary="Analyze playlist/video durations",
    description="Computes the total and average playback duration of YouTube playlists (optionally restricted to a range of positions) and single videos, plus run totals at several playback speeds."
)
async def analyze_references(
    request: AnalyzeRequest,
    engine: PlaylistLengthEngine = Depends(get_length_engine)
):
    """Analyze every reference of the request in order.

    The run is all-or-nothing: the first failing reference turns into an
    error response naming it, and no partial results are returned.
    """
    references = list(request.references)
    if request.text:
        references.extend(split_references(request.text))

    logger.info(f"Received /analyze request with {len(references)} reference(s)",
                reference_count=len(references), include_details=request.include_details)

    try:
        report = await engine.analyze(
            references,
            range_spec=request.range_spec(),
            include_details=request.include_details,
        )
        return AnalyzeResponse.from_report(report, custom_speed=request.playback_speed)
    except Exception as e:
        if isinstance(e, HTTPException):
            logger.error(f"HTTPException processing /analyze: Status={e.status_code}, Detail='{e.detail}'")
        elif hasattr(e, 'error_code'):
            logger.error(f"{type(e).__name__} processing /analyze: {e}")
        else:
            logger.critical(f"Unexpected error processing /analyze: {e}", exc_info=True)
        raise handle_exception(e)


@router.get(
    "/health",
    summary="Health Check",
    description="Provides the operational status of the Playlength service and its components, including basic statistics.",
    response_description="JSON object containing the health status and component readiness."
)
async def health_check(
    # pylint: disable=unused-argument
    api_client: YouTubeAPIClient = Depends(get_api_client),
    engine: PlaylistLengthEngine = Depends(get_length_engine)
):
    """Endpoint to check system health and retrieve operational statistics."""
    logger.debug("Health check endpoint requested.")

    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service_version": app_version,
        "components": {
            "api_client": "ready",
            "length_engine": "ready"
        }
    }

    try:
        health_data["statistics"] = await engine.get_global_stats()
    except Exception as e:
        logger.error(f"Error collecting statistics for /health endpoint: {e}", exc_info=True)
        health_data["statistics"] = {"error": f"Failed to collect detailed stats: {str(e)}"}

    return Response(
        content=json.dumps(health_data, default=str),
        status_code=status.HTTP_200_OK,
        media_type="application/json"
    )


@router.post(
    "/clear-caches",
    summary="Clear All Caches",
    description="Forces the clearing of all internal caches (API responses, reference parsing, duration parsing).",
    status_code=status.HTTP_200_OK,
    response_description="JSON object confirming cache clearing results."
)
async def clear_all_caches(
    engine: PlaylistLengthEngine = Depends(get_length_engine)
):
    """Endpoint to manually trigger the clearing of all application caches."""
    logger.warning("Received request to clear all caches via /clear-caches endpoint.")
    try:
        results = await engine.clear_caches()
        return {
            "status": "success",
            "message": "All caches cleared successfully.",
            "details": results
        }
    except Exception as e:
        logger.error(f"Error occurred during manual cache clearing via endpoint: {e}", exc_info=True)
        raise handle_exception(e)


@router.post(
    "/clear-caches/{cache_name}",
    summary="Clear One Cache",
    description="Clears a single registered cache (e.g. `api_responses`, `reference_parser`, `parse_duration`).",
    status_code=status.HTTP_200_OK,
    responses={404: {"model": ErrorResponse, "description": "No cache registered under that name"}},
    response_description="JSON object confirming the cache clearing result."
)
async def clear_named_cache(
    cache_name: str,
    engine: PlaylistLengthEngine = Depends(get_length_engine)
):
    """Endpoint to clear one cache by its registered name."""
    logger.warning(f"Received request to clear cache '{cache_name}' via /clear-caches endpoint.")
    try:
        result = await engine.clear_cache(cache_name)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
            headers={"X-Error-Code": "CACHE_NOT_FOUND"}
        )
    return {
        "status": "success",
        "message": f"Cache {cache_name} cleared successfully.",
        "details": result
    }

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Custom exception classes and error handling utilities for Playlength.

Every failure the analysis engine can report is an ``AppBaseError`` subclass
that knows its machine-readable code and HTTP status, so the API layer can
convert it without inspecting the type.
"""

from typing import Optional

from fastapi import HTTPException, status


# --- Base Exception Class ---

class AppBaseError(Exception):
    """Base class for all application-specific exceptions.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        http_status_code: HTTP status code to use in API responses
        reference: The user-supplied reference being analyzed when the error occurred
    """

    def __init__(self, message: str, error_code: Optional[str] = None,
                 http_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
                 reference: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.http_status_code = http_status_code
        self.reference = reference
        super().__init__(message)

    def attach_reference(self, reference: str) -> "AppBaseError":
        """Record the reference that triggered this error and prefix the message with it.

        Idempotent: an error that already carries a reference is left untouched.

        Returns:
            AppBaseError: self, so callers can ``raise err.attach_reference(ref)``.
        """
        if self.reference is None:
            self.reference = reference
            self.message = f"Failed to analyze '{reference}': {self.message}"
            self.args = (self.message,)
        return self

    def to_http_exception(self) -> HTTPException:
        """Convert this exception to a FastAPI HTTPException."""
        headers = {"X-Error-Code": self.error_code}
        return HTTPException(
            status_code=self.http_status_code,
            detail=self.message,
            headers=headers
        )


# --- Input Exceptions ---

class InvalidInputError(AppBaseError):
    """Raised when run parameters (references list, range, speed) are invalid."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(
            message=message,
            error_code="INVALID_INPUT",
            http_status_code=status.HTTP_400_BAD_REQUEST
        )


class InvalidReferenceError(AppBaseError):
    """Raised when a reference is neither a playlist nor a video URL or identifier."""

    def __init__(self, raw: str):
        super().__init__(
            message=(f"Invalid YouTube URL or ID: {raw}. "
                     "Please provide a valid YouTube video or playlist URL."),
            error_code="INVALID_REFERENCE",
            http_status_code=status.HTTP_400_BAD_REQUEST
        )
        self.raw = raw


# --- Upstream Exceptions ---

class PlaylistNotFoundError(AppBaseError):
    """Raised when the API returns no playlist record for an identifier."""

    def __init__(self, playlist_id: str):
        super().__init__(
            message=f"Playlist not found: {playlist_id}",
            error_code="PLAYLIST_NOT_FOUND",
            http_status_code=status.HTTP_404_NOT_FOUND
        )
        self.playlist_id = playlist_id


class VideoNotFoundError(AppBaseError):
    """Raised when the API returns no video record for an identifier."""

    def __init__(self, video_id: str):
        super().__init__(
            message=f"Video not found: {video_id}",
            error_code="VIDEO_NOT_FOUND",
            http_status_code=status.HTTP_404_NOT_FOUND
        )
        self.video_id = video_id


class UpstreamError(AppBaseError):
    """Base class for application-level errors reported inside an API payload.

    Attributes:
        upstream_message: The ``error.message`` field of the payload, verbatim.
    """

    error_code = "UPSTREAM_ERROR"

    def __init__(self, upstream_message: str):
        super().__init__(
            message=upstream_message,
            error_code=self.error_code,
            http_status_code=status.HTTP_502_BAD_GATEWAY
        )
        self.upstream_message = upstream_message


class PlaylistFetchError(UpstreamError):
    """Raised when a playlist or playlist page payload carries an error."""

    error_code = "PLAYLIST_FETCH_FAILED"


class DetailFetchError(UpstreamError):
    """Raised when a video details payload carries an error."""

    error_code = "DETAIL_FETCH_FAILED"


class TransportError(AppBaseError):
    """Raised when the HTTP transport itself fails (network, timeout, undecodable body)."""

    def __init__(self, message: str = "Could not reach the YouTube API"):
        super().__init__(
            message=message,
            error_code="TRANSPORT_FAILURE",
            http_status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


class APIConfigurationError(AppBaseError):
    """Raised when there's an issue with the API configuration."""

    def __init__(self, message: str = "API configuration error"):
        super().__init__(
            message=message,
            error_code="API_CONFIG_ERROR",
            http_status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


class AnalysisError(AppBaseError):
    """Raised when analyzing a reference fails for an unexpected reason."""

    def __init__(self, message: str = "Unexpected error during analysis"):
        super().__init__(
            message=message,
            error_code="ANALYSIS_FAILED",
            http_status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# --- Error Handling Utilities ---

def upstream_error_message(payload) -> Optional[str]:
    """Return the application-level error message of an API payload, or None.

    The YouTube API reports failures as ``{"error": {"message": ...}}``; any
    truthy ``error`` member counts as a failure even without a message.
    """
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("message") or "Unknown YouTube API error")
    return str(error)


def handle_exception(exception: Exception) -> HTTPException:
    """Convert any exception to an appropriate HTTPException.

    Args:
        exception: The exception to handle

    Returns:
        HTTPException: FastAPI exception with appropriate status and headers
    """
    if isinstance(exception, AppBaseError):
        return exception.to_http_exception()

    elif isinstance(exception, ValueError):
        return InvalidInputError(str(exception)).to_http_exception()

    elif isinstance(exception, HTTPException):
        return exception

    else:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {type(exception).__name__}",
            headers={"X-Error-Code": "INTERNAL_SERVER_ERROR"}
        )

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration module for Playlength.

Defines configuration parameters and loads values from environment variables.
"""

import os
import logging
from typing import Any, Dict

# Initialize a basic logger for config loading issues
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Default configuration values
_CONFIG_DEFAULTS: Dict[str, Any] = {
    # API Configuration
    "API_KEY": "",
    "API_KEY_ENV_VAR": "YOUTUBE_API_KEY",

    # YouTube API Settings
    "PLAYLIST_PAGE_SIZE": 50,  # Max allowed by YouTube API for playlistItems.list
    "MAX_PLAYLIST_PAGES": 20,  # Safety cap, 20 pages of 50 = 1000 entries
    "DETAIL_BATCH_SIZE": 25,  # IDs per videos.list request

    # Timeouts
    "API_TIMEOUT_SECONDS": 20.0,  # Timeout for a single upstream request

    # Caching
    "RESPONSE_CACHE_TTL_SECONDS": 300,  # 5 min TTL for upstream responses

    # Analysis
    "PLAYBACK_SPEEDS": (1.25, 1.5, 1.75, 2.0),  # Speeds always reported
    "MAX_REFERENCES_PER_RUN": 50,  # Max references accepted by /analyze

    # Web Server
    "DEFAULT_ENCODING": "utf-8",

    # CORS
    "ALLOWED_ORIGINS": [
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ],
}


class Config:
    """Configuration class that loads values from environment variables."""

    def __init__(self, load_from_env=True):
        """Initialize configuration with default values and optionally from environment.

        Args:
            load_from_env: Whether to load values from environment variables
        """
        for key, value in _CONFIG_DEFAULTS.items():
            setattr(self, key, value)

        if load_from_env:
            self.load_from_env()

    def load_from_env(self):
        """Load configuration values from environment variables."""
        self.API_KEY = os.environ.get(self.API_KEY_ENV_VAR, self.API_KEY)

        env_origins = os.environ.get("ALLOWED_ORIGINS", "")
        if env_origins:
            origins = [origin.strip() for origin in env_origins.split(",")]
            self.ALLOWED_ORIGINS = [o for o in origins if o]
            logger.info(f"CORS origins set from environment: {self.ALLOWED_ORIGINS}")

        env_speeds = os.environ.get("PLAYBACK_SPEEDS", "")
        if env_speeds:
            try:
                speeds = tuple(float(s) for s in env_speeds.split(",") if s.strip())
                if speeds and all(s > 0 for s in speeds):
                    self.PLAYBACK_SPEEDS = speeds
                else:
                    logger.warning(f"Ignoring non-positive PLAYBACK_SPEEDS: {env_speeds}")
            except ValueError:
                logger.warning(f"Invalid PLAYBACK_SPEEDS value: {env_speeds}")

        self._load_int_from_env("PLAYLIST_PAGE_SIZE")
        self._load_int_from_env("MAX_PLAYLIST_PAGES")
        self._load_int_from_env("DETAIL_BATCH_SIZE")
        self._load_int_from_env("RESPONSE_CACHE_TTL_SECONDS")
        self._load_int_from_env("MAX_REFERENCES_PER_RUN")
        self._load_float_from_env("API_TIMEOUT_SECONDS")

        if not self.API_KEY:
            logger.warning(f"API key not found in env var {self.API_KEY_ENV_VAR}.")

    def _load_int_from_env(self, key):
        """Load an integer value from environment variable.

        Args:
            key: The configuration key to load

        Returns:
            bool: True if the value was loaded, False otherwise
        """
        env_value = os.environ.get(key)
        if env_value is not None:
            try:
                setattr(self, key, int(env_value))
                return True
            except ValueError:
                logger.warning(f"Invalid integer value for {key}: {env_value}")
        return False

    def _load_float_from_env(self, key):
        """Load a float value from environment variable.

        Returns:
            bool: True if the value was loaded, False otherwise
        """
        env_value = os.environ.get(key)
        if env_value is not None:
            try:
                setattr(self, key, float(env_value))
                return True
            except ValueError:
                logger.warning(f"Invalid float value for {key}: {env_value}")
        return False


# Create a single instance of Config to be imported by other modules
config = Config(load_from_env=True)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Uvicorn server entry point for the Playlength application.

Handles environment loading (.env), final logging configuration based on environment,
and starts the Uvicorn server process.
"""

import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from config import config
from logging_config import setup_logging


def _load_env_file():
    """Load a .env file from the working directory, if present."""
    env_path = Path(".") / ".env"
    if env_path.is_file():
        load_dotenv(dotenv_path=env_path, override=True)
        print(f"Loaded environment variables from: {env_path.resolve()}")
    else:
        print(".env file not found, using system environment variables.")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        logging.warning(f"Invalid {name} environment variable '{os.environ.get(name)}', using default {default}.")
        return default


def main():
    """Load configuration, set up logging and run the Uvicorn server."""
    # 1. Environment and configuration
    _load_env_file()
    config.load_from_env()

    # 2. Logging
    log_level_console = getattr(logging, os.environ.get("LOG_LEVEL_CONSOLE", "INFO").upper(), logging.INFO)
    log_level_file = getattr(logging, os.environ.get("LOG_LEVEL_FILE", "DEBUG").upper(), logging.DEBUG)
    log_structured = os.environ.get("LOG_STRUCTURED", "true").lower() in ("true", "1", "yes")
    setup_logging(
        log_level_console=log_level_console,
        log_level_file=log_level_file,
        structured=log_structured
    )

    if not config.API_KEY:
        logging.warning("=" * 80)
        logging.warning(f" WARNING: {config.API_KEY_ENV_VAR} is not defined.")
        logging.warning(" Please define it in a .env file or as an environment variable.")
        logging.warning(" The application will start, but /analyze will answer 503.")
        logging.warning("=" * 80)

    # 3. Uvicorn parameters
    run_host = os.environ.get("HOST", "127.0.0.1")
    run_port = _env_int("PORT", 8000)
    # Caches live in-process; several workers do not share them
    run_workers = _env_int("WEB_CONCURRENCY", 1)
    if run_workers > 1:
        logging.warning(f"Running with {run_workers} workers. Response caches are not shared between workers.")

    debug_mode = os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")
    uvicorn_log_level = os.environ.get("UVICORN_LOG_LEVEL", "debug" if debug_mode else "info").lower()

    logging.info(f"Starting Uvicorn server on http://{run_host}:{run_port}")
    logging.info(f"Debug mode: {debug_mode}, Workers: {run_workers}, Uvicorn Log Level: {uvicorn_log_level}")

    uvicorn.run(
        "main:app",
        host=run_host,
        port=run_port,
        reload=debug_mode,
        workers=run_workers if not debug_mode else 1,
        log_level=uvicorn_log_level,
    )


if __name__ == "__main__":
    main()

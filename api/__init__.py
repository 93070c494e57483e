"""FastAPI routes and dependencies for Playlength."""

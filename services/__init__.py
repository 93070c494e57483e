"""Core services: reference resolution, YouTube API access and duration analysis."""

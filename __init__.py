"""Playlength: total playback duration of YouTube playlists and videos."""

__version__ = "1.0.0"

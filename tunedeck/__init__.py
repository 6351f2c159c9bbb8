"""Playlist parsing, play-queue handling, a playlist table model and spectrum band analysis."""

__version__ = "0.1.0"
__all__ = ["parser", "queue", "playlist", "model", "spectrum"]
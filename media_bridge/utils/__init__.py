"""Utility functions for Media Bridge."""

from .auth import AuthorizationManager
from .file_utils import get_track_metadata, is_audio_file, normalize_name, track_to_media_item
from .sorting import sort_entries

__all__ = [
    "AuthorizationManager",
    "get_track_metadata",
    "is_audio_file",
    "normalize_name",
    "sort_entries",
    "track_to_media_item",
]

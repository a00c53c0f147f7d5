"""File utilities for importing audio files into the catalog."""

import hashlib
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from mutagen import File as MutagenFile

from media_bridge.models import MediaItem, MediaType

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = {
    ".mp3",
    ".flac",
    ".m4a",
    ".aac",
    ".ogg",
    ".opus",
    ".wav",
    ".aiff",
    ".wma",
}


@dataclass
class TrackMetadata:
    """Tags and file details of an audio file."""
    path: str
    title: Optional[str]
    album: Optional[str]
    artist: Optional[str]
    album_artist: Optional[str]
    genre: Optional[str]
    composer: Optional[str]
    track_number: Optional[int]
    release_date: Optional[str]
    duration: float
    date_added: str


def is_audio_file(filename: str) -> bool:
    """Check if a file is an audio file based on its extension.

    Args:
        filename: Name of the file to check

    Returns:
        True if the file is an audio file, False otherwise
    """
    return os.path.splitext(filename)[1].lower() in AUDIO_EXTENSIONS


def normalize_name(text: str) -> str:
    """Normalize a tag value for identity comparison.

    Args:
        text: Tag value to normalize

    Returns:
        Lowercase value with only letters and digits
    """
    return re.sub(r"[^a-z0-9]", "", text.lower())


def make_persistent_id(*parts: Optional[str]) -> int:
    """Derive a stable 63-bit identifier from one or more values."""
    joined = "\x1f".join(normalize_name(part or "") for part in parts)
    digest = hashlib.sha1(joined.encode("utf-8")).hexdigest()
    return int(digest[:16], 16) & 0x7FFFFFFFFFFFFFFF


def _first_tag(audio: Any, key: str) -> Optional[str]:
    values = audio.tags.get(key) if audio.tags else None
    if not values:
        return None
    value = values[0] if isinstance(values, list) else values
    value = str(value).strip()
    return value or None


def _parse_track_number(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = re.match(r"\s*(\d+)", value)
    return int(match.group(1)) if match else None


def get_track_metadata(file_path: str) -> Optional[TrackMetadata]:
    """Read tags of an audio file.

    Args:
        file_path: Path to audio file

    Returns:
        TrackMetadata object, or None if the file cannot be read as audio
    """
    if not os.path.isfile(file_path):
        return None

    try:
        audio = MutagenFile(file_path, easy=True)
    except Exception as e:  # mutagen raises format specific errors
        logger.warning("Failed to read tags from %s: %s", file_path, str(e))
        return None
    if audio is None:
        return None

    stat = os.stat(file_path)
    info = getattr(audio, "info", None)
    return TrackMetadata(
        path=file_path,
        title=_first_tag(audio, "title") or os.path.splitext(os.path.basename(file_path))[0],
        album=_first_tag(audio, "album"),
        artist=_first_tag(audio, "artist"),
        album_artist=_first_tag(audio, "albumartist"),
        genre=_first_tag(audio, "genre"),
        composer=_first_tag(audio, "composer"),
        track_number=_parse_track_number(_first_tag(audio, "tracknumber")),
        release_date=_first_tag(audio, "date"),
        duration=float(getattr(info, "length", 0.0) or 0.0),
        date_added=datetime.fromtimestamp(stat.st_mtime).isoformat(),
    )


def _optional_id(*parts: Optional[str]) -> Optional[int]:
    if not parts[-1]:
        return None
    return make_persistent_id(*parts)


def track_to_media_item(meta: TrackMetadata) -> MediaItem:
    """Build the catalog entry for an audio file."""
    album_artist = meta.album_artist or meta.artist
    return MediaItem(
        persistent_id=make_persistent_id(meta.path),
        media_type=MediaType.MUSIC,
        title=meta.title,
        album_title=meta.album,
        album_persistent_id=_optional_id(album_artist, meta.album),
        artist=meta.artist,
        artist_persistent_id=_optional_id(meta.artist),
        album_artist=album_artist,
        album_artist_persistent_id=_optional_id(album_artist),
        genre=meta.genre,
        genre_persistent_id=_optional_id(meta.genre),
        composer=meta.composer,
        composer_persistent_id=_optional_id(meta.composer),
        album_track_number=meta.track_number,
        playback_duration=meta.duration,
        date_added=meta.date_added,
        release_date=meta.release_date,
        asset_path=meta.path,
    )

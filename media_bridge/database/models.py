"""Schema constants for the SQLite media catalog."""

from typing import Dict, Tuple

from media_bridge.models import GroupingMode, MediaItemProperty

ITEMS_TABLE = "media_items"
ACCESS_TABLE = "library_access"

# Column order used for inserts and for rebuilding MediaItem rows
ITEM_COLUMNS: Tuple[str, ...] = (
    "persistent_id",
    "media_type",
    "title",
    "album_title",
    "album_persistent_id",
    "artist",
    "artist_persistent_id",
    "album_artist",
    "album_artist_persistent_id",
    "genre",
    "genre_persistent_id",
    "composer",
    "composer_persistent_id",
    "album_track_number",
    "playback_duration",
    "play_count",
    "skip_count",
    "rating",
    "is_explicit_item",
    "date_added",
    "release_date",
    "asset_path",
)

PROPERTY_COLUMNS: Dict[MediaItemProperty, str] = {
    MediaItemProperty.PERSISTENT_ID: "persistent_id",
    MediaItemProperty.MEDIA_TYPE: "media_type",
    MediaItemProperty.TITLE: "title",
    MediaItemProperty.ALBUM_TITLE: "album_title",
    MediaItemProperty.ALBUM_PERSISTENT_ID: "album_persistent_id",
    MediaItemProperty.ARTIST: "artist",
    MediaItemProperty.ARTIST_PERSISTENT_ID: "artist_persistent_id",
    MediaItemProperty.ALBUM_ARTIST: "album_artist",
    MediaItemProperty.ALBUM_ARTIST_PERSISTENT_ID: "album_artist_persistent_id",
    MediaItemProperty.GENRE: "genre",
    MediaItemProperty.GENRE_PERSISTENT_ID: "genre_persistent_id",
    MediaItemProperty.COMPOSER: "composer",
    MediaItemProperty.COMPOSER_PERSISTENT_ID: "composer_persistent_id",
}

# (key column, title column) per grouping; None keeps insertion order
GROUPING_COLUMNS: Dict[GroupingMode, Tuple[str, str]] = {
    GroupingMode.TITLE: ("persistent_id", "title"),
    GroupingMode.ALBUM: ("album_persistent_id", "album_title"),
    GroupingMode.ARTIST: ("artist_persistent_id", "artist"),
    GroupingMode.ALBUM_ARTIST: ("album_artist_persistent_id", "album_artist"),
    GroupingMode.COMPOSER: ("composer_persistent_id", "composer"),
    GroupingMode.GENRE: ("genre_persistent_id", "genre"),
    GroupingMode.PODCAST_TITLE: ("album_persistent_id", "album_title"),
}

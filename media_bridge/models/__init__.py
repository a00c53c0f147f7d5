"""Models for Media Bridge."""

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from media_bridge.models.predicates import PredicateInfo


class AuthorizationStatus(str, Enum):
    """Access state reported by the media library."""
    NOT_DETERMINED = "notDetermined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED = "authorized"


class ComparisonMode(str, Enum):
    """How a predicate value is matched against stored values."""
    EQUAL_TO = "equalTo"
    CONTAINS = "contains"


class GroupingMode(str, Enum):
    """How the library groups returned records."""
    TITLE = "title"
    ALBUM = "album"
    ARTIST = "artist"
    ALBUM_ARTIST = "albumArtist"
    COMPOSER = "composer"
    GENRE = "genre"
    PLAYLIST = "playlist"
    PODCAST_TITLE = "podcastTitle"


class SortOrder(str, Enum):
    """Direction of a client-side sort."""
    FORWARD = "forward"
    REVERSE = "reverse"


class MediaType(IntFlag):
    """Kind of entity stored in the library."""
    MUSIC = 1 << 0
    PODCAST = 1 << 1
    AUDIO_BOOK = 1 << 2
    AUDIO_ITUNES_U = 1 << 3
    ANY_AUDIO = 0x00FF
    MOVIE = 1 << 8
    TV_SHOW = 1 << 9
    VIDEO_PODCAST = 1 << 10
    MUSIC_VIDEO = 1 << 11
    VIDEO_ITUNES_U = 1 << 12
    HOME_VIDEO = 1 << 13
    ANY_VIDEO = 0xFF00
    ANY = 0xFFFF


class MediaItemProperty(str, Enum):
    """Property keys understood by the library's query engine."""
    PERSISTENT_ID = "persistentID"
    MEDIA_TYPE = "mediaType"
    TITLE = "title"
    ALBUM_TITLE = "albumTitle"
    ALBUM_PERSISTENT_ID = "albumPersistentID"
    ARTIST = "artist"
    ARTIST_PERSISTENT_ID = "artistPersistentID"
    ALBUM_ARTIST = "albumArtist"
    ALBUM_ARTIST_PERSISTENT_ID = "albumArtistPersistentID"
    GENRE = "genre"
    GENRE_PERSISTENT_ID = "genrePersistentID"
    COMPOSER = "composer"
    COMPOSER_PERSISTENT_ID = "composerPersistentID"


@dataclass(frozen=True)
class MediaItem:
    """Represents a single entry of the media library."""
    persistent_id: int
    media_type: MediaType = MediaType.MUSIC
    title: Optional[str] = None
    album_title: Optional[str] = None
    album_persistent_id: Optional[int] = None
    artist: Optional[str] = None
    artist_persistent_id: Optional[int] = None
    album_artist: Optional[str] = None
    album_artist_persistent_id: Optional[int] = None
    genre: Optional[str] = None
    genre_persistent_id: Optional[int] = None
    composer: Optional[str] = None
    composer_persistent_id: Optional[int] = None
    album_track_number: Optional[int] = None
    playback_duration: float = 0.0
    play_count: int = 0
    skip_count: int = 0
    rating: int = 0
    is_explicit_item: bool = False
    date_added: Optional[str] = None
    release_date: Optional[str] = None
    asset_path: Optional[str] = None


@dataclass(frozen=True)
class MediaItemCollection:
    """Represents a group of media items, e.g. an album."""
    items: Tuple[MediaItem, ...]
    grouping: GroupingMode = GroupingMode.ALBUM
    title: Optional[str] = None
    persistent_id: Optional[int] = None

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def representative_item(self) -> Optional[MediaItem]:
        return self.items[0] if self.items else None


class QueryOutcome(Enum):
    """Three-way result signal of a library query."""
    NOT_FOUND = "notFound"
    EMPTY = "empty"
    FOUND = "found"


@dataclass(frozen=True)
class QueryResult:
    """Result of a library query.

    ``NOT_FOUND`` is the library's explicit "no result" sentinel and is kept
    apart from ``EMPTY``, a valid query that matched nothing.
    """
    outcome: QueryOutcome
    entries: Tuple[Any, ...] = field(default=())

    @classmethod
    def not_found(cls) -> "QueryResult":
        return cls(QueryOutcome.NOT_FOUND)

    @classmethod
    def of(cls, entries: Sequence[Any]) -> "QueryResult":
        entries = tuple(entries)
        if not entries:
            return cls(QueryOutcome.EMPTY)
        return cls(QueryOutcome.FOUND, entries)


class MediaBridgeError(Exception):
    """Base exception for Media Bridge operations."""


class AuthorizationError(MediaBridgeError):
    """Raised when an authorization request ends in a non-authorized status."""

    def __init__(self, status: AuthorizationStatus):
        self.status = status
        super().__init__(self._build_message(status))

    @staticmethod
    def _build_message(status: AuthorizationStatus) -> str:
        if status is AuthorizationStatus.DENIED:
            return (
                "You've denied access to your music library. "
                "Enable access in Settings to use this feature."
            )
        if status is AuthorizationStatus.RESTRICTED:
            return (
                "Access to your music library is restricted. "
                "This may be due to parental controls or device settings."
            )
        if status is AuthorizationStatus.NOT_DETERMINED:
            return "Unable to request music library access. Please try again."
        return (
            f"Unable to access your music library ({status.value}). "
            "Please check your device settings."
        )


class QueryError(MediaBridgeError):
    """Raised when the library reports that a query produced no result."""

    predicate: Optional["PredicateInfo"] = None


class ItemsNotFoundError(QueryError):
    """No media items of the requested kind."""

    def __init__(self) -> None:
        super().__init__(
            "No media items found in your library. "
            "Try adding music to your library and try again."
        )


class ItemNotFoundError(QueryError):
    """No media items matching a predicate."""

    def __init__(self, predicate: "PredicateInfo"):
        self.predicate = predicate
        super().__init__(
            f"Couldn't find any media items matching {predicate.description}. "
            "Check your filters and try again."
        )


class CollectionsNotFoundError(QueryError):
    """No media collections of the requested kind."""

    def __init__(self) -> None:
        super().__init__(
            "No media collections found in your library. "
            "Try adding music to your library and try again."
        )


class CollectionNotFoundError(QueryError):
    """No media collections matching a predicate."""

    def __init__(self, predicate: "PredicateInfo"):
        self.predicate = predicate
        super().__init__(
            f"Couldn't find any collections matching {predicate.description}. "
            "Check your filters and try again."
        )

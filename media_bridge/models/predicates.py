"""Predicate model for media library queries.

A predicate is a semantic filter intent ("by artist", "by album id", ...)
paired with a value. ``descriptor`` turns it into the property-level
``MediaPropertyPredicate`` the library's query engine executes.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Type, Union

from media_bridge.models import ComparisonMode, MediaItemProperty, MediaType

PredicateValue = Union[int, str]


@dataclass(frozen=True)
class MediaPropertyPredicate:
    """Property-level filter descriptor."""
    property: MediaItemProperty
    value: PredicateValue
    comparison: ComparisonMode


@dataclass(frozen=True)
class PredicateInfo:
    """Base class of the predicate variants."""

    @property
    def description(self) -> str:
        return description(self)

    def predicate(self, comparison: ComparisonMode) -> MediaPropertyPredicate:
        return descriptor(self, comparison)


@dataclass(frozen=True)
class ById(PredicateInfo):
    value: int


@dataclass(frozen=True)
class ByMediaType(PredicateInfo):
    value: MediaType


@dataclass(frozen=True)
class ByTitle(PredicateInfo):
    value: str


@dataclass(frozen=True)
class ByAlbumTitle(PredicateInfo):
    value: str


@dataclass(frozen=True)
class ByAlbumId(PredicateInfo):
    value: int


@dataclass(frozen=True)
class ByArtist(PredicateInfo):
    value: str


@dataclass(frozen=True)
class ByArtistId(PredicateInfo):
    value: int


@dataclass(frozen=True)
class ByAlbumArtist(PredicateInfo):
    value: str


@dataclass(frozen=True)
class ByAlbumArtistId(PredicateInfo):
    value: int


@dataclass(frozen=True)
class ByGenre(PredicateInfo):
    value: str


@dataclass(frozen=True)
class ByGenreId(PredicateInfo):
    value: int


@dataclass(frozen=True)
class ByComposer(PredicateInfo):
    value: str


@dataclass(frozen=True)
class ByComposerId(PredicateInfo):
    value: int


def _resolve(predicate: PredicateInfo) -> tuple:
    match predicate:
        case ById(value):
            return MediaItemProperty.PERSISTENT_ID, value
        case ByMediaType(value):
            return MediaItemProperty.MEDIA_TYPE, int(value)
        case ByTitle(value):
            return MediaItemProperty.TITLE, value
        case ByAlbumTitle(value):
            return MediaItemProperty.ALBUM_TITLE, value
        case ByAlbumId(value):
            return MediaItemProperty.ALBUM_PERSISTENT_ID, value
        case ByArtist(value):
            return MediaItemProperty.ARTIST, value
        case ByArtistId(value):
            return MediaItemProperty.ARTIST_PERSISTENT_ID, value
        case ByAlbumArtist(value):
            return MediaItemProperty.ALBUM_ARTIST, value
        case ByAlbumArtistId(value):
            return MediaItemProperty.ALBUM_ARTIST_PERSISTENT_ID, value
        case ByGenre(value):
            return MediaItemProperty.GENRE, value
        case ByGenreId(value):
            return MediaItemProperty.GENRE_PERSISTENT_ID, value
        case ByComposer(value):
            return MediaItemProperty.COMPOSER, value
        case ByComposerId(value):
            return MediaItemProperty.COMPOSER_PERSISTENT_ID, value
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def descriptor(predicate: PredicateInfo, comparison: ComparisonMode) -> MediaPropertyPredicate:
    """Build the property-level descriptor for a predicate.

    Args:
        predicate: Filter intent
        comparison: Comparison mode, used as given

    Returns:
        Descriptor carrying the property key, raw value and comparison mode
    """
    prop, value = _resolve(predicate)
    return MediaPropertyPredicate(property=prop, value=value, comparison=comparison)


def description(predicate: PredicateInfo) -> str:
    """Human-readable form used in error messages."""
    prop, value = _resolve(predicate)
    return f"{prop.value} with value '{value}'"


PREDICATE_TYPES: Dict[str, Type[PredicateInfo]] = {
    "id": ById,
    "media-type": ByMediaType,
    "title": ByTitle,
    "album": ByAlbumTitle,
    "album-id": ByAlbumId,
    "artist": ByArtist,
    "artist-id": ByArtistId,
    "album-artist": ByAlbumArtist,
    "album-artist-id": ByAlbumArtistId,
    "genre": ByGenre,
    "genre-id": ByGenreId,
    "composer": ByComposer,
    "composer-id": ByComposerId,
}


def _parse_media_type(raw: str) -> MediaType:
    if raw.isdigit():
        return MediaType(int(raw))
    return MediaType[raw.upper().replace("-", "_")]


_VALUE_PARSERS: Dict[Type[PredicateInfo], Callable[[str], PredicateValue]] = {
    ById: int,
    ByMediaType: _parse_media_type,
    ByAlbumId: int,
    ByArtistId: int,
    ByAlbumArtistId: int,
    ByGenreId: int,
    ByComposerId: int,
}


def predicate_from_name(name: str, raw: str) -> PredicateInfo:
    """Build a predicate from a command line style name and raw value.

    Raises:
        ValueError: If the name is unknown or the value cannot be parsed
    """
    try:
        predicate_type = PREDICATE_TYPES[name]
    except KeyError as e:
        raise ValueError(f"Unknown predicate: {name}") from e

    parser = _VALUE_PARSERS.get(predicate_type, str)
    try:
        return predicate_type(parser(raw))
    except KeyError as e:
        raise ValueError(f"Invalid value for {name}: {raw}") from e

"""Unit tests for file utilities."""

import pytest

from media_bridge.models import MediaType
from media_bridge.utils.file_utils import (
    TrackMetadata,
    get_track_metadata,
    is_audio_file,
    make_persistent_id,
    normalize_name,
    track_to_media_item,
)


def test_normalize_name():
    """Test tag value normalization."""
    test_cases = [
        ("The Beatles", "thebeatles"),
        ("AC/DC", "acdc"),
        ("Kind of Blue (Legacy Edition)", "kindofbluelegacyedition"),
        ("Track #9!", "track9"),
        ("", ""),
    ]

    for input_name, expected in test_cases:
        assert normalize_name(input_name) == expected


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("song.mp3", True),
        ("SONG.FLAC", True),
        ("track.m4a", True),
        ("cover.jpg", False),
        ("notes.txt", False),
        ("noextension", False),
    ],
)
def test_is_audio_file(filename, expected):
    """Test audio detection by extension."""
    assert is_audio_file(filename) is expected


def test_make_persistent_id():
    """Identifiers are stable, positive and insensitive to case and punctuation."""
    first = make_persistent_id("The Beatles", "Abbey Road")
    assert first == make_persistent_id("the beatles", "ABBEY ROAD!")
    assert first != make_persistent_id("The Beatles", "Help!")
    assert 0 <= first < 2**63


@pytest.fixture
def audio_file(tmp_path):
    """An empty file standing in for an audio file."""
    path = tmp_path / "01 So What.flac"
    path.write_bytes(b"")
    return path


def test_get_track_metadata(audio_file, mocker):
    """Tags are read through mutagen's easy interface."""
    audio = mocker.Mock(
        tags={
            "title": ["So What"],
            "album": ["Kind of Blue"],
            "artist": ["Miles Davis"],
            "genre": ["Jazz"],
            "tracknumber": ["1/5"],
            "date": ["1959"],
        },
        info=mocker.Mock(length=562.5),
    )
    mutagen_file = mocker.patch("media_bridge.utils.file_utils.MutagenFile", return_value=audio)

    meta = get_track_metadata(str(audio_file))

    mutagen_file.assert_called_once_with(str(audio_file), easy=True)
    assert meta.title == "So What"
    assert meta.album == "Kind of Blue"
    assert meta.artist == "Miles Davis"
    assert meta.album_artist is None
    assert meta.composer is None
    assert meta.track_number == 1
    assert meta.release_date == "1959"
    assert meta.duration == 562.5
    assert meta.date_added


def test_get_track_metadata_title_from_filename(audio_file, mocker):
    """Untagged files are titled after the file name."""
    audio = mocker.Mock(tags=None, info=mocker.Mock(length=10.0))
    mocker.patch("media_bridge.utils.file_utils.MutagenFile", return_value=audio)

    meta = get_track_metadata(str(audio_file))

    assert meta.title == "01 So What"
    assert meta.track_number is None


def test_get_track_metadata_unreadable(audio_file, mocker):
    """Files mutagen cannot read are skipped."""
    mocker.patch("media_bridge.utils.file_utils.MutagenFile", return_value=None)
    assert get_track_metadata(str(audio_file)) is None

    mocker.patch("media_bridge.utils.file_utils.MutagenFile", side_effect=ValueError("bad header"))
    assert get_track_metadata(str(audio_file)) is None


def test_get_track_metadata_missing_file(tmp_path):
    """Test with non-existent file."""
    assert get_track_metadata(str(tmp_path / "missing.mp3")) is None


def test_track_to_media_item():
    """Catalog entries derive identifiers from tags."""
    meta = TrackMetadata(
        path="/music/so_what.flac",
        title="So What",
        album="Kind of Blue",
        artist="Miles Davis",
        album_artist=None,
        genre="Jazz",
        composer=None,
        track_number=1,
        release_date="1959",
        duration=562.5,
        date_added="2024-01-01T00:00:00",
    )

    item = track_to_media_item(meta)

    assert item.media_type is MediaType.MUSIC
    assert item.persistent_id == make_persistent_id("/music/so_what.flac")
    assert item.album_artist == "Miles Davis"
    assert item.album_persistent_id == make_persistent_id("Miles Davis", "Kind of Blue")
    assert item.artist_persistent_id == item.album_artist_persistent_id
    assert item.composer_persistent_id is None
    assert item.playback_duration == 562.5
    assert item.asset_path == "/music/so_what.flac"

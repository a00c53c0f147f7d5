"""Test configuration for pytest."""

import os
import sys
from pathlib import Path
from typing import Generator, List

import pytest

from media_bridge.database.db_manager import DatabaseManager
from media_bridge.models import AuthorizationStatus, MediaItem, MediaType

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory) -> Path:
    """Create a temporary database for testing."""
    db_dir = tmp_path_factory.mktemp("test_db")
    return db_dir / "test.db"


@pytest.fixture(scope="function")
def db_manager(test_db_path: Path) -> Generator[DatabaseManager, None, None]:
    """Create an initialized, authorized test catalog."""
    manager = DatabaseManager(str(test_db_path))
    manager.init_database()
    manager.set_authorization_status(AuthorizationStatus.AUTHORIZED)
    yield manager
    # Cleanup
    manager.close()
    if test_db_path.exists():
        os.unlink(test_db_path)


@pytest.fixture
def sample_items() -> List[MediaItem]:
    """A small catalog: two albums and a podcast episode."""
    return [
        MediaItem(
            persistent_id=1,
            title="Come Together",
            album_title="Abbey Road",
            album_persistent_id=100,
            artist="The Beatles",
            artist_persistent_id=10,
            album_artist="The Beatles",
            album_artist_persistent_id=10,
            genre="Rock",
            genre_persistent_id=1000,
            composer="Lennon-McCartney",
            composer_persistent_id=5000,
            album_track_number=1,
            playback_duration=259.0,
            play_count=12,
        ),
        MediaItem(
            persistent_id=2,
            title="Something",
            album_title="Abbey Road",
            album_persistent_id=100,
            artist="The Beatles",
            artist_persistent_id=10,
            album_artist="The Beatles",
            album_artist_persistent_id=10,
            genre="Rock",
            genre_persistent_id=1000,
            composer="George Harrison",
            composer_persistent_id=5001,
            album_track_number=2,
            playback_duration=182.0,
            play_count=30,
        ),
        MediaItem(
            persistent_id=3,
            title="So What",
            album_title="Kind of Blue",
            album_persistent_id=200,
            artist="Miles Davis",
            artist_persistent_id=20,
            album_artist="Miles Davis",
            album_artist_persistent_id=20,
            genre="Jazz",
            genre_persistent_id=2000,
            composer="Miles Davis",
            composer_persistent_id=5002,
            album_track_number=1,
            playback_duration=562.0,
            play_count=3,
        ),
        MediaItem(
            persistent_id=4,
            media_type=MediaType.PODCAST,
            title="Episode 1",
            album_title="Jazz Talk",
            album_persistent_id=300,
            artist="Host",
            artist_persistent_id=30,
            genre="Jazz",
            genre_persistent_id=2000,
        ),
    ]

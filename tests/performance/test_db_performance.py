"""Performance tests for database operations."""
import pytest

from media_bridge.database.db_manager import DatabaseManager
from media_bridge.models import ComparisonMode, GroupingMode, MediaItem, MediaType
from media_bridge.models.predicates import ByArtist, ByMediaType


def create_test_items(count: int) -> list[MediaItem]:
    """Create test catalog items spread over ten albums."""
    return [
        MediaItem(
            persistent_id=i,
            title=f"Track {i}",
            album_title=f"Album {i % 10}",
            album_persistent_id=1000 + i % 10,
            artist=f"Artist {i % 5}",
            artist_persistent_id=2000 + i % 5,
            genre="Jazz",
            playback_duration=180.0,
        )
        for i in range(1, count + 1)
    ]


@pytest.mark.performance
def test_bulk_item_insert(db_manager: DatabaseManager, benchmark):
    """Test the performance of bulk item insertion."""
    items = create_test_items(1000)

    benchmark(db_manager.store_items, items)

    assert db_manager.count_items() == 1000


@pytest.mark.performance
def test_item_query_performance(db_manager: DatabaseManager, benchmark):
    """Test the performance of filtered item queries."""
    db_manager.store_items(create_test_items(1000))
    db_manager.create_indices()
    filters = frozenset(
        {
            ByMediaType(MediaType.MUSIC).predicate(ComparisonMode.CONTAINS),
            ByArtist("Artist 3").predicate(ComparisonMode.CONTAINS),
        }
    )

    result = benchmark(db_manager._run_query, filters, GroupingMode.TITLE, False)

    assert len(result.entries) == 200


@pytest.mark.performance
def test_collection_query_performance(db_manager: DatabaseManager, benchmark):
    """Test the performance of grouping items into albums."""
    db_manager.store_items(create_test_items(1000))
    filters = frozenset({ByMediaType(MediaType.MUSIC).predicate(ComparisonMode.EQUAL_TO)})

    result = benchmark(db_manager._run_query, filters, GroupingMode.ALBUM, True)

    assert len(result.entries) == 10
    assert all(album.count == 100 for album in result.entries)

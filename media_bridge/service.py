"""Query service for the media library."""

import logging
from typing import FrozenSet, List, Optional, Protocol

from media_bridge.models import (
    CollectionNotFoundError,
    CollectionsNotFoundError,
    ComparisonMode,
    GroupingMode,
    ItemNotFoundError,
    ItemsNotFoundError,
    MediaItem,
    MediaItemCollection,
    MediaType,
    QueryError,
    QueryOutcome,
    QueryResult,
)
from media_bridge.models.predicates import ByMediaType, MediaPropertyPredicate, PredicateInfo


class MediaQueryExecutor(Protocol):
    """Query primitive of the media library."""

    async def execute_query(
        self,
        filter_set: FrozenSet[MediaPropertyPredicate],
        grouping: GroupingMode,
        wants_collections: bool,
    ) -> QueryResult:
        """Run a filter set; returns items, or collections when requested."""


class MusicLibraryService:
    """Runs typed queries against the media library."""

    def __init__(self, query: MediaQueryExecutor, logger: Optional[logging.Logger] = None):
        """Initialize the service.

        Args:
            query: Object exposing the library's query primitive
            logger: Logger to report to; defaults to the module logger
        """
        self.query = query
        self.logger = logger or logging.getLogger(__name__)

    async def fetch_all(self, media_type: MediaType, grouping: GroupingMode) -> List[MediaItem]:
        """Fetch every item of a kind.

        Raises:
            ItemsNotFoundError: If the library returns no result
        """
        filter_set = self._filter_set(media_type, ComparisonMode.EQUAL_TO)
        result = await self.query.execute_query(filter_set, grouping, False)
        return self._unwrap(result, ItemsNotFoundError)

    async def fetch(
        self,
        media_type: MediaType,
        predicate: PredicateInfo,
        comparison: ComparisonMode,
        grouping: GroupingMode,
    ) -> List[MediaItem]:
        """Fetch items of a kind matching a predicate.

        Raises:
            ItemNotFoundError: If the library returns no result
        """
        filter_set = self._filter_set(media_type, comparison, predicate)
        result = await self.query.execute_query(filter_set, grouping, False)
        return self._unwrap(result, lambda: ItemNotFoundError(predicate))

    async def fetch_all_collections(
        self, media_type: MediaType, grouping: GroupingMode
    ) -> List[MediaItemCollection]:
        """Fetch every collection of a kind.

        Raises:
            CollectionsNotFoundError: If the library returns no result
        """
        filter_set = self._filter_set(media_type, ComparisonMode.EQUAL_TO)
        result = await self.query.execute_query(filter_set, grouping, True)
        return self._unwrap(result, CollectionsNotFoundError)

    async def fetch_collections(
        self,
        media_type: MediaType,
        predicate: PredicateInfo,
        comparison: ComparisonMode,
        grouping: GroupingMode,
    ) -> List[MediaItemCollection]:
        """Fetch collections of a kind matching a predicate.

        Raises:
            CollectionNotFoundError: If the library returns no result
        """
        filter_set = self._filter_set(media_type, comparison, predicate)
        result = await self.query.execute_query(filter_set, grouping, True)
        return self._unwrap(result, lambda: CollectionNotFoundError(predicate))

    @staticmethod
    def _filter_set(
        media_type: MediaType,
        comparison: ComparisonMode,
        predicate: Optional[PredicateInfo] = None,
    ) -> FrozenSet[MediaPropertyPredicate]:
        filters = {ByMediaType(media_type).predicate(comparison)}
        if predicate is not None:
            filters.add(predicate.predicate(comparison))
        return frozenset(filters)

    def _unwrap(self, result: QueryResult, not_found) -> list:
        match result.outcome:
            case QueryOutcome.NOT_FOUND:
                error: QueryError = not_found()
                self.logger.debug("Query returned no result: %s", error)
                raise error
            case QueryOutcome.EMPTY:
                return []
            case QueryOutcome.FOUND:
                return list(result.entries)
        raise ValueError(f"Unknown query outcome: {result.outcome!r}")

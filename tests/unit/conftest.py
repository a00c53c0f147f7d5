"""Configuration for unit tests."""

import asyncio
import logging
from typing import List, Optional

import pytest

from media_bridge.models import AuthorizationStatus, QueryResult


@pytest.fixture(autouse=True)
def setup_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)
    yield


class FakeMediaLibrary:
    """Substitute store returning canned statuses and query results."""

    def __init__(
        self,
        status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        status_after_request: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        result: Optional[QueryResult] = None,
        update_status_on_request: bool = True,
    ):
        self.status = status
        self.status_after_request = status_after_request
        self.result = result if result is not None else QueryResult.of([])
        self.update_status_on_request = update_status_on_request
        self.request_count = 0
        self.queries: List[tuple] = []
        self.request_gate: Optional[asyncio.Event] = None
        self.query_gate: Optional[asyncio.Event] = None

    def authorization_status(self) -> AuthorizationStatus:
        return self.status

    async def request_authorization(self) -> AuthorizationStatus:
        self.request_count += 1
        if self.request_gate is not None:
            await self.request_gate.wait()
        if self.update_status_on_request:
            self.status = self.status_after_request
        return self.status_after_request

    async def execute_query(self, filter_set, grouping, wants_collections) -> QueryResult:
        self.queries.append((filter_set, grouping, wants_collections))
        if self.query_gate is not None:
            await self.query_gate.wait()
        return self.result


@pytest.fixture
def fake_library() -> FakeMediaLibrary:
    """Authorized substitute store with an empty result."""
    return FakeMediaLibrary()


@pytest.fixture
def make_library():
    """Factory for substitute stores with custom statuses and results."""
    return FakeMediaLibrary

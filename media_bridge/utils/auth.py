"""Authorization utilities for the media library."""

import asyncio
import logging
from typing import Optional, Protocol

from media_bridge.models import AuthorizationError, AuthorizationStatus


class AuthorizationProvider(Protocol):
    """Permission primitives of the media library."""

    def authorization_status(self) -> AuthorizationStatus:
        """Return the current status without prompting."""

    async def request_authorization(self) -> AuthorizationStatus:
        """Ask for access; may show a prompt and wait for the user."""


class AuthorizationManager:
    """Guards access to the media library."""

    def __init__(self, library: AuthorizationProvider, logger: Optional[logging.Logger] = None):
        """Initialize the manager.

        Args:
            library: Object exposing the library's permission primitives
            logger: Logger to report to; defaults to the module logger
        """
        self.library = library
        self.logger = logger or logging.getLogger(__name__)
        self._pending: Optional[asyncio.Future] = None

    def status(self) -> AuthorizationStatus:
        """Return the current authorization status. Never prompts."""
        return self.library.authorization_status()

    async def authorize(self) -> AuthorizationStatus:
        """Request access to the media library.

        Returns immediately when access is already granted. Concurrent calls
        share a single pending request to the library.

        Returns:
            AuthorizationStatus.AUTHORIZED

        Raises:
            AuthorizationError: If the request ends in any other status
        """
        if self.status() is AuthorizationStatus.AUTHORIZED:
            self.logger.debug("Access to music library already authorized")
            return AuthorizationStatus.AUTHORIZED

        if self._pending is None:
            self.logger.debug("Requesting music library authorization")
            self._pending = asyncio.ensure_future(self.library.request_authorization())
            self._pending.add_done_callback(self._request_done)
        else:
            self.logger.debug("Joining pending authorization request")

        # A cancelled waiter must not cancel the shared request
        status = await asyncio.shield(self._pending)

        if status is not AuthorizationStatus.AUTHORIZED:
            self.logger.warning("Music library authorization failed: %s", status.value)
            raise AuthorizationError(status)

        self.logger.info("Access to music library is authorized")
        return status

    def _request_done(self, future: asyncio.Future) -> None:
        if self._pending is future:
            self._pending = None
        if not future.cancelled() and future.exception() is not None:
            self.logger.error("Authorization request failed: %s", future.exception())

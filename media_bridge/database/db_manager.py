"""Database operations for the Media Bridge catalog."""

import asyncio
import logging
import sqlite3
import threading
from itertools import groupby
from typing import Any, Callable, Iterable, List, Optional, Tuple

from media_bridge.database.models import (
    ACCESS_TABLE,
    GROUPING_COLUMNS,
    ITEM_COLUMNS,
    ITEMS_TABLE,
    PROPERTY_COLUMNS,
)
from media_bridge.models import (
    AuthorizationStatus,
    ComparisonMode,
    GroupingMode,
    MediaItem,
    MediaItemCollection,
    MediaItemProperty,
    MediaType,
    QueryResult,
)
from media_bridge.models.predicates import MediaPropertyPredicate

AUTHORIZATION_PROMPT = "Allow access to your music library?"

_INTEGER_COLUMNS = {
    "persistent_id",
    "album_persistent_id",
    "artist_persistent_id",
    "album_artist_persistent_id",
    "genre_persistent_id",
    "composer_persistent_id",
}

# Range of SQLite INTEGER; no stored id lies outside it
_SQLITE_INTEGER_MIN = -(2**63)
_SQLITE_INTEGER_MAX = 2**63 - 1


class DatabaseError(Exception):
    """Database error exception."""


class DatabaseManager:
    """SQLite-backed media catalog.

    Exposes the permission and query primitives used by
    ``AuthorizationManager`` and ``MusicLibraryService``.
    """

    def __init__(
        self,
        db_path: str = "library.db",
        dry_run: bool = False,
        prompt: Optional[Callable[[str], bool]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize database manager.

        Args:
            db_path: Path to SQLite database file
            dry_run: If True, log write statements without executing them
            prompt: Asked once to grant access while the status is undetermined
            logger: Logger to report to; defaults to the module logger
        """
        self.db_path = db_path
        self.conn = None
        self.cursor = None
        self.dry_run = dry_run
        self.prompt = prompt
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()

    def _execute(self, sql: str, params: Tuple[Any, ...] = None, write: bool = False) -> None:
        """Execute SQL with optional dry run mode.

        Args:
            sql: SQL query to execute
            params: Query parameters
            write: Whether the statement modifies the database
        """
        if self.dry_run and write:
            if params:
                sql_formatted = sql.replace("?", "%r")
                self.logger.info("[DRY RUN] Would execute: %s", sql_formatted % tuple(params))
            else:
                self.logger.info("[DRY RUN] Would execute: %s", sql)
            return

        if not self.conn or not self.cursor:
            self.connect()

        if params:
            self.cursor.execute(sql, params)
        else:
            self.cursor.execute(sql)

    def _commit(self) -> None:
        """Commit transaction with dry run support."""
        if self.dry_run:
            self.logger.info("[DRY RUN] Would commit transaction")
            return
        self.conn.commit()

    def connect(self) -> None:
        """Connect to the database."""
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.cursor = self.conn.cursor()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
        self.conn = None
        self.cursor = None

    def init_database(self) -> None:
        """Drop and recreate the catalog tables. Access settings are kept."""
        with self._lock:
            try:
                self._execute(f"DROP TABLE IF EXISTS {ITEMS_TABLE}", write=True)
                self._execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {ITEMS_TABLE} (
                        persistent_id INTEGER PRIMARY KEY,
                        media_type INTEGER NOT NULL,
                        title TEXT,
                        album_title TEXT,
                        album_persistent_id INTEGER,
                        artist TEXT,
                        artist_persistent_id INTEGER,
                        album_artist TEXT,
                        album_artist_persistent_id INTEGER,
                        genre TEXT,
                        genre_persistent_id INTEGER,
                        composer TEXT,
                        composer_persistent_id INTEGER,
                        album_track_number INTEGER,
                        playback_duration REAL NOT NULL DEFAULT 0,
                        play_count INTEGER NOT NULL DEFAULT 0,
                        skip_count INTEGER NOT NULL DEFAULT 0,
                        rating INTEGER NOT NULL DEFAULT 0,
                        is_explicit_item INTEGER NOT NULL DEFAULT 0,
                        date_added TEXT,
                        release_date TEXT,
                        asset_path TEXT
                    )
                """,
                    write=True,
                )
                self._create_access_table()
                self._commit()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to initialize database: {e}") from e

    def _create_access_table(self) -> None:
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {ACCESS_TABLE} (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                status TEXT NOT NULL
            )
        """,
            write=True,
        )

    def create_indices(self) -> None:
        """Create indices for better query performance."""
        with self._lock:
            try:
                for column in ("title", "album_title", "artist", "album_artist", "genre", "composer"):
                    self._execute(
                        f"""
                        CREATE INDEX IF NOT EXISTS {ITEMS_TABLE}_{column}_idx
                        ON {ITEMS_TABLE}({column})
                    """,
                        write=True,
                    )
                self._commit()
                self.logger.info("Created indices for %s", ITEMS_TABLE)
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to create indices: {e}") from e

    def store_item(self, item: MediaItem) -> None:
        """Store a media item in the catalog."""
        self.store_items([item])

    def store_items(self, items: Iterable[MediaItem]) -> None:
        """Store media items in the catalog in one transaction."""
        placeholders = ", ".join("?" for _ in ITEM_COLUMNS)
        sql = f"""
            INSERT OR REPLACE INTO {ITEMS_TABLE} ({', '.join(ITEM_COLUMNS)})
            VALUES ({placeholders})
        """
        with self._lock:
            try:
                for item in items:
                    self._execute(sql, self._item_to_row(item), write=True)
                self._commit()
            except (sqlite3.Error, OverflowError) as e:
                raise DatabaseError(f"Failed to store media item: {e}") from e

    @staticmethod
    def _item_to_row(item: MediaItem) -> Tuple[Any, ...]:
        row = []
        for column in ITEM_COLUMNS:
            value = getattr(item, column)
            if column == "media_type":
                value = int(value)
            elif column == "is_explicit_item":
                value = int(bool(value))
            row.append(value)
        return tuple(row)

    @staticmethod
    def _row_to_item(row: Tuple[Any, ...]) -> MediaItem:
        values = dict(zip(ITEM_COLUMNS, row))
        values["media_type"] = MediaType(values["media_type"])
        values["is_explicit_item"] = bool(values["is_explicit_item"])
        return MediaItem(**values)

    def list_tables(self) -> List[str]:
        """List all tables in the database."""
        try:
            self._execute("SELECT name FROM sqlite_master WHERE type='table'")
            return [row[0] for row in self.cursor.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list tables: {e}") from e

    def count_items(self) -> int:
        """Count items in the catalog."""
        try:
            self._execute(f"SELECT COUNT(*) FROM {ITEMS_TABLE}")
            return self.cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to count items: {e}") from e

    def clear_data(self) -> None:
        """Remove all items from the catalog."""
        with self._lock:
            try:
                self._execute(f"DELETE FROM {ITEMS_TABLE}", write=True)
                self._commit()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to clear data: {e}") from e

    def authorization_status(self) -> AuthorizationStatus:
        """Return the persisted access status without prompting."""
        with self._lock:
            return self._read_status()

    def _read_status(self) -> AuthorizationStatus:
        if ACCESS_TABLE not in self.list_tables():
            return AuthorizationStatus.NOT_DETERMINED
        try:
            self._execute(f"SELECT status FROM {ACCESS_TABLE} WHERE id = 1")
            row = self.cursor.fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to read access status: {e}") from e
        return AuthorizationStatus(row[0]) if row else AuthorizationStatus.NOT_DETERMINED

    def set_authorization_status(self, status: AuthorizationStatus) -> None:
        """Persist an access status, the way a device settings change would."""
        with self._lock:
            self._write_status(status)

    def _write_status(self, status: AuthorizationStatus) -> None:
        try:
            self._create_access_table()
            self._execute(
                f"INSERT OR REPLACE INTO {ACCESS_TABLE} (id, status) VALUES (1, ?)",
                (status.value,),
                write=True,
            )
            self._commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to store access status: {e}") from e

    async def request_authorization(self) -> AuthorizationStatus:
        """Ask for access to the catalog.

        A decided status is returned as is. While undetermined, the prompt is
        asked and its answer persisted as AUTHORIZED or DENIED.
        """
        status = await asyncio.to_thread(self.authorization_status)
        if status is not AuthorizationStatus.NOT_DETERMINED:
            return status
        if self.prompt is None:
            self.logger.debug("No authorization prompt configured")
            return status

        granted = await asyncio.to_thread(self.prompt, AUTHORIZATION_PROMPT)
        status = AuthorizationStatus.AUTHORIZED if granted else AuthorizationStatus.DENIED
        await asyncio.to_thread(self.set_authorization_status, status)
        return status

    async def execute_query(
        self,
        filter_set: Iterable[MediaPropertyPredicate],
        grouping: GroupingMode,
        wants_collections: bool,
    ) -> QueryResult:
        """Run a filter set against the catalog.

        Returns:
            QueryResult.not_found() when access is not granted or the catalog
            was never initialized, otherwise the (possibly empty) result
        """
        return await asyncio.to_thread(
            self._run_query, frozenset(filter_set), grouping, wants_collections
        )

    def _run_query(
        self,
        filter_set: frozenset,
        grouping: GroupingMode,
        wants_collections: bool,
    ) -> QueryResult:
        with self._lock:
            if self._read_status() is not AuthorizationStatus.AUTHORIZED:
                self.logger.debug("Query rejected: library access not authorized")
                return QueryResult.not_found()
            if ITEMS_TABLE not in self.list_tables():
                self.logger.debug("Query rejected: catalog not initialized")
                return QueryResult.not_found()

            where, params = self._build_where(filter_set)
            key_column, title_column = GROUPING_COLUMNS.get(grouping, (None, None))
            order_by = "rowid"
            if key_column:
                order_by = f"{title_column} COLLATE NOCASE, {key_column}, rowid"

            sql = f"SELECT {', '.join(ITEM_COLUMNS)} FROM {ITEMS_TABLE}"
            if where:
                sql += f" WHERE {where}"
            sql += f" ORDER BY {order_by}"

            try:
                self._execute(sql, tuple(params))
                rows = self.cursor.fetchall()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to query catalog: {e}") from e

        items = [self._row_to_item(row) for row in rows]
        self.logger.debug("Query matched %d items", len(items))
        if not wants_collections:
            return QueryResult.of(items)
        return QueryResult.of(self._group(items, grouping))

    @staticmethod
    def _build_where(filter_set: frozenset) -> Tuple[str, List[Any]]:
        clauses = []
        params: List[Any] = []
        for predicate in sorted(filter_set, key=lambda p: p.property.value):
            column = PROPERTY_COLUMNS[predicate.property]
            if predicate.property is MediaItemProperty.MEDIA_TYPE:
                clauses.append(f"({column} & ?) != 0")
                params.append(int(predicate.value) & int(MediaType.ANY))
            elif predicate.comparison is ComparisonMode.CONTAINS:
                escaped = (
                    str(predicate.value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
                )
                clauses.append(f"CAST({column} AS TEXT) LIKE ? ESCAPE '\\'")
                params.append(f"%{escaped}%")
            elif column in _INTEGER_COLUMNS:
                value = int(predicate.value)
                if not _SQLITE_INTEGER_MIN <= value <= _SQLITE_INTEGER_MAX:
                    clauses.append("0")
                    continue
                clauses.append(f"{column} = ?")
                params.append(value)
            else:
                clauses.append(f"{column} = ?")
                params.append(predicate.value)
        return " AND ".join(clauses), params

    @staticmethod
    def _group(items: List[MediaItem], grouping: GroupingMode) -> List[MediaItemCollection]:
        key_column, title_column = GROUPING_COLUMNS.get(grouping, (None, None))
        if not items:
            return []
        if key_column is None:
            return [MediaItemCollection(items=tuple(items), grouping=grouping)]

        collections = []
        for key, group in groupby(items, key=lambda item: getattr(item, key_column)):
            members = tuple(group)
            collections.append(
                MediaItemCollection(
                    items=members,
                    grouping=grouping,
                    title=getattr(members[0], title_column),
                    persistent_id=key,
                )
            )
        return collections

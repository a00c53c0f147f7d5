"""Main module for Media Bridge."""

import argparse
import asyncio
import logging
import os
import sys
import warnings
from dataclasses import fields
from typing import List, Optional

from tabulate import tabulate

from media_bridge.database.db_manager import DatabaseError, DatabaseManager
from media_bridge.models import (
    AuthorizationError,
    AuthorizationStatus,
    ComparisonMode,
    GroupingMode,
    MediaBridgeError,
    MediaItem,
    MediaItemCollection,
    MediaType,
    SortOrder,
)
from media_bridge.models.predicates import PREDICATE_TYPES, PredicateInfo, predicate_from_name
from media_bridge.service import MusicLibraryService
from media_bridge.utils.auth import AuthorizationManager
from media_bridge.utils.file_utils import get_track_metadata, is_audio_file, track_to_media_item
from media_bridge.utils.sorting import SortKey, sort_entries

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "library.db"

SONG_SORT_KEYS = [field.name for field in fields(MediaItem)]
ALBUM_SORT_KEYS = ["count", "title", "persistent_id"]


class MusicLibrary:
    """Permission-gated access to the music library."""

    def __init__(
        self,
        auth: AuthorizationManager,
        service: MusicLibraryService,
        verify_after_request: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the library.

        Args:
            auth: Authorization gate
            service: Query service
            verify_after_request: Re-read the status after a successful
                authorization request and refuse to query if it is not authorized
            logger: Logger to report to; defaults to the module logger
        """
        self.auth = auth
        self.service = service
        self.verify_after_request = verify_after_request
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_store(
        cls,
        store,
        verify_after_request: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> "MusicLibrary":
        """Build a library whose gate and service both talk to ``store``."""
        return cls(
            AuthorizationManager(store, logger=logger),
            MusicLibraryService(store, logger=logger),
            verify_after_request=verify_after_request,
            logger=logger,
        )

    @property
    def authorization_status(self) -> AuthorizationStatus:
        """Current authorization status. Never prompts."""
        return self.auth.status()

    async def request_authorization(self) -> AuthorizationStatus:
        """Request access to the music library.

        Raises:
            AuthorizationError: If access is not granted
        """
        return await self.auth.authorize()

    async def _ensure_authorized(self) -> None:
        status = self.authorization_status
        if status is AuthorizationStatus.AUTHORIZED:
            self.logger.debug("Access to music library is authorized")
            return

        self.logger.debug("Unauthorized with status: %s", status.value)
        await self.request_authorization()

        if self.verify_after_request:
            status = self.authorization_status
            if status is not AuthorizationStatus.AUTHORIZED:
                self.logger.warning("Status still %s after authorization request", status.value)
                raise AuthorizationError(status)

    async def fetch_all(self, media_type: MediaType, grouping: GroupingMode) -> List[MediaItem]:
        """Fetch all media items of a kind."""
        await self._ensure_authorized()
        return await self.service.fetch_all(media_type, grouping)

    async def media_items(
        self,
        media_type: MediaType,
        predicate: PredicateInfo,
        comparison: ComparisonMode,
        grouping: GroupingMode,
    ) -> List[MediaItem]:
        """Fetch media items of a kind matching a predicate."""
        await self._ensure_authorized()
        return await self.service.fetch(media_type, predicate, comparison, grouping)

    async def fetch_all_collections(
        self, media_type: MediaType, grouping: GroupingMode
    ) -> List[MediaItemCollection]:
        """Fetch all media collections of a kind."""
        await self._ensure_authorized()
        return await self.service.fetch_all_collections(media_type, grouping)

    async def media_item_collections(
        self,
        media_type: MediaType,
        predicate: PredicateInfo,
        comparison: ComparisonMode,
        grouping: GroupingMode,
    ) -> List[MediaItemCollection]:
        """Fetch media collections of a kind matching a predicate."""
        await self._ensure_authorized()
        return await self.service.fetch_collections(media_type, predicate, comparison, grouping)

    async def songs(
        self, sorted_by: Optional[SortKey] = None, order: SortOrder = SortOrder.FORWARD
    ) -> List[MediaItem]:
        """Fetch all songs, optionally sorted.

        Args:
            sorted_by: Attribute path ("play_count") or key function; None keeps fetch order
            order: FORWARD for ascending, REVERSE for descending
        """
        songs = await self.fetch_all(MediaType.MUSIC, GroupingMode.TITLE)
        return sort_entries(songs, sorted_by, order)

    async def songs_matching(
        self, predicate: PredicateInfo, comparison: ComparisonMode = ComparisonMode.EQUAL_TO
    ) -> List[MediaItem]:
        """Fetch songs matching a predicate."""
        return await self.media_items(MediaType.MUSIC, predicate, comparison, GroupingMode.TITLE)

    async def albums(
        self, sorted_by: Optional[SortKey] = None, order: SortOrder = SortOrder.FORWARD
    ) -> List[MediaItemCollection]:
        """Fetch all albums, optionally sorted (e.g. by "count")."""
        albums = await self.fetch_all_collections(MediaType.MUSIC, GroupingMode.ALBUM)
        return sort_entries(albums, sorted_by, order)

    async def albums_matching(
        self,
        predicate: PredicateInfo,
        comparison: ComparisonMode = ComparisonMode.EQUAL_TO,
        grouping: GroupingMode = GroupingMode.ALBUM,
    ) -> List[MediaItemCollection]:
        """Fetch albums matching a predicate."""
        return await self.media_item_collections(MediaType.MUSIC, predicate, comparison, grouping)

    async def fetch_songs(
        self, sorted_by: Optional[SortKey] = None, order: SortOrder = SortOrder.FORWARD
    ) -> List[MediaItem]:
        """Deprecated, use ``songs``."""
        warnings.warn("fetch_songs() is deprecated, use songs()", DeprecationWarning, stacklevel=2)
        return await self.songs(sorted_by, order)

    async def fetch_song(
        self, predicate: PredicateInfo, comparison: ComparisonMode = ComparisonMode.EQUAL_TO
    ) -> List[MediaItem]:
        """Deprecated, use ``songs_matching``."""
        warnings.warn(
            "fetch_song() is deprecated, use songs_matching()", DeprecationWarning, stacklevel=2
        )
        return await self.songs_matching(predicate, comparison)

    async def fetch(
        self,
        media_type: MediaType,
        predicate: PredicateInfo,
        comparison: ComparisonMode,
        grouping: GroupingMode,
    ) -> List[MediaItem]:
        """Deprecated, use ``media_items``."""
        warnings.warn("fetch() is deprecated, use media_items()", DeprecationWarning, stacklevel=2)
        return await self.media_items(media_type, predicate, comparison, grouping)


def ask_permission(message: str) -> bool:
    """Ask the user on the terminal; only "y"/"yes" grants access."""
    answer = input(f"[?] {message} [y/N]: ").strip().lower()
    return answer in ("y", "yes")


def scan_local_directory(db: DatabaseManager, local_dir: str) -> int:
    """Import audio files below ``local_dir`` into the catalog.

    Returns:
        Number of imported tracks
    """
    if not os.path.isdir(local_dir):
        logger.error("Local music directory does not exist: %s", local_dir)
        return 0

    db.init_database()
    total_files = 0

    for root, dirs, files in os.walk(local_dir):
        # Skip hidden directories
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))

        items = []
        for filename in sorted(files):
            if filename.startswith(".") or not is_audio_file(filename):
                continue
            meta = get_track_metadata(os.path.join(root, filename))
            if meta is None:
                logger.debug("Skipping file %s", filename)
                continue
            items.append(track_to_media_item(meta))

        if items:
            db.store_items(items)
            total_files += len(items)
            print(f"\rImported {total_files:5d} tracks", end="", flush=True)

    print()
    db.create_indices()
    logger.info("Imported %d tracks from %s", total_files, local_dir)
    return total_files


def _song_rows(songs: List[MediaItem]) -> List[list]:
    return [
        [
            song.persistent_id,
            song.title,
            song.artist,
            song.album_title,
            song.genre,
            f"{int(song.playback_duration) // 60}:{int(song.playback_duration) % 60:02d}",
            song.play_count,
        ]
        for song in songs
    ]


def _album_rows(albums: List[MediaItemCollection]) -> List[list]:
    rows = []
    for album in albums:
        item = album.representative_item
        rows.append(
            [album.persistent_id, album.title, item.album_artist if item else "", album.count]
        )
    return rows


def print_songs(songs: List[MediaItem]) -> None:
    """Print songs as a table."""
    if not songs:
        print("No songs found")
        return
    print(
        tabulate(
            _song_rows(songs),
            headers=["ID", "Title", "Artist", "Album", "Genre", "Length", "Plays"],
            tablefmt="psql",
        )
    )
    print(f"\nTotal songs: {len(songs)}")


def print_albums(albums: List[MediaItemCollection]) -> None:
    """Print albums as a table."""
    if not albums:
        print("No albums found")
        return
    print(
        tabulate(
            _album_rows(albums),
            headers=["ID", "Album", "Album Artist", "Tracks"],
            tablefmt="psql",
        )
    )
    print(f"\nTotal albums: {len(albums)}")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Media Bridge")

    # Global arguments
    parser.add_argument(
        "--db-path",
        type=str,
        default=os.environ.get("MEDIA_BRIDGE_DB", DEFAULT_DB_PATH),
        help="Catalog database path (default: $MEDIA_BRIDGE_DB or library.db)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Run without making changes")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands", required=True)

    subparsers.add_parser("status", help="Show library access status")
    subparsers.add_parser("authorize", help="Request library access")
    subparsers.add_parser("reset-access", help="Forget the library access decision")

    scan_local_parser = subparsers.add_parser("scan-local", help="Import a local music directory")
    scan_local_parser.add_argument("local_music_dir", type=str, help="Local music directory")

    list_commands = (
        ("songs", "List songs", SONG_SORT_KEYS),
        ("albums", "List albums", ALBUM_SORT_KEYS),
    )
    for name, help_text, sort_keys in list_commands:
        list_parser = subparsers.add_parser(name, help=help_text)
        list_parser.add_argument(
            "--sort-by", choices=sort_keys, default=None, help="Attribute to sort by"
        )
        list_parser.add_argument("--reverse", action="store_true", help="Sort in descending order")

    search_parser = subparsers.add_parser("search", help="Search songs or albums")
    search_parser.add_argument(
        "property", choices=sorted(PREDICATE_TYPES), help="Property to filter on"
    )
    search_parser.add_argument("value", type=str, help="Value to match")
    search_parser.add_argument(
        "--contains", action="store_true", help="Match substrings instead of exact values"
    )
    search_parser.add_argument("--albums", action="store_true", help="Return albums instead of songs")

    return parser.parse_args(argv)


async def run_command(args, library: MusicLibrary, db: DatabaseManager) -> None:
    """Run a parsed command against the library."""
    order = SortOrder.REVERSE if getattr(args, "reverse", False) else SortOrder.FORWARD

    if args.command == "status":
        print(f"Library access: {library.authorization_status.value}")

    elif args.command == "authorize":
        status = await library.request_authorization()
        print(f"Library access: {status.value}")

    elif args.command == "reset-access":
        db.set_authorization_status(AuthorizationStatus.NOT_DETERMINED)
        print(f"Library access: {AuthorizationStatus.NOT_DETERMINED.value}")

    elif args.command == "scan-local":
        scan_local_directory(db, args.local_music_dir)

    elif args.command == "songs":
        print_songs(await library.songs(sorted_by=args.sort_by, order=order))

    elif args.command == "albums":
        print_albums(await library.albums(sorted_by=args.sort_by, order=order))

    elif args.command == "search":
        predicate = predicate_from_name(args.property, args.value)
        comparison = ComparisonMode.CONTAINS if args.contains else ComparisonMode.EQUAL_TO
        if args.albums:
            print_albums(await library.albums_matching(predicate, comparison))
        else:
            print_songs(await library.songs_matching(predicate, comparison))


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the Media Bridge CLI."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    db = DatabaseManager(args.db_path, dry_run=args.dry_run, prompt=ask_permission)
    library = MusicLibrary.from_store(db)

    try:
        asyncio.run(run_command(args, library, db))
    except (MediaBridgeError, DatabaseError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()

"""Command Handler: Orchestrates maintenance command execution.

Receives commands from the main entry point (main.py), runs them against a
CacheFactory and reports results through the UserInterface. Failures are
displayed and reported back as False so the CLI can set its exit code.
"""

import logging
from typing import List, Optional

from snapcache.domain.exceptions import CacheError, CacheExpiredError, CacheMissError
from snapcache.domain.interfaces.user_interface import UserInterface
from snapcache.infrastructure.cache.factory import CacheFactory
from snapcache.infrastructure.cache.file_format import CacheFileInfo

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_EXPIRED = "expired"
STATUS_CORRUPT = "corrupt"


class CommandHandler:
    """Handles incoming commands and delegates to the cache factory."""

    def __init__(self, factory: CacheFactory, ui: UserInterface):
        self.factory = factory
        self.ui = ui

    def _status(self, info: CacheFileInfo) -> str:
        if info.is_empty:
            return STATUS_EMPTY
        if self.factory.is_expired(info):
            return STATUS_EXPIRED
        return STATUS_OK

    @staticmethod
    def _expiry_label(info: CacheFileInfo) -> str:
        if info.metadata is None:
            return "-"
        if not info.metadata.expire_enabled:
            return "never"
        return info.metadata.expiry_time.isoformat(timespec="seconds")

    def handle_list(self) -> bool:
        """Handles the 'list' command: one row per cache file."""
        identifiers = self.factory.identifiers()
        if not identifiers:
            self.ui.display_info(f"No caches in {self.factory.base_dir}")
            return True

        rows: List[List[str]] = []
        for identifier in identifiers:
            try:
                info = self.factory.inspect(identifier)
            except CacheError as e:
                logger.warning(f"Cannot inspect cache '{identifier}': {e}")
                rows.append([identifier, "-", "-", STATUS_CORRUPT])
                continue
            rows.append([identifier, str(info.payload_size), self._expiry_label(info), self._status(info)])
        self.ui.display_table(["Identifier", "Payload bytes", "Expires", "Status"], rows, title=str(self.factory.base_dir))
        return True

    def handle_inspect(self, identifier: str) -> bool:
        """Handles the 'inspect' command: layout and metadata of one file, without loading it."""
        logger.info(f"Handling 'inspect' command for cache: {identifier}")
        try:
            info = self.factory.inspect(identifier)
        except (CacheError, ValueError) as e:
            logger.error(f"Inspect failed for '{identifier}': {e}")
            self.ui.display_error(str(e))
            return False

        rows = [
            ["Path", str(info.path)],
            ["File bytes", str(info.file_size)],
            ["Metadata bytes", "-" if info.metadata_length is None else str(info.metadata_length)],
            ["Payload bytes", str(info.payload_size)],
        ]
        if info.metadata is not None:
            rows.extend([
                ["Identifier", info.metadata.identifier],
                ["Expire enabled", str(info.metadata.expire_enabled)],
                ["Expiry time", info.metadata.expiry_time.isoformat()],
            ])
        rows.append(["Status", self._status(info)])
        self.ui.display_table(["Field", "Value"], rows, title=identifier)
        return True

    def handle_show(self, identifier: str, codec: Optional[str] = None) -> bool:
        """Handles the 'show' command: loads and prints the cached items.

        Loading honors expiry, so an expired cache is deleted by this command.
        """
        logger.info(f"Handling 'show' command for cache: {identifier} (codec={codec or 'default'})")
        try:
            if not self.factory.path_for(identifier).is_file():
                self.ui.display_info(f"No cache named '{identifier}'")
                return True
            cache = self.factory.open(identifier, codec=codec)
            items = cache.load_strict()
        except CacheMissError:
            self.ui.display_info(f"Cache '{identifier}' is empty")
            return True
        except CacheExpiredError:
            self.ui.display_warning(f"Cache '{identifier}' has expired and was deleted")
            return True
        except (CacheError, ValueError) as e:
            logger.error(f"Show failed for '{identifier}': {e}")
            self.ui.display_error(str(e))
            return False

        self.ui.display_output(items, title=f"{identifier} ({len(items)} items)")
        return True

    def handle_clear(self, identifier: str) -> bool:
        """Handles the 'clear' command: deletes one cache file."""
        try:
            removed = self.factory.remove(identifier)
        except (CacheError, ValueError) as e:
            logger.error(f"Clear failed for '{identifier}': {e}")
            self.ui.display_error(str(e))
            return False
        if removed:
            self.ui.display_info(f"Removed cache '{identifier}'")
        else:
            self.ui.display_info(f"No cache named '{identifier}'")
        return True

    def handle_purge(self) -> bool:
        """Handles the 'purge' command: deletes every expired cache file."""
        removed = self.factory.purge_expired()
        if removed:
            self.ui.display_info(f"Removed {len(removed)} expired cache(s): {', '.join(removed)}")
        else:
            self.ui.display_info("No expired caches")
        return True

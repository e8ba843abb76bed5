"""
Persisted browser cookies for the booking website, one file per username.

A stored session is trusted as-is on the next request; there is no expiry
check. Only a fresh login replaces it.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Shared by every store in the process; request threads may log in concurrently
_FILE_LOCK = threading.Lock()


class CredentialStore:
    def __init__(self, directory: str | Path = ".") -> None:
        self.directory = Path(directory)

    def path_for(self, username: str) -> Path:
        return self.directory / f"cookies-{username}.json"

    def load(self, username: str) -> list[dict[str, Any]] | None:
        """
        Read the stored cookies for ``username``.

        Returns:
            The cookie records, or None if nothing usable is stored.
        """
        path = self.path_for(username)
        with _FILE_LOCK:
            if not path.exists():
                return None
            try:
                cookies = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable cookie file {path.name}: {e}")
                return None

        if not isinstance(cookies, list) or not cookies:
            logger.warning(f"Ignoring cookie file {path.name} with no cookie records")
            return None
        return cookies

    def save(self, username: str, cookies: list[dict[str, Any]]) -> Path:
        """Write ``cookies`` for ``username``, replacing any previous file."""
        path = self.path_for(username)
        self.directory.mkdir(parents=True, exist_ok=True)

        with _FILE_LOCK:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(cookies, f)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        logger.info(f"Saved {len(cookies)} cookies to {path.name}")
        return path

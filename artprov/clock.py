# artprov/clock.py
"""
Clock sources for timestamping records.

A clock is any zero-argument callable returning an int. The registry
reads it once per mutating operation that stores a timestamp
(registered_at, assessment_date). Values must never decrease.
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Optional

from .store import STORE_VERSION, write_json

logger = logging.getLogger(__name__)


class ManualClock:
    """
    Externally advanced counter, analogous to a block height.

    With a path the height is kept in a JSON file, so separate processes
    sharing a store directory (CLI runs, a server restart) continue from
    the last height instead of starting over.

    Usage:
        clock = ManualClock(100)
        clock()          # 100
        clock.advance()  # 101
    """

    def __init__(self, height: int = 0, path: Optional[Path] = None):
        if height < 0:
            raise ValueError(f"Clock height must be non-negative, got {height}")
        self.path = Path(path) if path else None
        self._height = height
        self._lock = threading.Lock()
        self._load()

    def _load(self):
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path) as f:
                data = json.load(f)
            self._height = max(self._height, int(data.get("height", 0)))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load clock height from {self.path}: {e}")

    def _move_to(self, height: int):
        previous = self._height
        self._height = height
        if self.path is None:
            return
        try:
            write_json(self.path, {"version": STORE_VERSION, "height": height})
        except Exception:
            self._height = previous
            raise

    def __call__(self) -> int:
        with self._lock:
            return self._height

    @property
    def height(self) -> int:
        return self()

    def advance(self, blocks: int = 1) -> int:
        """Move the clock forward and return the new height."""
        if blocks < 0:
            raise ValueError("Clock cannot move backwards")
        with self._lock:
            self._move_to(self._height + blocks)
            return self._height

    def set(self, height: int) -> None:
        """Jump to a height no lower than the current one."""
        with self._lock:
            if height < self._height:
                raise ValueError(
                    f"Clock cannot move backwards ({self._height} -> {height})"
                )
            self._move_to(height)


class WallClock:
    """Seconds since the epoch, truncated to an int."""

    def __call__(self) -> int:
        return int(time.time())

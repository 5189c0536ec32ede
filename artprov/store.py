# artprov/store.py
"""
Persistent state for the provenance registry.

The registry's whole state is four keyed record maps plus one counter:

    store_dir/
        artists.json          # identity -> Artist
        artworks.json         # artwork ID -> Artwork
        authenticators.json   # identity -> Authenticator
        authentications.json  # artwork ID -> Authentication
        sequence.json         # last issued artwork ID
        clock.json            # manual clock height, when configured

With no store_dir everything lives in memory, which is what tests and
short-lived hosts use.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .authentication.authentications import Authentication
from .authentication.authenticators import Authenticator
from .registry.artists import Artist
from .registry.artworks import Artwork

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

STORE_VERSION = "1.0"


def write_json(path: Path, data: Dict[str, Any]) -> None:
    """
    Write a JSON file atomically.

    The data goes to a temporary file in the same directory, which then
    replaces path, so readers see either the old or the new content.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False,
    ) as f:
        tmp_path = Path(f.name)
        try:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        except BaseException:
            f.close()
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


class EntityMap(Generic[K, V]):
    """
    A keyed collection of immutable records, optionally backed by a JSON index.

    Records must provide to_dict() and a from_dict() classmethod. Integer
    keys are written as strings and converted back on load.
    """

    def __init__(
        self,
        name: str,
        record_cls: Any,
        path: Optional[Path] = None,
        key_type: Callable[[str], K] = str,
    ):
        self.name = name
        self.record_cls = record_cls
        self.path = Path(path) if path else None
        self.key_type = key_type
        self._records: Dict[K, V] = {}
        self._load()

    def _load(self):
        """Load records from disk."""
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path) as f:
                data = json.load(f)
            self._records = {
                self.key_type(key): self.record_cls.from_dict(value)
                for key, value in data.get(self.name, {}).items()
            }
            logger.debug(f"Loaded {len(self._records)} {self.name} from {self.path}")
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning(f"Failed to load {self.name} from {self.path}: {e}")
            self._records = {}

    def _save(self):
        """Save records to disk."""
        if self.path is None:
            return
        data = {
            "version": STORE_VERSION,
            self.name: {str(key): record.to_dict() for key, record in self._records.items()},
        }
        write_json(self.path, data)

    def get(self, key: K) -> Optional[V]:
        return self._records.get(key)

    def put(self, key: K, record: V) -> None:
        """
        Insert or replace the record stored under key.

        If the index cannot be written the in-memory map is restored and
        the error propagates.
        """
        had_key = key in self._records
        previous = self._records.get(key)
        self._records[key] = record
        try:
            self._save()
        except Exception:
            if had_key:
                self._records[key] = previous
            else:
                del self._records[key]
            raise

    def items(self) -> List[Tuple[K, V]]:
        return list(self._records.items())

    def values(self) -> List[V]:
        return list(self._records.values())

    def __contains__(self, key: K) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._records))


class SequenceAllocator:
    """
    Issues ascending integer IDs starting at 1.

    The counter is also the number of IDs issued so far.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._last_id = 0
        self._load()

    def _load(self):
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path) as f:
                data = json.load(f)
            self._last_id = int(data.get("last_id", 0))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load sequence from {self.path}: {e}")
            self._last_id = 0

    def _save(self):
        if self.path is None:
            return
        write_json(self.path, {"version": STORE_VERSION, "last_id": self._last_id})

    def _commit(self, last_id: int):
        """Move the counter to last_id, keeping the old value if the write fails."""
        previous = self._last_id
        self._last_id = last_id
        try:
            self._save()
        except Exception:
            self._last_id = previous
            raise

    def next(self) -> int:
        """Issue the next unused ID."""
        self._commit(self._last_id + 1)
        return self._last_id

    def release(self, issued_id: int) -> None:
        """
        Take back the most recently issued ID.

        Used when the record the ID was issued for could not be stored.
        """
        if issued_id != self._last_id:
            raise ValueError(f"Can only release the last issued ID ({self._last_id}), got {issued_id}")
        self._commit(issued_id - 1)

    def ensure_at_least(self, last_id: int) -> None:
        """Advance the counter so no ID up to last_id is issued again."""
        if last_id > self._last_id:
            logger.warning(
                f"Sequence at {self._last_id} is behind stored records; advancing to {last_id}"
            )
            self._commit(last_id)

    def count(self) -> int:
        """Number of IDs issued so far."""
        return self._last_id


class RegistryStore:
    """
    The combined registry state: four entity maps and the artwork sequence.

    Sub-registries receive the maps they need from here; nothing else
    holds registry state.
    """

    def __init__(self, store_dir: Path | str | None = None):
        self.store_dir = Path(store_dir) if store_dir else None
        if self.store_dir is not None:
            self.store_dir.mkdir(parents=True, exist_ok=True)

        self.artists: EntityMap[str, Artist] = EntityMap(
            "artists", Artist, self._path("artists.json"),
        )
        self.artworks: EntityMap[int, Artwork] = EntityMap(
            "artworks", Artwork, self._path("artworks.json"), key_type=int,
        )
        self.authenticators: EntityMap[str, Authenticator] = EntityMap(
            "authenticators", Authenticator, self._path("authenticators.json"),
        )
        self.authentications: EntityMap[int, Authentication] = EntityMap(
            "authentications", Authentication, self._path("authentications.json"), key_type=int,
        )
        self.sequence = SequenceAllocator(self._path("sequence.json"))
        # IDs already holding an artwork are never reissued
        self.sequence.ensure_at_least(max(self.artworks, default=0))

    def _path(self, filename: str) -> Optional[Path]:
        if self.store_dir is None:
            return None
        return self.store_dir / filename

    @property
    def persistent(self) -> bool:
        return self.store_dir is not None

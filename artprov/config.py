# artprov/config.py
"""
Registry configuration.

Loaded from YAML:

    owner: registry-owner
    store_dir: /var/lib/artprov
    clock: manual          # wall | manual
    start_height: 100      # manual clock only
    signing_key: keys/owner.private.pem

A manual clock with a store_dir keeps its height in store_dir/clock.json;
the owner moves it forward with advance-clock (CLI) or
POST /clock/advance (server).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .clock import ManualClock, WallClock

CLOCKS = ("wall", "manual")
CLOCK_FILE = "clock.json"


@dataclass
class RegistryConfig:
    """Settings needed to build a ProvenanceRegistry."""
    owner: str
    store_dir: Optional[Path] = None
    clock: str = "wall"
    start_height: int = 0
    signing_key: Optional[Path] = None

    def __post_init__(self):
        if not self.owner:
            raise ValueError("Config requires an 'owner' identity")
        if self.clock not in CLOCKS:
            raise ValueError(f"Unknown clock {self.clock!r}, expected one of {', '.join(CLOCKS)}")
        if self.store_dir is not None:
            self.store_dir = Path(self.store_dir)
        if self.signing_key is not None:
            self.signing_key = Path(self.signing_key)

    def make_clock(self):
        """Build the configured clock source."""
        if self.clock == "manual":
            path = self.store_dir / CLOCK_FILE if self.store_dir else None
            return ManualClock(self.start_height, path=path)
        return WallClock()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "store_dir": str(self.store_dir) if self.store_dir else None,
            "clock": self.clock,
            "start_height": self.start_height,
            "signing_key": str(self.signing_key) if self.signing_key else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "RegistryConfig":
        """
        Build a config from parsed data.

        Relative paths are resolved against base_dir when given.
        """
        def _path(value):
            if not value:
                return None
            path = Path(value)
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            return path

        return cls(
            owner=data.get("owner", ""),
            store_dir=_path(data.get("store_dir")),
            clock=data.get("clock", "wall"),
            start_height=int(data.get("start_height", 0)),
            signing_key=_path(data.get("signing_key")),
        )

    @classmethod
    def from_yaml(cls, yaml_content: str, base_dir: Optional[Path] = None) -> "RegistryConfig":
        """Parse config from a YAML string."""
        data = yaml.safe_load(yaml_content) or {}
        if not isinstance(data, dict):
            raise ValueError("Config must be a YAML mapping")
        return cls.from_dict(data, base_dir=base_dir)

    @classmethod
    def from_file(cls, path: Path | str) -> "RegistryConfig":
        """Load config from a YAML file; relative paths are taken from its directory."""
        path = Path(path)
        with open(path, "r") as f:
            return cls.from_yaml(f.read(), base_dir=path.parent)

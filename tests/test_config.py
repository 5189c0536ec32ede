# tests/test_config.py
"""Tests for registry configuration."""

import tempfile
from pathlib import Path

import pytest

from artprov.clock import ManualClock, WallClock
from artprov.config import RegistryConfig


class TestRegistryConfig:
    """Tests for loading config from YAML."""

    def test_from_yaml(self):
        config = RegistryConfig.from_yaml(
            "owner: curator\n"
            "store_dir: /var/lib/artprov\n"
            "clock: manual\n"
            "start_height: 42\n"
        )

        assert config.owner == "curator"
        assert config.store_dir == Path("/var/lib/artprov")
        assert config.clock == "manual"
        assert config.signing_key is None

        clock = config.make_clock()
        assert isinstance(clock, ManualClock)
        assert clock() == 42

    def test_defaults(self):
        config = RegistryConfig.from_yaml("owner: curator\n")

        assert config.store_dir is None
        assert isinstance(config.make_clock(), WallClock)

    def test_owner_required(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("store_dir: /tmp/x\n")

    def test_empty_document(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("")

    def test_non_mapping(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("- owner\n- curator\n")

    def test_unknown_clock(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("owner: curator\nclock: sundial\n")

    def test_relative_paths_from_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "registry.yaml"
            path.write_text("owner: curator\nstore_dir: state\nsigning_key: keys/owner.private.pem\n")

            config = RegistryConfig.from_file(path)

            assert config.store_dir == Path(tmpdir) / "state"
            assert config.signing_key == Path(tmpdir) / "keys" / "owner.private.pem"

    def test_to_dict(self):
        config = RegistryConfig(owner="curator", store_dir="/data")
        assert config.to_dict()["store_dir"] == "/data"


class TestManualClock:
    """Tests for the externally advanced clock."""

    def test_advance(self):
        clock = ManualClock(10)
        assert clock() == 10
        assert clock.advance() == 11
        assert clock.advance(4) == 15
        assert clock.height == 15

    def test_never_moves_backwards(self):
        clock = ManualClock(10)
        with pytest.raises(ValueError):
            clock.set(9)
        with pytest.raises(ValueError):
            clock.advance(-1)
        clock.set(10)
        assert clock() == 10

    def test_negative_start(self):
        with pytest.raises(ValueError):
            ManualClock(-1)

    def test_wall_clock_is_int(self):
        assert isinstance(WallClock()(), int)

    def test_height_persists(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "clock.json"
            clock = ManualClock(10, path=path)
            clock.advance(5)
            clock.set(20)

            assert ManualClock(10, path=path)() == 20
            assert ManualClock(30, path=path)() == 30

    def test_manual_clock_kept_in_store(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = RegistryConfig(owner="curator", store_dir=tmpdir, clock="manual", start_height=3)
            config.make_clock().advance()

            assert (Path(tmpdir) / "clock.json").exists()
            assert config.make_clock()() == 4

"""Shared fixtures: a throwaway install with both storage folders and a game folder."""
import hashlib
from dataclasses import dataclass
from pathlib import Path

import pytest

from oc_swapper.config_store import ConfigStore, Configuration

STEAMVR_BYTES = b"MZ steamvr openvr_api build\x00\x01\x02"
OPENCOMPOSITE_BYTES = b"MZ opencomposite openvr_api build\x00\x03\x04"


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


@dataclass
class SwapEnv:
    root: Path
    store: ConfigStore
    config: Configuration

    @property
    def target(self) -> Path:
        return self.config.target_path

    def target_bytes(self) -> bytes:
        return self.target.read_bytes()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep logs and the audit trail out of the real home directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("OC_SWAPPER_HOME", str(home))
    monkeypatch.delenv("OC_SWAPPER_LOG_FILE", raising=False)
    monkeypatch.delenv("OC_SWAPPER_CONFIG", raising=False)
    return home


@pytest.fixture
def swap_env(tmp_path) -> SwapEnv:
    """A complete config with SteamVR installed in game/."""
    root = tmp_path / "swapper"
    (root / "SteamVR Files").mkdir(parents=True)
    (root / "OpenComposite Files").mkdir()
    (root / "game").mkdir()

    (root / "SteamVR Files" / "openvr_api.dll").write_bytes(STEAMVR_BYTES)
    (root / "OpenComposite Files" / "openvr_api.dll").write_bytes(OPENCOMPOSITE_BYTES)
    (root / "game" / "openvr_api.dll").write_bytes(STEAMVR_BYTES)

    store = ConfigStore(root / "config.ini")
    config = Configuration(
        steamvr_hash=md5_hex(STEAMVR_BYTES),
        opencomposite_hash=md5_hex(OPENCOMPOSITE_BYTES),
        openvr_dll_dir="game",
        base_dir=store.base_dir,
    )
    store.save(config)
    return SwapEnv(root=root, store=store, config=config)

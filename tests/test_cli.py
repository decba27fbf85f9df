"""Tests for the command line shell."""
import dataclasses
import json

import pytest

from oc_swapper import ABOUT_TEXT
from oc_swapper.cli import main
from oc_swapper.utils import audit_log, logging_config
from conftest import OPENCOMPOSITE_BYTES, STEAMVR_BYTES, md5_hex


@pytest.fixture(autouse=True)
def reset_loggers():
    """main() installs handlers bound to the captured streams; drop them afterwards."""
    yield
    for logger in (logging_config.main_logger, logging_config.perf_logger, audit_log.audit_logger):
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()


def run(swap_env, *args):
    return main(["--config", str(swap_env.store.config_path), *args])


class TestStatus:

    def test_steamvr(self, swap_env, capsys):
        assert run(swap_env, "status") == 0

        out = capsys.readouterr().out
        assert "You are currently using SteamVR binaries" in out
        assert "Swap to OpenComposite" in out

    def test_json(self, swap_env, capsys):
        swap_env.target.write_bytes(OPENCOMPOSITE_BYTES)

        assert run(swap_env, "status", "--json") == 0

        data = json.loads(capsys.readouterr().out)
        assert data["state"] == "opencomposite"
        assert data["hash"] == md5_hex(OPENCOMPOSITE_BYTES)

    def test_unknown(self, swap_env, capsys):
        swap_env.target.write_bytes(b"other")

        assert run(swap_env, "status") == 0
        assert "matches neither" in capsys.readouterr().out

    def test_missing_target_bootstraps(self, swap_env, capsys):
        swap_env.target.unlink()

        assert run(swap_env, "status") == 0

        assert swap_env.target_bytes() == STEAMVR_BYTES
        assert "SteamVR" in capsys.readouterr().out

    def test_malformed_config(self, swap_env):
        swap_env.store.config_path.write_text("garbage\n")
        assert run(swap_env, "status") == 1

    def test_first_run_without_target(self, tmp_path):
        config_path = tmp_path / "config.ini"

        assert main(["--config", str(config_path), "status"]) == 1
        assert config_path.exists()


class TestSwap:

    def test_swap(self, swap_env, capsys):
        assert run(swap_env, "swap") == 0

        assert "OpenComposite" in capsys.readouterr().out
        assert swap_env.target_bytes() == OPENCOMPOSITE_BYTES

    def test_swap_unknown_fails(self, swap_env, capsys):
        swap_env.target.write_bytes(b"other")

        assert run(swap_env, "swap") == 1

        assert "neither" in capsys.readouterr().err
        assert swap_env.target_bytes() == b"other"

    def test_swap_twice(self, swap_env):
        assert run(swap_env, "swap") == 0
        assert run(swap_env, "swap") == 0
        assert swap_env.target_bytes() == STEAMVR_BYTES

    def test_history(self, swap_env, capsys):
        run(swap_env, "swap")
        capsys.readouterr()

        assert run(swap_env, "history") == 0

        out = capsys.readouterr().out
        assert "swap" in out
        assert "steamvr -> opencomposite" in out

    def test_history_empty(self, swap_env, capsys):
        assert run(swap_env, "history") == 0
        assert "No swaps recorded" in capsys.readouterr().out


class TestOperatorCommands:

    def test_about(self, capsys):
        assert main(["about"]) == 0
        assert capsys.readouterr().out.strip() == ABOUT_TEXT

    def test_init_creates_config(self, tmp_path, capsys):
        config_path = tmp_path / "config.ini"

        assert main(["--config", str(config_path), "init"]) == 0

        out = capsys.readouterr().out
        assert config_path.exists()
        assert "fill in SteamFile" in out
        assert "fill in OpenVRDLLFilePath" in out

    def test_init_existing(self, swap_env, capsys):
        before = swap_env.store.config_path.read_text()

        assert run(swap_env, "init") == 0

        assert "already exists" in capsys.readouterr().out
        assert swap_env.store.config_path.read_text() == before

    def test_hash(self, swap_env, capsys):
        storage = swap_env.root / "SteamVR Files" / "openvr_api.dll"

        assert main(["hash", str(storage)]) == 0

        assert capsys.readouterr().out.startswith(md5_hex(STEAMVR_BYTES))

    def test_hash_missing_file(self, tmp_path):
        assert main(["hash", str(tmp_path / "nope.dll")]) == 1

    def test_record_hashes(self, swap_env, capsys):
        swap_env.store.save(dataclasses.replace(
            swap_env.config, steamvr_hash="", opencomposite_hash="",
        ))

        assert run(swap_env, "record-hashes") == 0

        config = swap_env.store.load()
        assert config.steamvr_hash == md5_hex(STEAMVR_BYTES)
        assert config.opencomposite_hash == md5_hex(OPENCOMPOSITE_BYTES)
        assert f"SteamFile={md5_hex(STEAMVR_BYTES)}" in capsys.readouterr().out

    def test_record_hashes_missing_storage(self, swap_env):
        (swap_env.root / "OpenComposite Files" / "openvr_api.dll").unlink()
        assert run(swap_env, "record-hashes") == 1

    def test_unwritable_log_location(self, tmp_path, monkeypatch, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        monkeypatch.setenv("OC_SWAPPER_LOG_FILE", str(blocker / "oc_swapper.log"))

        assert main(["about"]) == 1
        assert "cannot set up logging" in capsys.readouterr().err

    def test_requires_command(self):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2

"""
ChainIngest - Replay Script Tests
===================================
Tests for scripts/replay_blocks.py option handling.
"""

import importlib.util
from pathlib import Path

import pytest


SCRIPT_PATH = Path(__file__).parent.parent / "scripts" / "replay_blocks.py"


@pytest.fixture(scope="module")
def replay_script():
    """Modulo dello script caricato da path"""
    spec = importlib.util.spec_from_file_location("replay_blocks", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestReplayScriptSettings:
    """Test settings_from_args"""

    def test_environment_kept_without_flags(self, replay_script, monkeypatch):
        """Test unset flags leave CHAININGEST_ variables in effect"""
        monkeypatch.setenv("CHAININGEST_COINBASE_ADDRESS", "empty")
        monkeypatch.setenv("CHAININGEST_LOG_LEVEL", "WARNING")

        config = replay_script.settings_from_args(replay_script.parse_args(["blocks.json"]))

        assert config.coinbase_address == "empty"
        assert config.log_level == "WARNING"

    def test_flags_override_environment(self, replay_script, monkeypatch):
        monkeypatch.setenv("CHAININGEST_COINBASE_ADDRESS", "empty")

        args = replay_script.parse_args(
            ["blocks.json", "--coinbase-address", "sentinel", "--log-level", "DEBUG"]
        )
        config = replay_script.settings_from_args(args)

        assert config.coinbase_address == "sentinel"
        assert config.log_level == "DEBUG"

    def test_db_path_flag(self, replay_script, temp_data_dir):
        args = replay_script.parse_args(["blocks.json", "--db", str(temp_data_dir / "x.db")])

        assert replay_script.settings_from_args(args).get_db_path() == temp_data_dir / "x.db"

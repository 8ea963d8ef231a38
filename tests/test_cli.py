"""
ChainIngest - CLI Tests
=========================
Tests for the typer command line interface.
"""

import json
import logging

import pytest
from typer.testing import CliRunner

from chain_ingest.cli.main import app, load_settings
from chain_ingest.errors import ConfigError
from chain_ingest.version import __version__


runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging_handlers():
    """Rimuove gli handler console legati agli stream del runner"""
    yield
    root = logging.getLogger("chainingest")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def fixture_file(sample_fixture_data, temp_data_dir):
    path = temp_data_dir / "blocks.json"
    path.write_text(json.dumps(sample_fixture_data), encoding="utf-8")
    return path


class TestReplayCommand:
    """Test `chainingest replay`"""

    def test_replay_in_memory(self, fixture_file):
        result = runner.invoke(app, ["replay", str(fixture_file), "--in-memory", "--no-progress"])

        assert result.exit_code == 0
        assert "Ingest Summary" in result.stdout
        assert "Ingested 2 blocks" in result.stdout

    def test_replay_to_sqlite_then_query(self, fixture_file, temp_data_dir, hx):
        db_path = temp_data_dir / "cli.db"

        replay = runner.invoke(app, ["replay", str(fixture_file), "--db", str(db_path), "--no-progress"])
        assert replay.exit_code == 0
        assert db_path.exists()

        info = runner.invoke(app, ["info", "--db", str(db_path)])
        assert info.exit_code == 0
        assert "Transactions" in info.stdout
        assert "Latest Height" in info.stdout

        tx = runner.invoke(app, ["tx", hx(0x02), "--db", str(db_path)])
        assert tx.exit_code == 0
        assert "addrMiner" in tx.stdout
        assert "addrB" in tx.stdout

    def test_replay_missing_fixture(self, temp_data_dir):
        result = runner.invoke(app, ["replay", str(temp_data_dir / "none.json"), "--in-memory"])

        assert result.exit_code == 1
        assert "Replay failed" in result.stdout

    def test_replay_invalid_policy(self, fixture_file):
        result = runner.invoke(app, ["replay", str(fixture_file), "--in-memory", "--coinbase-address", "miner"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout


class TestQueryCommands:
    """Test `chainingest tx` / `chainingest info`"""

    def test_info_missing_database(self, temp_data_dir):
        result = runner.invoke(app, ["info", "--db", str(temp_data_dir / "missing.db")])

        assert result.exit_code == 1
        assert "Database not found" in result.stdout

    def test_tx_not_found(self, fixture_file, temp_data_dir, hx):
        db_path = temp_data_dir / "cli.db"
        runner.invoke(app, ["replay", str(fixture_file), "--db", str(db_path), "--no-progress"])

        result = runner.invoke(app, ["tx", hx(0x99), "--db", str(db_path)])

        assert result.exit_code == 1
        assert "Transaction not found" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestLoadSettings:
    """Test settings loading for CLI overrides"""

    def test_none_overrides_ignored(self):
        config = load_settings(db_path=None, coinbase_address="empty")

        assert config.coinbase_address == "empty"
        assert config.db_path is None

    def test_invalid_override_wrapped(self):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(log_level="LOUD")

        assert exc_info.value.code == "INVALID_CONFIG"

"""
ChainIngest - Configuration Tests
===================================
Unit tests for IngestSettings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError as SettingsValidationError

from chain_ingest.config import IngestSettings, override_settings
from chain_ingest.constants import CoinType, CoinbaseAddressPolicy


class TestIngestSettings:
    """Test IngestSettings class"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CHAININGEST_COINBASE_ADDRESS", raising=False)
        config = IngestSettings()

        assert config.get_coin_type() is CoinType.BITCOIN
        assert config.get_coinbase_policy() is CoinbaseAddressPolicy.SENTINEL
        assert config.get_db_path() == config.data_dir / "chainingest.db"

    def test_explicit_db_path(self, temp_data_dir):
        config = IngestSettings(db_path=temp_data_dir / "custom.db")

        assert config.get_db_path() == temp_data_dir / "custom.db"

    def test_environment_override(self, monkeypatch):
        """Test CHAININGEST_ prefixed variables are read"""
        monkeypatch.setenv("CHAININGEST_COINBASE_ADDRESS", "empty")
        monkeypatch.setenv("CHAININGEST_LOG_LEVEL", "debug")

        config = IngestSettings()

        assert config.get_coinbase_policy() is CoinbaseAddressPolicy.EMPTY
        assert config.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(SettingsValidationError):
            IngestSettings(log_level="LOUD")

    def test_invalid_coinbase_policy(self):
        with pytest.raises(SettingsValidationError):
            IngestSettings(coinbase_address="miner")

    def test_invalid_coin(self):
        with pytest.raises(SettingsValidationError):
            IngestSettings(coin="feathercoin")

    def test_override_settings(self):
        config = override_settings(data_dir=Path("/tmp/chainingest-test"))

        assert config.data_dir == Path("/tmp/chainingest-test")

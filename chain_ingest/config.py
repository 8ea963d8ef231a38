"""
ChainIngest - Configuration Management
========================================
Gestione centralizzata configurazione con Pydantic Settings.
Supporta environment variables, file .env, override runtime.

Last Updated: 2026-10-19
Version: 1.0.0

Features:
- Validazione automatica tipi
- Environment variables con prefisso CHAININGEST_
- File .env support
"""

from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chain_ingest.constants import (
    CoinType,
    CoinbaseAddressPolicy,
    DEFAULT_DB_FILENAME,
    DEFAULT_DB_TIMEOUT_SECONDS,
)


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

class IngestSettings(BaseSettings):
    """
    Configurazione principale ChainIngest.

    Example:
        # Da environment
        export CHAININGEST_COIN="litecoin"
        export CHAININGEST_DB_PATH=/var/lib/chainingest/ltc.db

        # Da codice
        config = IngestSettings(coinbase_address="empty")
    """

    model_config = SettingsConfigDict(
        env_prefix='CHAININGEST_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # ========================================================================
    # SOURCE
    # ========================================================================

    coin: str = Field(
        default=CoinType.BITCOIN.value,
        description="Coin dei blocchi in ingresso"
    )

    show_progress: bool = Field(
        default=True,
        description="Mostra progress bar durante replay"
    )

    # ========================================================================
    # STORAGE
    # ========================================================================

    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory dati"
    )

    db_path: Optional[Path] = Field(
        default=None,
        description="Path database (auto: data_dir/chainingest.db)"
    )

    db_timeout_seconds: float = Field(
        default=DEFAULT_DB_TIMEOUT_SECONDS,
        gt=0,
        le=600,
        description="Timeout lock SQLite (secondi)"
    )

    # ========================================================================
    # RESOLUTION
    # ========================================================================

    coinbase_address: str = Field(
        default=CoinbaseAddressPolicy.SENTINEL.value,
        description="Indirizzo coinbase input: sentinel (hash nullo) o empty"
    )

    slow_block_threshold_ms: int = Field(
        default=5000,
        ge=1,
        description="Soglia warning per ingest di un singolo blocco (ms)"
    )

    # ========================================================================
    # LOGGING
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    log_to_file: bool = Field(
        default=False,
        description="Salva log su file"
    )

    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory log files"
    )

    log_format: str = Field(
        default="json",
        description="Formato log file: json, text"
    )

    log_rotation_mb: int = Field(
        default=100,
        ge=1,
        description="Dimensione max file log prima rotation (MB)"
    )

    log_retention_days: int = Field(
        default=30,
        ge=1,
        description="Numero file log di backup"
    )

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Valida formato log"""
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError(f"Invalid log_format: {v}. Must be json or text")
        return v_lower

    @field_validator('coin')
    @classmethod
    def validate_coin(cls, v: str) -> str:
        """Valida coin"""
        return CoinType.from_name(v).value

    @field_validator('coinbase_address')
    @classmethod
    def validate_coinbase_address(cls, v: str) -> str:
        """Valida policy indirizzo coinbase"""
        valid = [p.value for p in CoinbaseAddressPolicy]
        v_lower = v.lower()
        if v_lower not in valid:
            raise ValueError(f"Invalid coinbase_address: {v}. Must be one of {valid}")
        return v_lower

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def get_db_path(self) -> Path:
        """Path database effettivo"""
        if self.db_path is not None:
            return self.db_path
        return self.data_dir / DEFAULT_DB_FILENAME

    def get_coin_type(self) -> CoinType:
        return CoinType(self.coin)

    def get_coinbase_policy(self) -> CoinbaseAddressPolicy:
        return CoinbaseAddressPolicy(self.coinbase_address)

    def to_dict(self) -> dict:
        """Serializza config"""
        return self.model_dump()

    def __repr__(self) -> str:
        return (
            f"IngestSettings("
            f"coin={self.coin}, "
            f"db_path={self.get_db_path()}, "
            f"coinbase_address={self.coinbase_address})"
        )


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

@lru_cache(maxsize=1)
def get_settings() -> IngestSettings:
    """
    Ottieni singleton instance di IngestSettings.

    Cached: chiamate multiple restituiscono la stessa istanza.
    """
    return IngestSettings()


def override_settings(**kwargs) -> IngestSettings:
    """
    Settings con valori custom (utile per testing).

    Example:
        >>> config = override_settings(coinbase_address="empty")
    """
    return IngestSettings(**kwargs)


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "IngestSettings",
    "get_settings",
    "override_settings",
]

"""
ChainIngest - Custom Exceptions
=================================
Gerarchia eccezioni per ingestion e storage.

Last Updated: 2026-10-19
Version: 1.0.0

Errori fatali (propagati al chiamante):
- DatabaseConnectionError, DatabaseWriteError, DatabaseQueryError
- PipelineStateError
- ValidationError, FixtureError

Condizioni recuperabili (output non risolto, script non riconosciuto)
NON sono eccezioni: vengono loggate e i campi impostati a default.
"""

from typing import Optional


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class ChainIngestException(Exception):
    """
    Eccezione base per tutte le eccezioni ChainIngest.

    Attributes:
        message (str): Messaggio errore
        code (str): Codice errore (es. "DB_WRITE_FAILED")
        details (dict): Dettagli aggiuntivi
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializza eccezione per logging"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} | Details: {self.details}"
        return f"[{self.code}] {self.message}"


# ============================================================================
# CONFIGURATION ERRORS
# ============================================================================

class ConfigError(ChainIngestException):
    """Errore configurazione"""
    pass


# ============================================================================
# VALIDATION ERRORS
# ============================================================================

class ValidationError(ChainIngestException):
    """Oggetto di dominio invalido"""
    pass


class FixtureError(ValidationError):
    """Fixture JSON di blocchi malformata"""
    pass


# ============================================================================
# STORAGE ERRORS
# ============================================================================

class StorageError(ChainIngestException):
    """Errore storage/database"""
    pass


class DatabaseError(StorageError):
    """Errore database generico"""
    pass


class DatabaseConnectionError(DatabaseError):
    """Store non raggiungibile (probe fallito)"""
    pass


class DatabaseWriteError(DatabaseError):
    """Scrittura fallita (insert block o bulk insert)"""
    pass


class DatabaseQueryError(DatabaseError):
    """Query fallita durante risoluzione"""
    pass


# ============================================================================
# PIPELINE ERRORS
# ============================================================================

class PipelineError(ChainIngestException):
    """Errore pipeline di ingestion"""
    pass


class PipelineStateError(PipelineError):
    """Operazione non valida nello stato corrente"""
    pass


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "ChainIngestException",
    "ConfigError",
    "ValidationError",
    "FixtureError",
    "StorageError",
    "DatabaseError",
    "DatabaseConnectionError",
    "DatabaseWriteError",
    "DatabaseQueryError",
    "PipelineError",
    "PipelineStateError",
]

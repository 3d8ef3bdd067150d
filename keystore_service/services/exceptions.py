from __future__ import annotations

from typing import Any, Optional


class StoreError(Exception):
    """
    Unico errore esposto dallo store dei keystore.

    Attributes:
        operation: nome dell'operazione fallita (es. ``add_key_store``)
        message: messaggio leggibile
        exc: causa originale (errore di connessione, vincolo, esecuzione)
        rollback_error: errore secondario se anche il rollback e' fallito
        details: informazioni aggiuntive per il chiamante
    """

    def __init__(
        self,
        operation: str,
        message: str,
        exc: Optional[BaseException] = None,
        rollback_error: Optional[BaseException] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.message = message
        self.exc = exc
        self.rollback_error = rollback_error
        self.details = dict(details or {})
        if exc is not None:
            self.details.setdefault("cause", f"{type(exc).__name__}: {exc}")
        if rollback_error is not None:
            self.note_rollback_error(rollback_error)

    def note_rollback_error(self, rollback_error: BaseException) -> None:
        self.rollback_error = rollback_error
        self.details["rollback_error"] = f"{type(rollback_error).__name__}: {rollback_error}"

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"StoreError(operation={self.operation!r}, message={self.message!r})"


class RecordMappingError(ValueError):
    """Una riga non contiene tutti i campi obbligatori di un keystore."""

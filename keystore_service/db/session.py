from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine

from keystore_service.core.config import settings
from keystore_service.core.logging import get_logger
from keystore_service.db.base import Base, import_models

logger = get_logger(__name__)


def build_engine(url: str, echo: bool = False) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # le connessioni del pool possono passare da un thread all'altro
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        echo=echo,
        # i parametri contengono password: mai nei messaggi di errore
        hide_parameters=True,
        pool_pre_ping=settings.DATABASE_POOL_PRE_PING,
        connect_args=connect_args,
    )


def init_db(engine: Engine) -> None:
    """Crea le tabelle mancanti. Nessuna migrazione."""
    import_models()
    Base.metadata.create_all(engine)


class ConnectionProvider:
    """
    Fornisce connessioni dal pool dell'engine.

    Ogni chiamata ad ``acquire`` restituisce una connessione dedicata che il
    chiamante deve rilasciare con ``release``.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def acquire(self, transactional: bool) -> Connection:
        connection = self.engine.connect()
        try:
            if transactional:
                connection.begin()
            else:
                connection.execution_options(isolation_level="AUTOCOMMIT")
        except BaseException:
            connection.close()
            raise
        return connection

    def commit(self, connection: Connection) -> None:
        connection.commit()

    def rollback(self, connection: Connection) -> None:
        connection.rollback()

    def release(self, connection: Connection) -> None:
        connection.close()


_engine: Optional[Engine] = None
_provider: Optional[ConnectionProvider] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        logger.info("Creating database engine for %s", _safe_url(settings.DATABASE_URL))
        _engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    return _engine


def get_connection_provider() -> ConnectionProvider:
    global _provider
    if _provider is None:
        _provider = ConnectionProvider(get_engine())
    return _provider


def dispose_engine() -> None:
    global _engine, _provider
    if _engine is not None:
        logger.info("Disposing database engine")
        _engine.dispose()
    _engine = None
    _provider = None


def _safe_url(url: str) -> str:
    from sqlalchemy.engine import make_url

    return make_url(url).render_as_string(hide_password=True)

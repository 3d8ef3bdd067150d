from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from keystore_service.core.logging import get_logger
from keystore_service.core.timeutils import utc_now
from keystore_service.db.queries import KeyStoreTableColumns as C, SqlQueries, b
from keystore_service.db.session import ConnectionProvider, get_connection_provider
from keystore_service.schemas.key_store import KeyStoreRecord
from keystore_service.services.exceptions import RecordMappingError, StoreError
from keystore_service.services.record_mapper import map_row_to_key_store

logger = get_logger(__name__)


class KeyStoreStore:
    """
    Persistenza dei keystore di un singolo tenant.

    Ogni operazione di scrittura usa una connessione transazionale propria:
    commit in caso di successo, rollback su qualsiasi errore, rilascio della
    connessione in ogni caso. Gli errori di livello inferiore sono
    convertiti in ``StoreError``.
    """

    def __init__(self, tenant_id: str, provider: Optional[ConnectionProvider] = None):
        if not tenant_id:
            raise ValueError("tenant_id is required")
        self.tenant_id = tenant_id
        self._provider = provider or get_connection_provider()

    # --- scritture ---

    def add_key_store(self, record: KeyStoreRecord) -> str:
        """
        Salva un nuovo keystore e ne restituisce l'id generato.

        Raises:
            StoreError: se (tenant, file_name) esiste gia' o la transazione fallisce
        """
        self._check_tenant(record, "add_key_store")
        key_store_id = str(uuid.uuid4())
        with self._transaction("add_key_store", "Error while adding key store.") as connection:
            connection.execute(SqlQueries.ADD_KEY_STORE, {
                C.ID: key_store_id,
                C.TENANT_ID: self.tenant_id,
                C.FILE_NAME: record.file_name,
                C.TYPE: record.type,
                C.PROVIDER: record.provider,
                C.PASSWORD: record.password.get_secret_value(),
                C.PRIVATE_KEY_ALIAS: record.private_key_alias,
                C.PRIVATE_KEY_PASS: _secret(record.private_key_pass),
                C.CONTENT: record.content,
                C.LAST_UPDATED: utc_now(),
            })
        logger.debug("Key store %s added for tenant %s", record.file_name, self.tenant_id)
        return key_store_id

    def update_key_store(self, record: KeyStoreRecord) -> None:
        """
        Sovrascrive tipo, provider, password, alias, contenuto e last_updated
        della riga (tenant, file_name). id e file_name non cambiano.
        """
        self._check_tenant(record, "update_key_store")
        with self._transaction("update_key_store", "Error while updating key store.") as connection:
            result = connection.execute(SqlQueries.UPDATE_KEY_STORE_BY_FILE_NAME, {
                b(C.TYPE): record.type,
                b(C.PROVIDER): record.provider,
                b(C.PASSWORD): record.password.get_secret_value(),
                b(C.PRIVATE_KEY_ALIAS): record.private_key_alias,
                b(C.PRIVATE_KEY_PASS): _secret(record.private_key_pass),
                b(C.LAST_UPDATED): utc_now(),
                b(C.CONTENT): record.content,
                b(C.FILE_NAME): record.file_name,
                b(C.TENANT_ID): self.tenant_id,
            })
            if result.rowcount == 0:
                raise StoreError(
                    "update_key_store",
                    "Error while updating key store. No key store found.",
                    details={"file_name": record.file_name, "reason": "not_found"},
                )
        logger.debug("Key store %s updated for tenant %s", record.file_name, self.tenant_id)

    def delete_key_store(self, file_name: str) -> None:
        with self._transaction("delete_key_store", "Error while deleting key store.") as connection:
            deleted = connection.execute(SqlQueries.DELETE_KEY_STORE_BY_FILE_NAME, {
                C.FILE_NAME: file_name,
                C.TENANT_ID: self.tenant_id,
            }).rowcount
        if deleted:
            logger.debug("Key store %s deleted for tenant %s", file_name, self.tenant_id)
        else:
            logger.debug("Key store %s not present for tenant %s, nothing to delete",
                         file_name, self.tenant_id)

    def add_pub_cert_id_to_key_store(self, file_name: str, pub_cert_id: str) -> None:
        """Collega un certificato pubblico al keystore; tocca solo pub_cert_id e last_updated."""
        message = "Error while linking public certificate to key store."
        with self._transaction("add_pub_cert_id_to_key_store", message) as connection:
            result = connection.execute(SqlQueries.ADD_PUB_CERT_ID_TO_KEY_STORE, {
                b(C.PUB_CERT_ID): pub_cert_id,
                b(C.LAST_UPDATED): utc_now(),
                b(C.FILE_NAME): file_name,
                b(C.TENANT_ID): self.tenant_id,
            })
            if result.rowcount == 0:
                raise StoreError(
                    "add_pub_cert_id_to_key_store",
                    f"{message} No key store found.",
                    details={"file_name": file_name, "reason": "not_found"},
                )
        logger.debug("Public certificate %s linked to key store %s", pub_cert_id, file_name)

    # --- letture ---

    def get_key_stores(self) -> List[KeyStoreRecord]:
        key_stores = []
        with self._connection("get_key_stores", "Error while retrieving key stores.") as connection:
            rows = connection.execute(SqlQueries.GET_KEY_STORES, {C.TENANT_ID: self.tenant_id})
            for row in rows:
                record = self._map(row)
                if record is not None:
                    key_stores.append(record)
        return key_stores

    def get_key_store(self, file_name: str) -> Optional[KeyStoreRecord]:
        with self._connection("get_key_store", "Error while retrieving key store.") as connection:
            row = connection.execute(SqlQueries.GET_KEY_STORE_BY_FILE_NAME, {
                C.FILE_NAME: file_name,
                C.TENANT_ID: self.tenant_id,
            }).first()
        if row is None:
            return None
        return self._map(row)

    def get_pub_cert_id_from_key_store(self, file_name: str) -> Optional[str]:
        message = "Error while retrieving public certificate of key store."
        with self._connection("get_pub_cert_id_from_key_store", message) as connection:
            row = connection.execute(SqlQueries.GET_PUB_CERT_ID_OF_KEY_STORE, {
                C.FILE_NAME: file_name,
                C.TENANT_ID: self.tenant_id,
            }).first()
        if row is None:
            return None
        return row._mapping[C.PUB_CERT_ID]

    # --- gestione connessioni ---

    @contextmanager
    def _transaction(self, operation: str, message: str) -> Iterator[Connection]:
        connection = self._acquire(operation, message, transactional=True)
        try:
            yield connection
            self._provider.commit(connection)
        except StoreError as e:
            rollback_error = self._rollback(connection, operation)
            if rollback_error is not None:
                e.note_rollback_error(rollback_error)
            raise
        except SQLAlchemyError as e:
            rollback_error = self._rollback(connection, operation)
            logger.error("%s failed for tenant %s: %s", operation, self.tenant_id, e)
            raise StoreError(operation, message, exc=e, rollback_error=rollback_error) from e
        finally:
            self._release(connection, operation)

    @contextmanager
    def _connection(self, operation: str, message: str) -> Iterator[Connection]:
        connection = self._acquire(operation, message, transactional=False)
        try:
            yield connection
        except SQLAlchemyError as e:
            logger.error("%s failed for tenant %s: %s", operation, self.tenant_id, e)
            raise StoreError(operation, message, exc=e) from e
        finally:
            self._release(connection, operation)

    def _acquire(self, operation: str, message: str, transactional: bool) -> Connection:
        try:
            return self._provider.acquire(transactional=transactional)
        except SQLAlchemyError as e:
            logger.error("Unable to acquire connection for %s: %s", operation, e)
            raise StoreError(operation, message, exc=e) from e

    def _rollback(self, connection: Connection, operation: str) -> Optional[SQLAlchemyError]:
        try:
            self._provider.rollback(connection)
        except SQLAlchemyError as e:
            logger.warning("Rollback failed during %s: %s", operation, e)
            return e
        return None

    def _release(self, connection: Connection, operation: str) -> None:
        try:
            self._provider.release(connection)
        except SQLAlchemyError as e:
            logger.warning("Unable to release connection after %s: %s", operation, e)

    def _map(self, row) -> Optional[KeyStoreRecord]:
        try:
            return map_row_to_key_store(row)
        except RecordMappingError as e:
            logger.warning("Skipping key store row for tenant %s: %s", self.tenant_id, e)
            return None

    def _check_tenant(self, record: KeyStoreRecord, operation: str) -> None:
        if record.tenant_id is not None and record.tenant_id != self.tenant_id:
            raise StoreError(
                operation,
                "Key store belongs to a different tenant.",
                details={"file_name": record.file_name, "reason": "tenant_mismatch"},
            )


def _secret(value) -> Optional[str]:
    return value.get_secret_value() if value is not None else None

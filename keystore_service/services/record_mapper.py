from __future__ import annotations

from pydantic import SecretStr, ValidationError
from sqlalchemy.engine import Row

from keystore_service.core.timeutils import as_utc
from keystore_service.db.queries import KeyStoreTableColumns as C
from keystore_service.schemas.key_store import KeyStoreRecord
from keystore_service.services.exceptions import RecordMappingError

_REQUIRED = (
    C.ID, C.TENANT_ID, C.FILE_NAME, C.TYPE, C.PROVIDER,
    C.PASSWORD, C.CONTENT, C.LAST_UPDATED,
)


def map_row_to_key_store(row: Row) -> KeyStoreRecord:
    """
    Converte una riga della tabella ``keystores`` in un ``KeyStoreRecord``.

    Raises:
        RecordMappingError: se manca un campo obbligatorio
    """
    data = row._mapping
    missing = [column for column in _REQUIRED if data.get(column) is None]
    if missing:
        raise RecordMappingError(f"Missing required columns: {', '.join(missing)}")

    private_key_pass = data.get(C.PRIVATE_KEY_PASS)
    try:
        return KeyStoreRecord(
            id=data[C.ID],
            tenant_id=data[C.TENANT_ID],
            file_name=data[C.FILE_NAME],
            type=data[C.TYPE],
            provider=data[C.PROVIDER],
            password=SecretStr(data[C.PASSWORD]),
            private_key_alias=data.get(C.PRIVATE_KEY_ALIAS),
            private_key_pass=SecretStr(private_key_pass) if private_key_pass is not None else None,
            content=bytes(data[C.CONTENT]),
            pub_cert_id=data.get(C.PUB_CERT_ID),
            last_updated=as_utc(data[C.LAST_UPDATED]),
        )
    except (ValidationError, TypeError, ValueError) as e:
        raise RecordMappingError(str(e)) from e

"""
Catalogo delle query sulla tabella ``keystores``.

Statement Core costruiti una sola volta all'import, con parametri nominali.
Gli UPDATE usano nomi di parametro con prefisso ``b_`` perche' SQLAlchemy
riserva i nomi delle colonne per la clausola SET.
"""
from sqlalchemy import bindparam, delete, insert, select, update

from keystore_service.models.key_store import KeyStore

_table = KeyStore.__table__


class KeyStoreTableColumns:
    ID = "id"
    TENANT_ID = "tenant_id"
    FILE_NAME = "file_name"
    TYPE = "type"
    PROVIDER = "provider"
    PASSWORD = "password"
    PRIVATE_KEY_ALIAS = "private_key_alias"
    PRIVATE_KEY_PASS = "private_key_pass"
    CONTENT = "content"
    PUB_CERT_ID = "pub_cert_id"
    LAST_UPDATED = "last_updated"


C = KeyStoreTableColumns


def b(column: str) -> str:
    """Bind name used for ``column`` inside UPDATE statements."""
    return f"b_{column}"


class SqlQueries:
    GET_KEY_STORES = (
        select(_table)
        .where(_table.c.tenant_id == bindparam(C.TENANT_ID))
    )

    GET_KEY_STORE_BY_FILE_NAME = (
        select(_table)
        .where(_table.c.file_name == bindparam(C.FILE_NAME))
        .where(_table.c.tenant_id == bindparam(C.TENANT_ID))
    )

    # columns are taken from the parameter keys at execution time
    ADD_KEY_STORE = insert(_table)

    UPDATE_KEY_STORE_BY_FILE_NAME = (
        update(_table)
        .where(_table.c.file_name == bindparam(b(C.FILE_NAME)))
        .where(_table.c.tenant_id == bindparam(b(C.TENANT_ID)))
        .values({
            C.TYPE: bindparam(b(C.TYPE)),
            C.PROVIDER: bindparam(b(C.PROVIDER)),
            C.PASSWORD: bindparam(b(C.PASSWORD)),
            C.PRIVATE_KEY_ALIAS: bindparam(b(C.PRIVATE_KEY_ALIAS)),
            C.PRIVATE_KEY_PASS: bindparam(b(C.PRIVATE_KEY_PASS)),
            C.LAST_UPDATED: bindparam(b(C.LAST_UPDATED)),
            C.CONTENT: bindparam(b(C.CONTENT)),
        })
    )

    DELETE_KEY_STORE_BY_FILE_NAME = (
        delete(_table)
        .where(_table.c.file_name == bindparam(C.FILE_NAME))
        .where(_table.c.tenant_id == bindparam(C.TENANT_ID))
    )

    ADD_PUB_CERT_ID_TO_KEY_STORE = (
        update(_table)
        .where(_table.c.file_name == bindparam(b(C.FILE_NAME)))
        .where(_table.c.tenant_id == bindparam(b(C.TENANT_ID)))
        .values({
            C.PUB_CERT_ID: bindparam(b(C.PUB_CERT_ID)),
            C.LAST_UPDATED: bindparam(b(C.LAST_UPDATED)),
        })
    )

    GET_PUB_CERT_ID_OF_KEY_STORE = (
        select(_table.c.pub_cert_id)
        .where(_table.c.file_name == bindparam(C.FILE_NAME))
        .where(_table.c.tenant_id == bindparam(C.TENANT_ID))
    )

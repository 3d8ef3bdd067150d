import base64
import binascii
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from keystore_service.db.session import ConnectionProvider, get_connection_provider
from keystore_service.schemas.key_store import (
    KeyStoreCreate,
    KeyStoreCreateResponse,
    KeyStoreRecord,
    KeyStoreResponse,
    KeyStoreUpdate,
    PubCertLink,
    PubCertResponse,
)
from keystore_service.services.key_store_store import KeyStoreStore

router = APIRouter()


def get_store(tenant_id: str, provider: ConnectionProvider = Depends(get_connection_provider)) -> KeyStoreStore:
    return KeyStoreStore(tenant_id, provider)


def _decode_content(content: str) -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422,
                            detail={"message": "Invalid content", "details": {"content": "not valid base64"}}) from None


def _to_response(record: KeyStoreRecord) -> KeyStoreResponse:
    # le password non escono mai dal servizio
    return KeyStoreResponse(
        id=record.id,
        file_name=record.file_name,
        type=record.type,
        provider=record.provider,
        private_key_alias=record.private_key_alias,
        content=base64.b64encode(record.content).decode("ascii"),
        pub_cert_id=record.pub_cert_id,
        last_updated=record.last_updated,
    )


def _not_found(file_name: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                         detail={"message": "Key store not found", "details": {"file_name": file_name}})


@router.get("/", response_model=List[KeyStoreResponse])
def api_get_key_stores(store: KeyStoreStore = Depends(get_store)) -> List[KeyStoreResponse]:
    return [_to_response(record) for record in store.get_key_stores()]


@router.post("/", response_model=KeyStoreCreateResponse, status_code=status.HTTP_201_CREATED)
def api_add_key_store(payload: KeyStoreCreate, store: KeyStoreStore = Depends(get_store)) -> KeyStoreCreateResponse:
    record = KeyStoreRecord(
        file_name=payload.file_name,
        type=payload.type,
        provider=payload.provider,
        password=payload.password,
        private_key_alias=payload.private_key_alias,
        private_key_pass=payload.private_key_pass,
        content=_decode_content(payload.content),
    )
    return KeyStoreCreateResponse(id=store.add_key_store(record))


@router.get("/{file_name}", response_model=KeyStoreResponse)
def api_get_key_store(file_name: str, store: KeyStoreStore = Depends(get_store)) -> KeyStoreResponse:
    record = store.get_key_store(file_name)
    if record is None:
        raise _not_found(file_name)
    return _to_response(record)


@router.put("/{file_name}", status_code=status.HTTP_204_NO_CONTENT)
def api_update_key_store(file_name: str, payload: KeyStoreUpdate,
                         store: KeyStoreStore = Depends(get_store)) -> Response:
    record = KeyStoreRecord(
        file_name=file_name,
        type=payload.type,
        provider=payload.provider,
        password=payload.password,
        private_key_alias=payload.private_key_alias,
        private_key_pass=payload.private_key_pass,
        content=_decode_content(payload.content),
    )
    store.update_key_store(record)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{file_name}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_key_store(file_name: str, store: KeyStoreStore = Depends(get_store)) -> Response:
    store.delete_key_store(file_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{file_name}/pub-cert", status_code=status.HTTP_204_NO_CONTENT)
def api_link_pub_cert(file_name: str, payload: PubCertLink,
                      store: KeyStoreStore = Depends(get_store)) -> Response:
    store.add_pub_cert_id_to_key_store(file_name, payload.pub_cert_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{file_name}/pub-cert", response_model=PubCertResponse)
def api_get_pub_cert(file_name: str, store: KeyStoreStore = Depends(get_store)) -> PubCertResponse:
    # una sola lettura: distingue "keystore assente" da "nessun certificato collegato"
    record = store.get_key_store(file_name)
    if record is None:
        raise _not_found(file_name)
    return PubCertResponse(file_name=file_name, pub_cert_id=record.pub_cert_id)

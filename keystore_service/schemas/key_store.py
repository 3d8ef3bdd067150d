from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, SecretStr


class KeyStoreRecord(BaseModel):
    """Metadati di un keystore di un tenant, piu' il contenuto binario."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    type: str
    provider: str
    password: SecretStr
    content: bytes
    private_key_alias: Optional[str] = None
    private_key_pass: Optional[SecretStr] = None
    # assegnati dallo store, mai dal chiamante
    id: Optional[str] = None
    tenant_id: Optional[str] = None
    pub_cert_id: Optional[str] = None
    last_updated: Optional[datetime] = None


# --- HTTP payloads ---

class KeyStoreCreate(BaseModel):
    file_name: str
    type: str
    provider: str
    password: SecretStr
    content: str  # base64
    private_key_alias: Optional[str] = None
    private_key_pass: Optional[SecretStr] = None


class KeyStoreUpdate(BaseModel):
    type: str
    provider: str
    password: SecretStr
    content: str  # base64
    private_key_alias: Optional[str] = None
    private_key_pass: Optional[SecretStr] = None


class KeyStoreCreateResponse(BaseModel):
    id: str


class KeyStoreResponse(BaseModel):
    id: Optional[str]
    file_name: str
    type: str
    provider: str
    private_key_alias: Optional[str] = None
    content: str  # base64
    pub_cert_id: Optional[str] = None
    last_updated: Optional[datetime] = None


class PubCertLink(BaseModel):
    pub_cert_id: str


class PubCertResponse(BaseModel):
    file_name: str
    pub_cert_id: Optional[str]

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from keystore_service.services.exceptions import RecordMappingError
from keystore_service.services.record_mapper import map_row_to_key_store


def _row(**overrides):
    data = {
        "id": "9b1f0a4e-1111-2222-3333-444455556666",
        "tenant_id": "T1",
        "file_name": "ks1",
        "type": "JKS",
        "provider": "SUN",
        "password": "pw",
        "private_key_alias": "signing",
        "private_key_pass": "kp",
        "content": memoryview(b"\x01\x02"),
        "pub_cert_id": None,
        "last_updated": datetime(2026, 1, 10, 23, 51, 39),
    }
    data.update(overrides)
    return SimpleNamespace(_mapping=data)


def test_maps_full_row():
    record = map_row_to_key_store(_row())

    assert record.file_name == "ks1"
    assert record.password.get_secret_value() == "pw"
    assert record.private_key_pass.get_secret_value() == "kp"
    assert record.content == b"\x01\x02"
    assert record.pub_cert_id is None
    # timestamp naive dal database -> UTC
    assert record.last_updated == datetime(2026, 1, 10, 23, 51, 39, tzinfo=timezone.utc)


def test_null_optional_fields_stay_none():
    record = map_row_to_key_store(_row(private_key_alias=None, private_key_pass=None))
    assert record.private_key_alias is None
    assert record.private_key_pass is None


def test_missing_required_column_raises():
    with pytest.raises(RecordMappingError) as exc:
        map_row_to_key_store(_row(password=None, content=None))
    assert "password" in str(exc.value)
    assert "content" in str(exc.value)


def test_wrong_column_type_raises_mapping_error():
    # SQLite accetta testo in una colonna BLOB
    with pytest.raises(RecordMappingError):
        map_row_to_key_store(_row(content="xx"))

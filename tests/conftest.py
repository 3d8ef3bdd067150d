import pytest
from fastapi.testclient import TestClient
from pathlib import Path
import tempfile
import shutil
import os

from pydantic import SecretStr

# Imposta le variabili d'ambiente PRIMA di importare qualsiasi modulo che usa settings
test_db_dir = tempfile.mkdtemp()
os.environ["KEYSTORE_DATABASE_URL"] = f"sqlite:///{Path(test_db_dir) / 'keystores.db'}"
os.environ["KEYSTORE_SENTRY_DSN"] = ""

from keystore_service.main import app
from keystore_service.db.session import ConnectionProvider, build_engine, get_connection_provider, init_db
from keystore_service.schemas.key_store import KeyStoreRecord
from keystore_service.services.key_store_store import KeyStoreStore


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    # Setup
    yield
    # Teardown
    shutil.rmtree(test_db_dir, ignore_errors=True)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'keystores.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def provider(engine):
    return ConnectionProvider(engine)


@pytest.fixture
def store(provider):
    return KeyStoreStore("T1", provider)


@pytest.fixture
def make_record():
    def _make(file_name="ks1", **overrides):
        fields = dict(
            file_name=file_name,
            type="JKS",
            provider="SUN",
            password=SecretStr("store-secret"),
            private_key_alias="signing",
            private_key_pass=SecretStr("key-secret"),
            content=b"\xfe\xed\xfe\xed" + file_name.encode(),
        )
        fields.update(overrides)
        return KeyStoreRecord(**fields)
    return _make


@pytest.fixture(scope="function")
def client(provider):
    app.dependency_overrides[get_connection_provider] = lambda: provider
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def import_models():
    from keystore_service.models.key_store import KeyStore  # noqa: E402 F401

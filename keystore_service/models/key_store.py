from sqlalchemy import Column, String, Text, LargeBinary, DateTime, UniqueConstraint
from keystore_service.db.base import Base


class KeyStore(Base):
    __tablename__ = "keystores"
    __table_args__ = (
        UniqueConstraint("tenant_id", "file_name", name="uq_keystores_tenant_file_name"),
    )

    id = Column(String(36), primary_key=True)  # UUID generato dallo store
    tenant_id = Column(String(255), index=True, nullable=False)
    file_name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)
    provider = Column(String(100), nullable=False)
    password = Column(Text, nullable=False)
    private_key_alias = Column(String(255), nullable=True)
    private_key_pass = Column(Text, nullable=True)
    content = Column(LargeBinary, nullable=False)
    pub_cert_id = Column(String(255), nullable=True)
    last_updated = Column(DateTime(timezone=True), nullable=False)

from pydantic_settings import SettingsConfigDict, BaseSettings


class Settings(BaseSettings):
    SERVICE_NAME: str = "Keystore service"
    SERVICE_VERSION: str = "0.1.0"
    SERVICE_PORT: int = 8000
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api/v1"
    DATABASE_URL: str = "sqlite:///./keystores.db"
    DATABASE_ECHO: bool = False
    DATABASE_POOL_PRE_PING: bool = True
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str = ""
    SENTRY_RELEASE: str = "0.1.0"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KEYSTORE_"  # Prefisso di tutte le variabili (es. KEYSTORE_DATABASE_URL)
    )

settings = Settings()

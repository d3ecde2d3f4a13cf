from functools import lru_cache
from typing import Optional

from pydantic import field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets_manager import SecretsManager


@lru_cache
def _secrets_manager(region_name: Optional[str]) -> SecretsManager:
    return SecretsManager(region_name=region_name)


def _secret_value(v) -> str:
    if isinstance(v, SecretStr):
        return v.get_secret_value()
    return v or ""


class Settings(BaseSettings):
    aws_region: str = "us-east-1"
    environment: str = "development"
    log_level: str = "INFO"

    # A full SQLAlchemy URL wins over the discrete connection fields below
    database_url: Optional[SecretStr] = None
    host: str = "localhost"
    port: int = 5432
    database: str = "invite_gate"
    db_username: str = "postgres"
    db_password: SecretStr = SecretStr("")
    db_pool_size: int = 5
    db_max_overflow: int = 0
    db_search_path: Optional[str] = None  # e.g. "auth,public"
    db_ssl_mode: Optional[str] = None

    claim_ttl_minutes: int = 15
    consume_grace_minutes: int = 15
    gated_provider: str = "email"
    gate_hook_secret: SecretStr = SecretStr("")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", validate_default=True)

    @field_validator("db_username", "db_password", "host", mode="before")
    @classmethod
    def load_secrets(cls, v, info):
        if info.data.get("environment") == "production":
            try:
                credentials = _secrets_manager(info.data.get("aws_region")).get_db_credentials()
                if info.field_name == "db_username":
                    v = credentials["username"]
                elif info.field_name == "db_password":
                    v = credentials["password"]
                elif info.field_name == "host":
                    v = credentials.get("host", v)
                return v
            except Exception:
                # Fall back to the env value when Secrets Manager is unreachable
                return v
        return v

    @field_validator("gate_hook_secret", mode="before")
    @classmethod
    def load_hook_secret(cls, v, info):
        if info.data.get("environment") == "production" and not _secret_value(v):
            return _secrets_manager(info.data.get("aws_region")).get_api_key("sign-in-gate")
        return v


def get_settings() -> Settings:
    return Settings()

"""Central environment-driven settings for the relay.

Loaded once per process at startup (see `.env.example`). Values are immutable
after load; tests build their own `Settings` instances instead of mutating
the module-level one.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payrelay"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = ["*"]

    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    verify_signatures: bool = True

    firebase_project_id: str = ""
    firebase_client_email: str = ""
    firebase_private_key: str = ""
    orders_collection: str = "orders"

    default_currency: str = "INR"
    currency_exponents: dict[str, int] = {}

    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("firebase_private_key")
    @classmethod
    def _unescape_private_key(cls, value: str) -> str:
        # Service-account keys usually arrive with literal "\n" sequences.
        return value.replace("\\n", "\n")

    @field_validator("default_currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()


settings = Settings()

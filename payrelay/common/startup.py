"""Startup-time summary of the loaded settings, with credentials redacted."""

from typing import Any

from payrelay.common.config import Settings
from payrelay.common.logging import logger

# Settings fields whose values never reach the logs.
SECRET_FIELDS = frozenset(
    {"razorpay_key_id", "razorpay_key_secret", "firebase_client_email", "firebase_private_key"}
)


def startup_config(cfg: Settings) -> dict[str, Any]:
    """Every settings field, secrets shown only as set/unset."""

    config: dict[str, Any] = {}
    for name in type(cfg).model_fields:
        value = getattr(cfg, name)
        if name in SECRET_FIELDS:
            value = "<redacted>" if value else "<unset>"
        config[name] = value
    return config


def log_startup_config(cfg: Settings) -> dict[str, Any]:
    """Log the effective config once per process for quick troubleshooting."""

    config = startup_config(cfg)
    logger.info("startup_config=%s", config)
    return config

# =============================================================================
# core/config.py  -  Process-wide configuration
# =============================================================================
#
# WHERE VALUES COME FROM (highest priority first):
#   1. Command-line flags passed to load_settings() by main.py
#   2. Environment variables (a .env file is loaded into the environment
#      by main.py via python-dotenv before this runs)
#   3. Defaults below
#
#   HIVEFLOW_API_URL      Base URL of the HiveFlow API
#   HIVEFLOW_API_KEY      API key (required)
#   HIVEFLOW_INSTANCE_ID  Instance ID for multi-tenant deployments (optional)
#   HIVEFLOW_TIMEOUT      Per-request timeout in seconds
#
# The resulting Settings object is frozen.  It is built once at startup and
# shared by every request for the lifetime of the process.
# =============================================================================

import os
from typing import Optional

from core.models import Settings

DEFAULT_API_URL = "https://api.hiveflow.ai"
DEFAULT_TIMEOUT = 30.0


class ConfigError(ValueError):
    """Raised when the process cannot be configured (e.g. no API key)."""


def load_settings(
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
    instance_id: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Settings:
    """Build Settings from explicit overrides and the environment.

    Raises:
        ConfigError: if no API key is available or the timeout is not a
            positive number.
    """
    api_url = api_url or os.environ.get("HIVEFLOW_API_URL") or DEFAULT_API_URL
    api_key = api_key or os.environ.get("HIVEFLOW_API_KEY")
    instance_id = instance_id or os.environ.get("HIVEFLOW_INSTANCE_ID") or None

    if not api_key:
        raise ConfigError("HIVEFLOW_API_KEY is required")

    if timeout is None:
        raw = os.environ.get("HIVEFLOW_TIMEOUT")
        try:
            timeout = float(raw) if raw else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigError(f"HIVEFLOW_TIMEOUT must be a number, got {raw!r}") from None
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}")

    return Settings(
        api_url=api_url.rstrip("/"),
        api_key=api_key,
        instance_id=instance_id,
        timeout=timeout,
    )

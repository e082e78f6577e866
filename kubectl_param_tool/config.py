"""Environment-driven settings."""

import os
from typing import Optional

OPENAPI_DIR_ENV = "KUBECTL_PARAM_OPENAPI_DIR"
SKIP_CRDS_ENV = "KUBECTL_PARAM_SKIP_CRDS"
LOG_LEVEL_ENV = "KUBECTL_PARAM_LOG_LEVEL"

_TRUTHY = ("1", "true", "yes", "on")


def get_openapi_dir(override: str = "") -> Optional[str]:
    """Directory of OpenAPI v3 documents: explicit value first, then environment."""
    return override or os.environ.get(OPENAPI_DIR_ENV) or None


def skip_crds() -> bool:
    return os.environ.get(SKIP_CRDS_ENV, "").strip().lower() in _TRUTHY


def get_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"

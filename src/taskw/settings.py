"""Environment-driven defaults."""

from __future__ import annotations

import os

import structlog

logger = structlog.get_logger(__name__)

# Environment variable names
ENV_DEBUG = "TASKW_DEBUG"
ENV_MAX_WORKERS = "TASKW_MAX_WORKERS"
ENV_CONFIG = "TASKW_CONFIG"

DEFAULT_CONFIG_FILE = "taskw.yaml"

# concurrent parses during a scan
DEFAULT_MAX_WORKERS = 10

DEFAULT_ROUTES_FILE = "routes_gen.go"
DEFAULT_DEPENDENCIES_FILE = "dependencies_gen.go"

ROUTER_IMPORT = "github.com/gofiber/fiber/v2"
WIRE_IMPORT = "github.com/google/wire"


def debug_enabled() -> bool:
    return os.environ.get(ENV_DEBUG, "").lower() in ("1", "true", "yes", "on")


def max_workers() -> int:
    """Scan pool size from TASKW_MAX_WORKERS, clamped to at least 1.

    Unparseable values are logged and replaced by the default.
    """
    raw = os.environ.get(ENV_MAX_WORKERS, "").strip()
    if not raw:
        return DEFAULT_MAX_WORKERS
    try:
        value = int(raw)
    except ValueError:
        logger.warning(
            "ignoring invalid worker count",
            env=ENV_MAX_WORKERS,
            value=raw,
            default=DEFAULT_MAX_WORKERS,
        )
        return DEFAULT_MAX_WORKERS
    return max(1, value)

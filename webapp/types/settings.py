import os
from typing import Any

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Seconds between two reconciles of a healthy resource, used to repair drift
RESYNC_INTERVAL_SECONDS = float(_getenv("RESYNC_INTERVAL_SECONDS", 30.0))

#: Seconds to wait before retrying a failed reconcile
ERROR_RETRY_DELAY_SECONDS = float(_getenv("ERROR_RETRY_DELAY_SECONDS", 10.0))

#: Field manager asserted on every server-side apply
FIELD_MANAGER = str(_getenv("FIELD_MANAGER", "webapp-operator"))

#: Image of the web server container
WEBAPP_IMAGE = str(_getenv("WEBAPP_IMAGE", "nginx:latest"))

#: Maximum number of resources processed concurrently by kopf
WORKER_LIMIT = int(_getenv("WORKER_LIMIT", 4))

#: Expose Prometheus metrics
METRICS_ENABLED = bool(_getenv("METRICS_ENABLED", True))

#: Port of the Prometheus metrics endpoint
METRICS_PORT = int(_getenv("METRICS_PORT", 8000))


class Settings:
    """Operator settings"""

    resync_interval_seconds: float = RESYNC_INTERVAL_SECONDS
    error_retry_delay_seconds: float = ERROR_RETRY_DELAY_SECONDS
    field_manager: str = FIELD_MANAGER
    image: str = WEBAPP_IMAGE
    worker_limit: int = WORKER_LIMIT
    metrics_enabled: bool = METRICS_ENABLED
    metrics_port: int = METRICS_PORT

    def __init__(
        self,
        *args,
        resync_interval_seconds: float = None,
        error_retry_delay_seconds: float = None,
        field_manager: str = None,
        image: str = None,
        worker_limit: int = None,
        metrics_enabled: bool = None,
        metrics_port: int = None,
        **kwargs,
    ):
        if resync_interval_seconds is not None:
            self.resync_interval_seconds = resync_interval_seconds

        if error_retry_delay_seconds is not None:
            self.error_retry_delay_seconds = error_retry_delay_seconds

        if field_manager is not None:
            self.field_manager = field_manager

        if image is not None:
            self.image = image

        if worker_limit is not None:
            self.worker_limit = worker_limit

        if metrics_enabled is not None:
            self.metrics_enabled = metrics_enabled

        if metrics_port is not None:
            self.metrics_port = metrics_port


def print_crd_requested() -> bool:
    """True when the process should print the schema document and exit."""
    return "PRINT_CRD" in os.environ

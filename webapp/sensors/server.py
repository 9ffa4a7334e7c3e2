"""HTTP server exposing the /metrics endpoint for Prometheus scraping.

The built-in prometheus_client server runs in a daemon thread so it never
blocks the operator event loop or its shutdown.
"""

import logging
from threading import Thread
from prometheus_client import start_http_server

logger = logging.getLogger(__name__)


def start_metrics_server(port: int) -> None:
    try:
        start_http_server(port)
        logger.info(f"Metrics available at http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server on port {port}: {e}")
        raise


def init_metrics_server(port: int) -> Thread:
    """Start the metrics server on `port` in a background thread."""
    thread = Thread(target=start_metrics_server, args=(port,), daemon=True)
    thread.start()
    logger.info(f"Metrics server initialization complete (port: {port})")
    return thread

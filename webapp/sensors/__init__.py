"""WebApp operator sensor framework.

Hook based instrumentation of operator lifecycle events.

Key components:
- OperatorSensor: Base class defining lifecycle hooks, all no-ops
- SensorDelegate: Fan-out of events to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter

Usage:
    from webapp.sensors import SensorDelegate, PrometheusMonitor

    delegate = SensorDelegate()
    delegate.add(PrometheusMonitor())
"""

from webapp.sensors.base import OperatorSensor
from webapp.sensors.delegate import SensorDelegate
from webapp.sensors.prometheus import PrometheusMonitor
from webapp.sensors.server import init_metrics_server

__all__ = [
    "OperatorSensor",
    "SensorDelegate",
    "PrometheusMonitor",
    "init_metrics_server",
]

"""Prometheus monitoring backend for the WebApp operator.

PrometheusMonitor turns operator lifecycle events into Prometheus metrics in
two groups:

1. Reconciliation loop health: duration, throughput, errors, requeues
2. Kubernetes resource sync: operation counts, latency and status writes
"""

from typing import Dict, List, Optional, Any
import time
import logging

from prometheus_client import Counter, Histogram

from webapp.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


def _result(success: bool) -> str:
    return "success" if success else "failure"


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor for the WebApp operator.

    Metric families:
    - webapp_reconcile_* - Reconciliation loop metrics
    - webapp_resource_* - Dependent object sync metrics
    - webapp_status_updates_total - Status subresource writes

    Example:
        monitor = PrometheusMonitor()
        state = monitor.on_reconcile_start("my-site", "default", "event")
        monitor.on_reconcile_complete("my-site", "default", state, True)
    """

    def __init__(self, registry=None):
        super().__init__()
        kwargs = {"registry": registry} if registry is not None else {}

        # =============================================================================
        # Reconciliation Loop Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            "webapp_reconcile_duration_seconds",
            "Time spent in one reconcile attempt",
            labelnames=["name", "namespace", "trigger_source", "result"],
            buckets=[0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            **kwargs,
        )

        self.reconcile_total = Counter(
            "webapp_reconcile_total",
            "Total number of reconcile attempts",
            labelnames=["name", "namespace", "trigger_source", "result"],
            **kwargs,
        )

        self.reconcile_errors = Counter(
            "webapp_reconcile_errors_total",
            "Total number of failed reconcile attempts",
            labelnames=["name", "namespace", "error_type"],
            **kwargs,
        )

        self.reconcile_requeues = Counter(
            "webapp_reconcile_requeues_total",
            "Total number of scheduled requeues",
            labelnames=["name", "namespace", "delay"],
            **kwargs,
        )

        # =============================================================================
        # Kubernetes Resource Sync Metrics
        # =============================================================================

        self.resource_sync_duration = Histogram(
            "webapp_resource_sync_duration_seconds",
            "Time spent applying or deleting a dependent object",
            labelnames=["resource_type", "namespace", "operation", "result"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
            **kwargs,
        )

        self.resource_sync_total = Counter(
            "webapp_resource_sync_total",
            "Total number of dependent object operations",
            labelnames=["resource_type", "namespace", "operation", "result"],
            **kwargs,
        )

        self.status_updates = Counter(
            "webapp_status_updates_total",
            "Total number of status subresource writes",
            labelnames=["name", "namespace"],
            **kwargs,
        )

        logger.info("PrometheusMonitor initialized")

    def on_reconcile_start(
        self, name: str, namespace: str, trigger_source: str
    ) -> Dict[str, Any]:
        return {"start_time": time.monotonic(), "trigger_source": trigger_source}

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        trigger_source = "unknown"
        if state:
            trigger_source = state.get("trigger_source", trigger_source)
        labels = dict(
            name=name,
            namespace=namespace,
            trigger_source=trigger_source,
            result=_result(success),
        )
        if state and "start_time" in state:
            self.reconcile_duration.labels(**labels).observe(
                time.monotonic() - state["start_time"]
            )
        self.reconcile_total.labels(**labels).inc()
        if not success:
            error_type = error.__class__.__name__ if error else "unknown"
            self.reconcile_errors.labels(
                name=name, namespace=namespace, error_type=error_type
            ).inc()

    def on_reconcile_requeued(self, name: str, namespace: str, delay: float) -> None:
        self.reconcile_requeues.labels(
            name=name, namespace=namespace, delay=f"{delay:g}"
        ).inc()

    def on_resource_sync_start(
        self, app_name: str, resource_name: str, namespace: str, resource_type: str
    ) -> Dict[str, Any]:
        return {"start_time": time.monotonic()}

    def on_resource_sync_complete(
        self,
        app_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        state: Optional[Dict[str, Any]],
        operation: str,
        success: bool,
    ) -> None:
        labels = dict(
            resource_type=resource_type,
            namespace=namespace,
            operation=operation,
            result=_result(success),
        )
        if state and "start_time" in state:
            self.resource_sync_duration.labels(**labels).observe(
                time.monotonic() - state["start_time"]
            )
        self.resource_sync_total.labels(**labels).inc()

    def on_status_update(
        self, name: str, namespace: str, update_fields: List[str]
    ) -> None:
        self.status_updates.labels(name=name, namespace=namespace).inc()

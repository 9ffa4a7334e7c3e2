"""Sensor delegation for fan-out pattern.

SensorDelegate routes every sensor event to all registered backends. Each
backend receives the same events and keeps its own start/complete state.
"""

from typing import Set, Dict, List, Optional, Any
import logging

from webapp.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    A failing backend is logged and skipped; it never breaks reconciliation.

    Example:
        delegate = SensorDelegate()
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("my-site", "default", "event")
        delegate.on_reconcile_complete("my-site", "default", state, True)
    """

    def __init__(self) -> None:
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: OperatorSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def _start(self, hook: str, *args) -> Optional[Dict[OperatorSensor, Any]]:
        if not self._sensors:
            return None
        states = {}
        for sensor in self._sensors:
            try:
                state = getattr(sensor, hook)(*args)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )
        return states if states else None

    def _complete(self, hook: str, *args, state: Optional[Dict], **kwargs) -> None:
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                getattr(sensor, hook)(*args, sensor_state, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    def _notify(self, hook: str, *args) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self, name: str, namespace: str, trigger_source: str
    ) -> Optional[Dict[OperatorSensor, Any]]:
        return self._start("on_reconcile_start", name, namespace, trigger_source)

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[OperatorSensor, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        self._complete(
            "on_reconcile_complete",
            name,
            namespace,
            state=state,
            success=success,
            error=error,
        )

    def on_reconcile_requeued(self, name: str, namespace: str, delay: float) -> None:
        self._notify("on_reconcile_requeued", name, namespace, delay)

    # =============================================================================
    # Resource Operation Hooks
    # =============================================================================

    def on_resource_sync_start(
        self, app_name: str, resource_name: str, namespace: str, resource_type: str
    ) -> Optional[Dict[OperatorSensor, Any]]:
        return self._start(
            "on_resource_sync_start", app_name, resource_name, namespace, resource_type
        )

    def on_resource_sync_complete(
        self,
        app_name: str,
        resource_name: str,
        namespace: str,
        resource_type: str,
        state: Optional[Dict[OperatorSensor, Any]],
        operation: str,
        success: bool,
    ) -> None:
        self._complete(
            "on_resource_sync_complete",
            app_name,
            resource_name,
            namespace,
            resource_type,
            state=state,
            operation=operation,
            success=success,
        )

    def on_status_update(
        self, name: str, namespace: str, update_fields: List[str]
    ) -> None:
        self._notify("on_status_update", name, namespace, update_fields)

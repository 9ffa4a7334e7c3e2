"""Unit tests for the sensor fan-out and the Prometheus backend."""

import pytest
from unittest.mock import Mock
from prometheus_client import CollectorRegistry
from webapp.sensors import OperatorSensor, PrometheusMonitor, SensorDelegate


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def monitor(registry):
    return PrometheusMonitor(registry=registry)


class TestSensorDelegate:
    def test_empty_delegate_has_no_state(self):
        assert SensorDelegate().on_reconcile_start("site", "web", "event") is None

    def test_state_routed_per_sensor(self):
        first, second = Mock(spec=OperatorSensor), Mock(spec=OperatorSensor)
        first.on_reconcile_start.return_value = {"n": 1}
        second.on_reconcile_start.return_value = {"n": 2}
        delegate = SensorDelegate()
        delegate.add(first)
        delegate.add(second)

        state = delegate.on_reconcile_start("site", "web", "event")
        delegate.on_reconcile_complete("site", "web", state, True)

        first.on_reconcile_complete.assert_called_once_with(
            "site", "web", {"n": 1}, success=True, error=None
        )
        second.on_reconcile_complete.assert_called_once_with(
            "site", "web", {"n": 2}, success=True, error=None
        )

    def test_failing_sensor_is_isolated(self):
        broken, healthy = Mock(spec=OperatorSensor), Mock(spec=OperatorSensor)
        broken.on_reconcile_requeued.side_effect = RuntimeError("boom")
        delegate = SensorDelegate()
        delegate.add(broken)
        delegate.add(healthy)

        delegate.on_reconcile_requeued("site", "web", 30.0)

        healthy.on_reconcile_requeued.assert_called_once_with("site", "web", 30.0)

    def test_remove(self):
        sensor = Mock(spec=OperatorSensor)
        delegate = SensorDelegate()
        delegate.add(sensor)
        delegate.remove(sensor)
        delegate.on_status_update("site", "web", ["readyReplicas"])
        sensor.on_status_update.assert_not_called()


class TestPrometheusMonitor:
    def test_reconcile_success(self, monitor, registry):
        state = monitor.on_reconcile_start("site", "web", "event")
        monitor.on_reconcile_complete("site", "web", state, True)
        labels = {
            "name": "site",
            "namespace": "web",
            "trigger_source": "event",
            "result": "success",
        }
        assert registry.get_sample_value("webapp_reconcile_total", labels) == 1.0
        assert (
            registry.get_sample_value("webapp_reconcile_duration_seconds_count", labels)
            == 1.0
        )

    def test_reconcile_failure(self, monitor, registry):
        state = monitor.on_reconcile_start("site", "web", "requeue")
        monitor.on_reconcile_complete("site", "web", state, False, TimeoutError())
        assert (
            registry.get_sample_value(
                "webapp_reconcile_errors_total",
                {"name": "site", "namespace": "web", "error_type": "TimeoutError"},
            )
            == 1.0
        )

    def test_resource_sync(self, monitor, registry):
        state = monitor.on_resource_sync_start("site", "site", "web", "deployment")
        monitor.on_resource_sync_complete(
            "site", "site", "web", "deployment", state, "apply", True
        )
        labels = {
            "resource_type": "deployment",
            "namespace": "web",
            "operation": "apply",
            "result": "success",
        }
        assert registry.get_sample_value("webapp_resource_sync_total", labels) == 1.0

    def test_status_updates(self, monitor, registry):
        monitor.on_status_update("site", "web", ["conditions"])
        assert (
            registry.get_sample_value(
                "webapp_status_updates_total", {"name": "site", "namespace": "web"}
            )
            == 1.0
        )

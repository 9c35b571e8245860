"""BaseService.measure_operation reports timings to Prometheus only."""

from unittest.mock import Mock

import pytest

from app.monitoring.prometheus_metrics import REGISTRY
from app.services.base import BaseService


class _GreetingService(BaseService):
    @BaseService.measure_operation("greet")
    def greet(self, name):
        return f"hello {name}"

    @BaseService.measure_operation("fail")
    def fail(self):
        raise LookupError("nothing here")


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.fixture
def service():
    return _GreetingService(Mock())


def test_success_is_counted_and_timed(service):
    labels = {"service": "_GreetingService", "operation": "greet"}
    calls_before = _sample("lingua_service_operations_total", status="success", **labels)
    timings_before = _sample("lingua_service_operation_duration_seconds_count", **labels)

    assert service.greet("Ana") == "hello Ana"

    assert _sample("lingua_service_operations_total", status="success", **labels) == (
        calls_before + 1
    )
    assert _sample("lingua_service_operation_duration_seconds_count", **labels) == (
        timings_before + 1
    )


def test_failure_is_counted_with_error_type_and_reraised(service):
    labels = {"service": "_GreetingService", "operation": "fail"}
    errors_before = _sample("lingua_errors_total", error_type="LookupError", **labels)

    with pytest.raises(LookupError):
        service.fail()

    assert _sample("lingua_service_operations_total", status="error", **labels) >= 1
    assert _sample("lingua_errors_total", error_type="LookupError", **labels) == errors_before + 1


def test_services_keep_no_in_process_metric_store(service):
    service.greet("Bruno")

    assert not hasattr(BaseService, "_class_metrics")
    assert not hasattr(service, "get_metrics")

"""OpenTelemetry helpers for webhook instrumentation."""

from opentelemetry import metrics
from opentelemetry.metrics import Histogram
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader


_meter_provider_initialized = False


def init_metrics() -> None:
    """Initialize OpenTelemetry metrics with a console exporter."""
    global _meter_provider_initialized
    if _meter_provider_initialized:
        return
    reader = PeriodicExportingMetricReader(ConsoleMetricExporter())
    provider = MeterProvider(metric_readers=[reader])
    metrics.set_meter_provider(provider)
    _meter_provider_initialized = True


def get_webhook_duration_histogram() -> Histogram:
    """Return a histogram for checkout-fully-paid handling duration."""
    init_metrics()
    meter = metrics.get_meter("saleor_checkout_app")
    return meter.create_histogram(
        name="saleor.webhook.checkout_fully_paid.duration",
        unit="ms",
        description="Duration of CHECKOUT_FULLY_PAID webhook handling",
    )

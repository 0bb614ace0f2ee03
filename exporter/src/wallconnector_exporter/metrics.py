"""Prometheus metrics about the exporter's own polling."""

from prometheus_client import Counter, Histogram, Gauge


# Core fetch metrics
exporter_fetch_total = Counter(
    "wallconnector_exporter_fetch_total",
    "Status endpoint fetch attempts",
    ["source", "status"],
)

exporter_fetch_duration_seconds = Histogram(
    "wallconnector_exporter_fetch_duration_seconds",
    "Status endpoint fetch duration",
    ["source"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

exporter_last_success_timestamp_seconds = Gauge(
    "wallconnector_exporter_last_success_timestamp_seconds",
    "Timestamp of last successful fetch",
    ["source"],
)

# Registered fields dropped because the device sent a non-numeric value
exporter_field_errors_total = Counter(
    "wallconnector_exporter_field_errors_total",
    "Registered fields skipped due to an unsupported value type",
    ["source", "field"],
)

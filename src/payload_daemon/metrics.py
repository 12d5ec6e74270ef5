"""
Defines Prometheus metrics for monitoring the payload decoder daemon.

This module centralizes the definition of all Counter, Gauge, and Histogram
metrics used to track payload ingestion, decoding outcomes, field usage and
HTTP request handling.
"""

from prometheus_client import Counter, Gauge, Histogram

PAYLOADS_RECEIVED = Counter("telemetry_payloads_total", "Total payloads received for decoding")
SUCCESSFUL_DECODES = Counter(
    "telemetry_successful_decodes_total", "Total payloads decoded successfully"
)
DECODE_ERRORS = Counter(
    "telemetry_decode_errors_total", "Total payload decode errors by kind", ["kind"]
)
READINGS_DECODED = Counter("telemetry_readings_total", "Total readings decoded")
FIELD_USAGE_COUNTER = Counter(
    "telemetry_field_usage_total", "Decoded field values by field name", ["field"]
)
PAYLOAD_SIZE_BYTES = Histogram(
    "telemetry_payload_size_bytes",
    "Size of received payloads in bytes",
    buckets=(2, 10, 16, 32, 64, 128, 256, 512, 1024),
)
DECODE_LATENCY = Histogram("telemetry_decode_latency_seconds", "Time spent decoding payloads")
HISTORY_SIZE = Gauge("telemetry_history_size", "Number of decoded payloads kept in memory")
HTTP_REQUESTS = Counter(
    "telemetry_http_requests_total", "Total HTTP requests", ["method", "endpoint", "status_code"]
)
HTTP_LATENCY = Histogram(
    "telemetry_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)

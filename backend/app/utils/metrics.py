"""
Prometheus metrics definitions for the API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Upload metrics
uploads_total = Counter(
    'uploads_total',
    'Total uploads that reached a storage backend',
    ['storage', 'status']
)

upload_rejections_total = Counter(
    'upload_rejections_total',
    'Total uploads rejected by validation',
    ['reason']
)

upload_attempts_total = Counter(
    'upload_attempts_total',
    'Total storage write attempts',
    ['storage', 'outcome']
)

upload_bytes = Histogram(
    'upload_bytes',
    'Size of accepted uploads in bytes',
    buckets=[
        10_000, 100_000, 500_000, 1_000_000, 2_500_000,
        5_000_000, 10_000_000, 15_728_640
    ]
)

upload_duration_seconds = Histogram(
    'upload_duration_seconds',
    'Time spent writing an upload to storage, retries included',
    ['storage'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest

# Create custom registry
registry = CollectorRegistry()

# Define metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

uploads_total = Counter(
    'uploads_total',
    'Total uploads',
    ['status'],
    registry=registry
)

upload_file_size_bytes = Histogram(
    'upload_file_size_bytes',
    'Upload file sizes',
    buckets=(1024, 10 * 1024, 100 * 1024, 512 * 1024, 1024 * 1024, 5 * 1024 * 1024, 10 * 1024 * 1024),
    registry=registry
)


class MetricsCollector:
    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics"""
        if not self.enabled:
            return

        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()

        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_upload(self, status: str, size: int = None):
        """Record the outcome of one upload"""
        if not self.enabled:
            return

        uploads_total.labels(status=status).inc()

        if size is not None:
            upload_file_size_bytes.observe(size)


def get_metrics():
    """Get metrics in Prometheus format"""
    return generate_latest(registry)

"""
Prometheus Metrics for voicegen.

Metrics Exposed:
    voicegen_generate_requests_total    - Counter of generate-tts requests by status
    voicegen_generate_duration_seconds  - Histogram of end-to-end generation latency
    voicegen_upstream_calls_total       - Counter of collaborator calls by target/outcome
    voicegen_proxy_requests_total       - Counter of /audio/{code} requests by outcome
    voicegen_proxied_bytes_total        - Counter of audio bytes relayed to clients
    voicegen_cache_entries              - Gauge of codes held by the resource cache

Usage:
    from voicegen.core.metrics import metrics

    metrics.record_generate("success", duration=2.4)
    metrics.record_upstream("tts", "ok")
    content, content_type = metrics.get_metrics_response()
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class VoicegenMetrics:
    """
    Process-wide metric collection.

    Uses a private CollectorRegistry so creating a second instance (tests)
    never collides with the default global registry.
    """

    def __init__(self):
        self._registry = CollectorRegistry()

        self._generate_total = Counter(
            "voicegen_generate_requests_total",
            "Total generate-tts requests",
            ["status"],
            registry=self._registry,
        )
        self._generate_duration = Histogram(
            "voicegen_generate_duration_seconds",
            "End-to-end generate-tts duration in seconds",
            buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0),
            registry=self._registry,
        )
        self._upstream_calls = Counter(
            "voicegen_upstream_calls_total",
            "Calls to external collaborators",
            ["target", "outcome"],
            registry=self._registry,
        )
        self._proxy_requests = Counter(
            "voicegen_proxy_requests_total",
            "Audio proxy requests",
            ["outcome"],
            registry=self._registry,
        )
        self._proxied_bytes = Counter(
            "voicegen_proxied_bytes_total",
            "Audio bytes relayed to clients",
            registry=self._registry,
        )
        self._cache_entries = Gauge(
            "voicegen_cache_entries",
            "Codes currently held by the resource cache",
            registry=self._registry,
        )

    def record_generate(self, status: str, duration: float) -> None:
        """
        Record a finished generate-tts request.

        Args:
            status: "success", "invalid" or "error".
            duration: Wall time in seconds.
        """
        self._generate_total.labels(status=status).inc()
        self._generate_duration.observe(duration)

    def record_upstream(self, target: str, outcome: str) -> None:
        """Record one collaborator call ("tts", "upload", "proxy") and its outcome."""
        self._upstream_calls.labels(target=target, outcome=outcome).inc()

    def record_proxy(self, outcome: str) -> None:
        self._proxy_requests.labels(outcome=outcome).inc()

    def add_proxied_bytes(self, count: int) -> None:
        if count > 0:
            self._proxied_bytes.inc(count)

    def set_cache_entries(self, count: int) -> None:
        self._cache_entries.set(count)

    def get_metrics_response(self) -> tuple[bytes, str]:
        """Return (body, content_type) for the /metrics endpoint."""
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


metrics = VoicegenMetrics()

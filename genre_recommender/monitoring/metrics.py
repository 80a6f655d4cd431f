"""Prometheus metrics for the recommendation pipeline."""

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
)


class MetricsCollector:
    """Collects and exposes metrics for monitoring.

    Each collector owns its registry, so several services (or tests) can
    coexist in one process without duplicate-registration errors.
    """

    def __init__(self, namespace: str = "genre_recommender"):
        """Initialize metrics collector.

        Args:
            namespace: Prometheus namespace for metrics
        """
        self.namespace = namespace
        self.registry = CollectorRegistry()

        self._init_counters()
        self._init_histograms()

    def _init_counters(self):
        """Initialize counter metrics."""
        self.recommendation_counter = Counter(
            f"{self.namespace}_recommendations_total",
            "Total number of recommendation requests",
            ["status"],
            registry=self.registry
        )

        self.cache_lookup_counter = Counter(
            f"{self.namespace}_embedding_cache_lookups_total",
            "Embedding cache lookups",
            ["category", "result"],
            registry=self.registry
        )

        self.provider_call_counter = Counter(
            f"{self.namespace}_embedding_provider_calls_total",
            "Calls made to the embedding provider",
            ["outcome"],
            registry=self.registry
        )

        self.error_counter = Counter(
            f"{self.namespace}_errors_total",
            "Total number of isolated per-item errors",
            ["error_type", "component"],
            registry=self.registry
        )

    def _init_histograms(self):
        """Initialize histogram metrics."""
        self.latency_histogram = Histogram(
            f"{self.namespace}_request_latency_seconds",
            "Request latency in seconds",
            ["stage"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 30.0),
            registry=self.registry
        )

    def record_recommendation(self, status: str, latency: float):
        """Record a finished recommendation request.

        Args:
            status: Outcome status (ok, not_found, unavailable)
            latency: Request latency in seconds
        """
        self.recommendation_counter.labels(status=status).inc()
        self.latency_histogram.labels(stage="total").observe(latency)

    def record_cache_lookup(self, category: str, hit: bool):
        self.cache_lookup_counter.labels(
            category=category,
            result="hit" if hit else "miss"
        ).inc()

    def record_provider_call(self, outcome: str):
        self.provider_call_counter.labels(outcome=outcome).inc()

    def record_error(self, error_type: str, component: str):
        """Record error occurrence.

        Args:
            error_type: Exception class name
            component: Component where error occurred
        """
        self.error_counter.labels(error_type=error_type, component=component).inc()

    def stage_timer(self, stage: str):
        """Context manager timing one pipeline stage."""
        return self.latency_histogram.labels(stage=stage).time()

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format.

        Returns:
            Metrics in Prometheus text format
        """
        return generate_latest(self.registry)

"""Prometheus metrics for pricing and the rate catalogue."""

from prometheus_client import Counter, Histogram

# Pricing metrics
pricing_latency_ms = Histogram(
    "pricing_latency_ms",
    "Pricing calculation latency in milliseconds",
    ["kind", "outcome"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
)

pricing_calculations_total = Counter(
    "pricing_calculations_total",
    "Total pricing calculations",
    ["kind", "outcome"],
)

# Catalogue metrics
rate_conflicts_total = Counter(
    "rate_conflicts_total",
    "Overlapping active rates detected",
    ["category", "source"],
)

unresolved_rates_total = Counter(
    "unresolved_rates_total",
    "Rate references that could not be resolved and were priced at zero",
    ["kind"],
)


class PrometheusPricingMetrics:
    """Prometheus-based pricing metrics implementation."""

    def record_calculation(self, kind: str, outcome: str, latency_ms: float) -> None:
        """Record one pricing calculation and its latency."""
        pricing_calculations_total.labels(kind=kind, outcome=outcome).inc()
        pricing_latency_ms.labels(kind=kind, outcome=outcome).observe(latency_ms)

    def inc_rate_conflict(self, category: str, source: str) -> None:
        """Increment overlapping-rate counter."""
        rate_conflicts_total.labels(category=category, source=source).inc()

    def inc_unresolved(self, kind: str, count: int = 1) -> None:
        """Increment unresolved reference counter."""
        if count > 0:
            unresolved_rates_total.labels(kind=kind).inc(count)

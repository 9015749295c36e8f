"""Prometheus metrics for tenant scoping and environment detection."""

from prometheus_client import Counter

tenant_scope_applied_total = Counter(
    "tenant_scope_applied_total",
    "Queries narrowed to the current tenant",
    ["entity", "mode"],
)

tenant_scope_bypassed_total = Counter(
    "tenant_scope_bypassed_total",
    "Queries that explicitly skipped tenant scoping",
    ["entity"],
)

environment_detection_total = Counter(
    "environment_detection_total",
    "Environment detection outcomes",
    ["outcome"],
)


class PrometheusScopeMetrics:
    """Prometheus-based tenant scope metrics implementation."""

    def inc_applied(self, entity: str, mode: str) -> None:
        """Count a query narrowed by the visibility filter."""
        tenant_scope_applied_total.labels(entity=entity, mode=mode).inc()

    def inc_bypassed(self, entity: str) -> None:
        tenant_scope_bypassed_total.labels(entity=entity).inc()

    def inc_detection(self, outcome: str) -> None:
        environment_detection_total.labels(outcome=outcome).inc()


scope_metrics = PrometheusScopeMetrics()

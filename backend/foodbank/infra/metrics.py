import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from foodbank.domain.inventory.ledger import TransactionType

logger = logging.getLogger(__name__)

_KNOWN_TRANSACTION_TYPES = {member.value for member in TransactionType}


class Metrics:
    def __init__(self, enabled: bool = False) -> None:
        self._configure(enabled)

    def _configure(self, enabled: bool) -> None:
        self.enabled = enabled
        self.registry = CollectorRegistry(auto_describe=True)
        if not enabled:
            self.http_requests = None
            self.http_5xx = None
            self.http_latency = None
            self.inventory_transactions = None
            self.low_stock_alert_items = None
            return

        self.http_requests = Counter(
            "http_requests_total",
            "HTTP requests by method, route and status class.",
            ["method", "path", "status_class"],
            registry=self.registry,
        )
        self.http_5xx = Counter(
            "http_5xx_total",
            "HTTP 5xx responses by method and route.",
            ["method", "path"],
            registry=self.registry,
        )
        self.http_latency = Histogram(
            "http_request_latency_seconds",
            "HTTP request latency by method, route and status class.",
            ["method", "path", "status_class"],
            registry=self.registry,
        )
        self.inventory_transactions = Counter(
            "inventory_transactions_total",
            "Inventory ledger entries recorded by transaction type.",
            ["transaction_type"],
            registry=self.registry,
        )
        self.low_stock_alert_items = Gauge(
            "inventory_low_stock_alert_items",
            "Items below their minimum stock at the last alert computation, by organization.",
            ["org_id"],
            registry=self.registry,
        )

    def record_http_request(self, method: str, path: str, status_code: int) -> None:
        if not self.enabled or self.http_requests is None:
            return
        self.http_requests.labels(method=method, path=path, status_class=_status_class(status_code)).inc()

    def record_http_5xx(self, method: str, path: str) -> None:
        if not self.enabled or self.http_5xx is None:
            return
        self.http_5xx.labels(method=method, path=path).inc()

    def record_http_latency(self, method: str, path: str, status_code: int, duration_seconds: float) -> None:
        if not self.enabled or self.http_latency is None:
            return
        duration_seconds = max(0.0, float(duration_seconds))
        self.http_latency.labels(
            method=method, path=path, status_class=_status_class(status_code)
        ).observe(duration_seconds)

    def record_inventory_transaction(self, transaction_type: str) -> None:
        if not self.enabled or self.inventory_transactions is None:
            return
        # Free-form types are collapsed to keep label cardinality bounded.
        label = transaction_type if transaction_type in _KNOWN_TRANSACTION_TYPES else "unknown"
        self.inventory_transactions.labels(transaction_type=label).inc()

    def record_low_stock_alerts(self, org_id: str, count: int) -> None:
        if not self.enabled or self.low_stock_alert_items is None:
            return
        self.low_stock_alert_items.labels(org_id=org_id).set(max(0, count))

    def render(self) -> tuple[bytes, str]:
        if not self.enabled:
            return b"metrics_disabled 1\n", "text/plain; version=0.0.4"
        try:
            return generate_latest(self.registry), CONTENT_TYPE_LATEST
        except Exception:  # noqa: BLE001
            logger.exception("metrics_render_failed")
            return b"metrics_render_failed 1\n", "text/plain; version=0.0.4"


def _status_class(status_code: int) -> str:
    return f"{status_code // 100}xx" if status_code else "unknown"


metrics = Metrics(enabled=False)


def configure_metrics(enabled: bool) -> Metrics:
    metrics._configure(enabled)
    return metrics

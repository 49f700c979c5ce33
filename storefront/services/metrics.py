# -*- coding: utf-8 -*-
"""
Service for managing Prometheus metrics.

Records HTTP request metrics through before/after request hooks and exposes
counters for the order handlers' outcomes.
"""

import os
import time
from typing import Optional
from flask import Flask, request, g, current_app, has_app_context
from prometheus_client import CollectorRegistry, Counter, Histogram
from prometheus_client.exposition import generate_latest


def init_metrics(app: Flask) -> None:
    """Initialize metrics service and endpoints."""
    service = MetricsService(registry=CollectorRegistry())
    app.extensions['metrics'] = service

    if service.enabled:
        @app.before_request
        def before_request():
            g.metrics_start_time = time.time()

        @app.after_request
        def after_request(response):
            started = getattr(g, 'metrics_start_time', None)
            duration = time.time() - started if started is not None else 0.0
            route = request.url_rule.rule if request.url_rule else 'unmatched'
            service.record_http_request(
                route=route,
                method=request.method,
                status_code=response.status_code,
                duration_seconds=duration
            )
            return response

        @app.route("/metrics")
        def metrics():
            return generate_latest(service.registry), 200, {
                'Content-Type': 'text/plain; version=0.0.4; charset=utf-8'}


def get_metrics_service() -> Optional['MetricsService']:
    """Get the metrics service instance from the current app context."""
    if has_app_context():
        return current_app.extensions.get('metrics')
    return None


class MetricsService:
    """Service for managing Prometheus metrics."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.enabled = os.environ.get(
            "STOREFRONT_METRICS_ENABLED",
            "true").lower() == "true"
        self.registry = registry if registry is not None else CollectorRegistry()

        if self.enabled:
            self.http_requests_total = Counter(
                "storefront_http_requests_total",
                "Total number of HTTP requests.",
                ["route", "method", "status"],
                registry=self.registry
            )
            self.http_request_duration_seconds = Histogram(
                "storefront_http_request_duration_seconds",
                "Duration of HTTP requests in seconds.",
                ["route", "method"],
                registry=self.registry
            )
            self.order_history_requests_total = Counter(
                "storefront_order_history_requests_total",
                "Total number of order history email requests.",
                ["outcome"],
                registry=self.registry
            )
            self.payment_intents_total = Counter(
                "storefront_payment_intents_total",
                "Total number of payment intent requests.",
                ["outcome"],
                registry=self.registry
            )
            self.download_verifications_total = Counter(
                "storefront_download_verifications_total",
                "Total number of download verifications issued.",
                registry=self.registry
            )

    def record_http_request(self, route: str, method: str,
                            status_code: int, duration_seconds: float):
        if not self.enabled:
            return
        self.http_requests_total.labels(
            route=route, method=method, status=str(status_code)).inc()
        self.http_request_duration_seconds.labels(
            route=route, method=method).observe(duration_seconds)

    def record_order_history(self, outcome: str, verifications_issued: int = 0):
        if not self.enabled:
            return
        self.order_history_requests_total.labels(outcome=outcome).inc()
        if verifications_issued:
            self.download_verifications_total.inc(verifications_issued)

    def record_payment_intent(self, outcome: str):
        if not self.enabled:
            return
        self.payment_intents_total.labels(outcome=outcome).inc()

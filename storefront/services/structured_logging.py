# -*- coding: utf-8 -*-
"""
Structured JSON logging for the storefront service.

Provides:
- JSON format output when enabled (STOREFRONT_LOG_JSON)
- Request context integration (request_id, method, path, bound order fields)
- Order, payment and email event helpers with consistent field names

Every log line carries timestamp, level, logger, message, module, function and
line, plus whatever keyword fields the caller attached.
"""

import os
import json
import logging
from datetime import datetime, timezone
from flask import Flask, has_request_context
from storefront.services.request_context import (
    get_order_context, get_request_context, get_request_id, request_duration_ms,
)


def _json_logging_enabled() -> bool:
    return os.environ.get('STOREFRONT_LOG_JSON', 'true').lower() == 'true'


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def __init__(self, json_enabled: bool = True):
        super().__init__()
        self.json_enabled = json_enabled

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON or plain text."""
        if not self.json_enabled:
            return super().format(record)

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        log_entry.update(get_request_context())

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class StructuredLogger:
    """Structured logger with request context integration."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log_with_context(self, level: int, message: str, exc_info=False, **kwargs):
        extra_fields = kwargs.copy()

        if 'request_id' not in extra_fields and has_request_context():
            extra_fields['request_id'] = get_request_id()
        for key, value in get_order_context().items():
            extra_fields.setdefault(key, value)

        self.logger.log(level, message, exc_info=exc_info,
                        extra={'extra_fields': extra_fields})

    def debug(self, message: str, **kwargs):
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log_with_context(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log an error with the active exception's traceback."""
        self._log_with_context(logging.ERROR, message, exc_info=True, **kwargs)

    # Convenience methods for common log types
    def log_request_start(self, method: str, path: str, **kwargs):
        self.info(
            f"Request started: {method} {path}",
            event_type='request_start',
            method=method,
            path=path,
            **kwargs
        )

    def log_request_end(self, method: str, path: str, status_code: int, duration_ms: float, **kwargs):
        self.info(
            f"Request completed: {method} {path} - {status_code} ({duration_ms}ms)",
            event_type='request_end',
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
            **kwargs
        )

    def log_order_event(self, event: str, **kwargs):
        """Log an order lifecycle event (created, history requested, ...)."""
        self.info(
            f"Order {event}",
            event_type='order',
            order_event=event,
            **kwargs
        )

    def log_payment_event(self, event: str, success: bool, **kwargs):
        """Log a payment processor interaction."""
        level = logging.INFO if success else logging.WARNING
        self._log_with_context(
            level,
            f"Payment {event}: {'success' if success else 'failure'}",
            event_type='payment',
            payment_event=event,
            success=success,
            **kwargs
        )

    def log_email_event(self, event: str, success: bool, **kwargs):
        """Log an email provider interaction."""
        level = logging.INFO if success else logging.WARNING
        self._log_with_context(
            level,
            f"Email {event}: {'sent' if success else 'failed'}",
            event_type='email',
            email_event=event,
            success=success,
            **kwargs
        )

    def log_error_event(self, error: str, error_type: str = 'application', **kwargs):
        self.error(
            f"Error: {error}",
            event_type='error',
            error_type=error_type,
            error_message=error,
            **kwargs
        )


def get_logger(name: str) -> StructuredLogger:
    """Get structured logger instance."""
    return StructuredLogger(name)


def configure_logging(app: Flask):
    """Configure structured logging for Flask application."""
    json_enabled = _json_logging_enabled()
    log_level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(StructuredFormatter(json_enabled=json_enabled))
    root_logger.addHandler(console_handler)

    app.logger.setLevel(level)

    loggers_to_configure = [
        'storefront.orders',
        'storefront.payments',
        'storefront.email',
        'storefront.requests',
    ]

    for logger_name in loggers_to_configure:
        logging.getLogger(logger_name).setLevel(level)

    get_logger('storefront.config').info(
        "Logging configured",
        json_enabled=json_enabled,
        log_level=log_level,
        loggers_configured=loggers_to_configure
    )


class LoggingMiddleware:
    """Middleware for automatic request/response logging."""

    SKIP_PATHS = ('/healthz', '/readyz', '/metrics')

    def __init__(self, app: Flask):
        self.app = app
        self.logger = get_logger('storefront.requests')

        app.before_request(self._before_request)
        app.after_request(self._after_request)

    def _before_request(self):
        from flask import request

        if request.path in self.SKIP_PATHS:
            return

        self.logger.log_request_start(
            method=request.method,
            path=request.path,
            remote_addr=request.remote_addr,
            user_agent=request.headers.get('User-Agent', ''),
            content_length=request.content_length
        )

    def _after_request(self, response):
        from flask import request

        if request.path in self.SKIP_PATHS:
            return response

        duration_ms = request_duration_ms() or 0

        self.logger.log_request_end(
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            content_length=response.content_length,
        )

        return response


def init_logging(app: Flask):
    """Initialize structured logging for Flask application."""
    configure_logging(app)
    LoggingMiddleware(app)

    get_logger('storefront.startup').info(
        "Application starting",
        debug=app.debug,
        testing=app.testing
    )

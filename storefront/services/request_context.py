# -*- coding: utf-8 -*-
"""
Per-request log context for the storefront API.

Each request gets an ``X-Request-ID`` (the caller's, when it sends a UUID) and
a timing start. The order handlers bind the customer, product and order they
are working on with ``bind_log_context``; every log line written for the rest
of the request carries those fields, so an email or Stripe failure can be
traced back to the order that caused it.
"""

import time
import uuid
from typing import Optional

from flask import Flask, Response, g, has_app_context, has_request_context, request

REQUEST_ID_HEADER = 'X-Request-ID'
RESPONSE_TIME_HEADER = 'X-Response-Time'

# fields the order handlers may bind
ORDER_CONTEXT_FIELDS = ('user_id', 'product_id', 'order_id', 'discount_code_id')


def _incoming_request_id() -> str:
    request_id = request.headers.get(REQUEST_ID_HEADER, '')
    try:
        return str(uuid.UUID(request_id))
    except ValueError:
        return str(uuid.uuid4())


def _begin_request():
    g.request_id = _incoming_request_id()
    g.request_started = time.perf_counter()
    g.order_context = {}


def _finish_request(response: Response) -> Response:
    request_id = getattr(g, 'request_id', None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id

    duration_ms = request_duration_ms()
    if duration_ms is not None:
        response.headers[RESPONSE_TIME_HEADER] = f"{duration_ms}ms"
    return response


def request_duration_ms() -> Optional[float]:
    """Milliseconds since the current request started, if one is being timed."""
    if not has_app_context() or not hasattr(g, 'request_started'):
        return None
    return round((time.perf_counter() - g.request_started) * 1000, 2)


def bind_log_context(**fields):
    """
    Attach order fields to the current request's log context.

    Unknown field names raise ``KeyError``; ``None`` values are ignored.
    Outside an app context this is a no-op.
    """
    unknown = set(fields) - set(ORDER_CONTEXT_FIELDS)
    if unknown:
        raise KeyError(f"unsupported log context fields: {sorted(unknown)}")
    if not has_app_context():
        return

    context = g.setdefault('order_context', {})
    context.update({k: v for k, v in fields.items() if v is not None})


def get_order_context() -> dict:
    if not has_app_context():
        return {}
    return dict(g.get('order_context', {}))


def get_request_id() -> Optional[str]:
    if not has_app_context():
        return None
    return g.get('request_id')


def get_request_context() -> dict:
    """Fields every log line of the current request should carry."""
    context = {}
    if has_request_context():
        context.update({
            'request_id': get_request_id(),
            'method': request.method,
            'path': request.path,
            'remote_addr': request.remote_addr,
        })
        duration_ms = request_duration_ms()
        if duration_ms is not None:
            context['duration_ms'] = duration_ms
    context.update(get_order_context())
    return context


def init_request_context(app: Flask) -> None:
    app.before_request(_begin_request)
    app.after_request(_finish_request)

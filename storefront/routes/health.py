# -*- coding: utf-8 -*-
"""Liveness and readiness probes."""
import time

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.infra.db import db
from storefront.infra.log import get_logger

logger = get_logger(__name__)

health_bp = Blueprint('health', __name__)


@health_bp.route('/healthz', methods=['GET', 'HEAD'])
def healthz():
    """Liveness check, never touches dependencies."""
    return jsonify({
        'status': 'healthy',
        'service': 'storefront',
        'timestamp': time.time()
    }), 200


@health_bp.route('/readyz', methods=['GET', 'HEAD'])
def readyz():
    """Readiness check: the database must answer."""
    try:
        db.session.execute(text("select 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        db.session.rollback()
        database_ok = False

    return jsonify({
        'status': 'ready' if database_ok else 'not_ready',
        'service': 'storefront',
        'timestamp': time.time(),
        'checks': {
            'database': database_ok
        }
    }), 200 if database_ok else 503

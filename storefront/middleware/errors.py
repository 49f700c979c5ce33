# -*- coding: utf-8 -*-
"""
Error Handling Middleware
Turns database and routing errors into JSON responses without leaking internals
"""
from typing import List, Optional

from flask import jsonify
from sqlalchemy.exc import OperationalError, IntegrityError
from werkzeug.exceptions import MethodNotAllowed, NotFound

from storefront.infra.db import db
from storefront.infra.log import get_logger

logger = get_logger(__name__)


def register_error_handlers(app):
    """Register JSON error handlers on the app"""

    @app.errorhandler(OperationalError)
    def handle_operational_error(e):
        """Handle database operational errors (connection, table not found, etc.)"""
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
        logger.error(f"Database operational error: {error_msg}")
        db.session.rollback()

        return jsonify({
            'error': 'database_error',
            'message': 'Database operation failed. Please try again later.'
        }), 503

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        """Handle database integrity errors (foreign key, unique constraint)"""
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
        logger.error(f"Database integrity error: {error_msg}")
        db.session.rollback()

        if 'unique' in error_msg.lower() or 'duplicate' in error_msg.lower():
            return jsonify({
                'error': 'duplicate_entry',
                'message': 'This entry already exists'
            }), 409

        return jsonify({
            'error': 'integrity_error',
            'message': 'Data integrity constraint violated'
        }), 400

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return jsonify({'error': 'not_found', 'message': 'Resource not found'}), 404

    @app.errorhandler(MethodNotAllowed)
    def handle_method_not_allowed(e):
        return jsonify({'error': 'method_not_allowed', 'message': 'Method not allowed'}), 405


def create_validation_error_response(message: str, fields: Optional[List[str]] = None):
    """Create a consistent validation error response"""
    response = {
        'error': 'validation_error',
        'message': message
    }
    if fields:
        response['fields'] = fields

    return jsonify(response), 400

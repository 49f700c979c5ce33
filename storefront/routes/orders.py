# -*- coding: utf-8 -*-
"""
Order routes: order history email and payment intent creation.
"""
from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from storefront.errors import ErrorCode
from storefront.infra.log import get_logger
from storefront.middleware.errors import create_validation_error_response
from storefront.schemas.orders import CreatePaymentIntentRequest
from storefront.services.order_service import create_payment_intent, email_order_history

logger = get_logger('storefront.orders')

orders_bp = Blueprint('orders', __name__)

STATUS_BY_ERROR_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.ENTITY_NOT_FOUND: 404,
    ErrorCode.BUSINESS_RULE_VIOLATION: 409,
    ErrorCode.EXTERNAL_SERVICE_FAILURE: 502,
    ErrorCode.UNEXPECTED_FAULT: 500,
}


def _json():
    """Parse a JSON object body; anything else (missing, malformed, array) is {}."""
    payload = request.get_json(silent=True) if request.data else None
    return payload if isinstance(payload, dict) else {}


def _error_response(result):
    return jsonify({
        'error': result.error,
        'error_code': result.error_code.value,
    }), STATUS_BY_ERROR_CODE[result.error_code]


@orders_bp.route('/orders/history', methods=['POST'])
async def order_history():
    """Email the order history for the submitted address (form or JSON)."""
    payload = request.form if request.form else _json()
    result = await email_order_history(None, payload.get('email'))

    if result.error:
        return _error_response(result)
    return jsonify({'message': result.message}), 200


@orders_bp.route('/orders/payment-intent', methods=['POST'])
async def payment_intent():
    """Create an order and a Stripe PaymentIntent, returning its client secret."""
    try:
        data = CreatePaymentIntentRequest.model_validate(_json())
    except ValidationError as e:
        fields = sorted({'.'.join(str(p) for p in err['loc']) for err in e.errors()})
        logger.warning("Invalid payment intent request", fields=fields)
        return create_validation_error_response('Invalid request data', fields)

    result = await create_payment_intent(data.email, data.product_id, data.discount_code_id)

    if result.error:
        return _error_response(result)
    return jsonify({
        'client_secret': result.client_secret,
        'order_id': result.order_id,
    }), 200

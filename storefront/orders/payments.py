"""
Payment provider client (Stripe REST API).
Creates and verifies payment intents for card checkout.
"""
import os
import logging
from typing import Optional, Dict, Any

import requests
from django.conf import settings

from storefront.catalog.pricing import to_cents

logger = logging.getLogger(__name__)

STRIPE_API_BASE = getattr(
    settings,
    'STRIPE_API_BASE',
    os.getenv('STRIPE_API_BASE', 'https://api.stripe.com/v1')
)

PAYMENT_CURRENCY = getattr(
    settings,
    'PAYMENT_CURRENCY',
    os.getenv('PAYMENT_CURRENCY', 'usd')
)

PAYMENT_TIMEOUT_SECONDS = getattr(
    settings,
    'PAYMENT_TIMEOUT_SECONDS',
    int(os.getenv('PAYMENT_TIMEOUT_SECONDS', '15'))
)

# Config key holding the provider secret key
SECRET_KEY_CONFIG = 'stripePrivateKey'

SUCCEEDED = 'succeeded'


class PaymentError(Exception):
    """Raised when the payment provider rejects a request or cannot be reached"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def _headers(secret_key: str) -> Dict[str, str]:
    return {'Authorization': f'Bearer {secret_key}'}


def _handle_response(response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if response.status_code >= 400:
        message = payload.get('error', {}).get('message') or f'Payment provider returned {response.status_code}'
        logger.warning(f"Payment provider error ({response.status_code}): {message}")
        raise PaymentError(message, status_code=response.status_code)
    return payload


def intent_id_from_client_secret(client_secret: str) -> str:
    """A client secret has the form '<intent id>_secret_<token>'"""
    return client_secret.split('_secret_')[0]


def create_payment_intent(amount, user_id, secret_key: str, currency: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a card payment intent

    Args:
        amount: Total in currency units (converted to cents here)
        user_id: Stored in the intent metadata
        secret_key: Provider secret key
        currency: Defaults to PAYMENT_CURRENCY

    Returns:
        The provider's payment intent object (has 'id', 'client_secret', 'status')
    """
    data = {
        'amount': to_cents(amount),
        'currency': currency or PAYMENT_CURRENCY,
        'payment_method_types[]': 'card',
        'metadata[user_id]': str(user_id),
    }
    try:
        response = requests.post(
            f"{STRIPE_API_BASE}/payment_intents",
            data=data,
            headers=_headers(secret_key),
            timeout=PAYMENT_TIMEOUT_SECONDS
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to create payment intent for user {user_id}: {str(e)}")
        raise PaymentError('Failed to create payment intent') from e

    intent = _handle_response(response)
    logger.info(f"Created payment intent {intent.get('id')} for user {user_id} ({data['amount']} {data['currency']})")
    return intent


def retrieve_payment_intent(client_secret_or_id: str, secret_key: str) -> Dict[str, Any]:
    """Fetch a payment intent by id or client secret"""
    intent_id = intent_id_from_client_secret(client_secret_or_id)
    try:
        response = requests.get(
            f"{STRIPE_API_BASE}/payment_intents/{intent_id}",
            headers=_headers(secret_key),
            timeout=PAYMENT_TIMEOUT_SECONDS
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to retrieve payment intent {intent_id}: {str(e)}")
        raise PaymentError('Failed to verify payment') from e

    return _handle_response(response)


def payment_mismatch(intent: Dict[str, Any], amount, user_id, currency: Optional[str] = None) -> Optional[str]:
    """
    Check that a succeeded intent paid for this amount on behalf of this user

    Returns:
        A reason string when the intent does not match, otherwise None
    """
    if intent.get('amount') != to_cents(amount):
        return 'Payment amount does not match the cart total'
    expected_currency = (currency or PAYMENT_CURRENCY).lower()
    if str(intent.get('currency') or '').lower() != expected_currency:
        return 'Payment currency does not match'
    metadata = intent.get('metadata') or {}
    if str(metadata.get('user_id')) != str(user_id):
        return 'Payment belongs to another user'
    return None

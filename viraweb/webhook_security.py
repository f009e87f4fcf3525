"""
Webhook Security Module

Signature verification for incoming Stripe webhooks:
- Constant-time signature comparison (prevents timing attacks)
- Timestamp validation (prevents replay attacks)
- Raw body is read once and returned to the caller for parsing
"""

import hashlib
import hmac
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300


def constant_time_compare(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload (hex)"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_timestamp(timestamp: Optional[str], max_age: int = MAX_WEBHOOK_AGE_SECONDS) -> bool:
    """
    Verify webhook timestamp is within acceptable range.

    Args:
        timestamp: Unix timestamp as string
        max_age: Maximum age in seconds
    """
    try:
        age = abs(int(time.time()) - int(timestamp))
    except (ValueError, TypeError):
        logger.warning(f"🚫 Invalid webhook timestamp format: {timestamp}")
        return False

    if age > max_age:
        logger.warning(f"🚫 Webhook timestamp too old: {age}s (max: {max_age}s)")
        return False
    return True


def parse_stripe_signature(header: str) -> tuple[Optional[str], list[str]]:
    """Split 't=<timestamp>,v1=<sig>[,v1=<sig>...]' into the timestamp and v1 signatures"""
    timestamp = None
    signatures = []
    for item in header.split(","):
        if "=" not in item:
            continue
        key, value = item.split("=", 1)
        key = key.strip()
        if key == "t":
            timestamp = value.strip()
        elif key == "v1":
            signatures.append(value.strip())
    return timestamp, signatures


async def verify_stripe_webhook(
    request: Request, secret: str, raise_on_failure: bool = True
) -> tuple[bool, bytes]:
    """
    Verify Stripe webhook signature.

    Stripe signs `<timestamp>.<raw body>` with the endpoint secret and sends
    'Stripe-Signature: t=<timestamp>,v1=<signature>'. Failures raise 400 so
    Stripe retries the delivery.

    Returns:
        Tuple of (is_valid, raw_body)
    """
    raw_body = await request.body()
    signature_header = request.headers.get("Stripe-Signature", "")

    def fail(reason: str) -> tuple[bool, bytes]:
        logger.warning(f"🚫 Stripe webhook rejected: {reason}")
        if raise_on_failure:
            raise HTTPException(status_code=400, detail=reason)
        return False, raw_body

    if not secret:
        logger.error("❌ STRIPE_WEBHOOK_SECRET not configured")
        return fail("Webhook secret not configured")

    if not signature_header:
        return fail("Missing stripe-signature header")

    timestamp, signatures = parse_stripe_signature(signature_header)
    if not timestamp or not signatures:
        return fail("Invalid signature format")

    if not verify_timestamp(timestamp):
        return fail("Webhook timestamp expired")

    signed_payload = timestamp.encode("utf-8") + b"." + raw_body
    expected_signature = compute_hmac_sha256(secret, signed_payload)

    if not any(constant_time_compare(expected_signature, sig) for sig in signatures):
        return fail("Invalid webhook signature")

    logger.debug("✅ Stripe webhook signature verified")
    return True, raw_body


def create_stripe_signature(secret: str, payload: bytes, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header value (used for outgoing test deliveries)"""
    timestamp = timestamp or int(time.time())
    sig = compute_hmac_sha256(secret, f"{timestamp}.".encode("utf-8") + payload)
    return f"t={timestamp},v1={sig}"

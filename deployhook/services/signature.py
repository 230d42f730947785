"""GitHub webhook signature verification."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def sign_payload(body: bytes, secret: str) -> str:
    """Signature header value GitHub sends for ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_webhook_payload(body: bytes, signature_header: str | None, secret: str) -> bool:
    """Check the ``X-Hub-Signature-256`` header against the raw request body."""
    if not secret or not signature_header:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False
    return hmac.compare_digest(sign_payload(body, secret), signature_header)

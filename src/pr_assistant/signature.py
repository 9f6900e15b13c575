"""GitHub webhook signature verification."""

import hashlib
import hmac

import logfire

from pr_assistant.errors import ConfigurationError, SignatureError

SIGNATURE_PREFIX = "sha256="


def compute_signature(payload: bytes, secret: str) -> str:
    """Compute the X-Hub-Signature-256 value GitHub sends for a payload."""
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload: bytes, signature: str, secret: str) -> bool:
    """Verify the GitHub webhook signature.

    The comparison is constant time for equal-length inputs. Inputs of a different
    length are rejected before any content is compared.
    """
    expected = compute_signature(payload, secret).encode("utf-8")
    provided = signature.encode("utf-8")

    if len(provided) != len(expected):
        return False

    return hmac.compare_digest(expected, provided)


def check_signature(
    payload: bytes,
    signature: str | None,
    secret: str | None,
    production: bool = False,
) -> None:
    """Allow or reject a webhook delivery.

    Must be called with the raw request bytes, before the body is parsed.

    Raises:
        ConfigurationError: No secret is configured and we are running in production.
        SignatureError: The signature header is missing or does not match.
    """
    if not secret:
        if production:
            logfire.error("[signature] GITHUB_WEBHOOK_SECRET is not configured")
            raise ConfigurationError("GITHUB_WEBHOOK_SECRET is not configured")
        logfire.warn("[signature] GITHUB_WEBHOOK_SECRET not set - skipping signature check (dev mode)")
        return

    if not signature:
        logfire.warn("[signature] missing signature header")
        raise SignatureError("Missing X-Hub-Signature-256 header")

    if not verify_signature(payload, signature, secret):
        prefix = signature[:10]
        logfire.warn("[signature] invalid webhook signature", signature_prefix=prefix)
        raise SignatureError("Invalid webhook signature")

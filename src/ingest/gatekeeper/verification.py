"""LINE webhook signature verification.

LINE signs every webhook with HMAC-SHA256 over the raw request body, keyed by the channel
secret, and sends the base64 digest in the `x-line-signature` header. The digest must be
computed over the exact bytes received: re-serializing the parsed JSON changes whitespace and
key order and breaks the comparison.
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass

from src.ingest.errors import InvalidSignature, MissingSignature
from src.utils.logging import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "x-line-signature"


@dataclass
class VerificationResult:
    """Result of webhook verification.

    `skipped` is True when no channel secret is configured and the body was accepted unchecked.
    `verification_ping` is True for the empty-body request LINE sends when the webhook URL is saved.
    """

    success: bool
    skipped: bool = False
    verification_ping: bool = False


def compute_line_signature(secret: str, body: bytes) -> str:
    """Return the base64-encoded HMAC-SHA256 digest of `body` keyed by `secret`."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_line_webhook(headers: dict[str, str], body: bytes, secret: str) -> None:
    """Verify a LINE webhook signature.

    Raises:
        MissingSignature: If the x-line-signature header is absent
        InvalidSignature: If the header does not match the computed digest
    """
    signature = headers.get(SIGNATURE_HEADER)
    if not signature:
        raise MissingSignature()

    expected = compute_line_signature(secret, body)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        raise InvalidSignature()


class LineWebhookVerifier:
    """Verifier for LINE webhooks using the channel secret."""

    def __init__(self, channel_secret: str | None):
        self.channel_secret = channel_secret

    def verify(self, headers: dict[str, str], body: bytes) -> VerificationResult:
        """Verify a webhook body, raising on signature failures.

        Header names are matched case-insensitively.
        """
        if not body:
            logger.info("Empty webhook body, treating as verification ping")
            return VerificationResult(success=True, verification_ping=True)

        if not self.channel_secret:
            logger.warning("LINE_CHANNEL_SECRET is not set, skipping webhook signature validation")
            return VerificationResult(success=True, skipped=True)

        normalized_headers = {key.lower(): value for key, value in headers.items()}
        try:
            verify_line_webhook(normalized_headers, body, self.channel_secret)
        except (MissingSignature, InvalidSignature) as e:
            logger.warning("LINE webhook signature verification failed", error=e.message)
            raise

        return VerificationResult(success=True)

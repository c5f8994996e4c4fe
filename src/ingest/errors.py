"""Error types raised by the ingestion pipeline and rendered by the gateway."""


class ContentGatewayError(Exception):
    """Base class for errors that map onto an HTTP status and a client-safe message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSignature(ContentGatewayError):
    status_code = 400
    default_message = "Invalid signature"


class MissingSignature(ContentGatewayError):
    status_code = 400
    default_message = "Missing signature"


class MalformedPayload(ContentGatewayError):
    status_code = 400
    default_message = "Invalid JSON format"


class UnsupportedTestType(ContentGatewayError):
    status_code = 400
    default_message = "Invalid test type"


class NotFound(ContentGatewayError):
    status_code = 404
    default_message = "Not found"


class ImageFetchFailed(ContentGatewayError):
    """The LINE content API did not return the image. Converted to a null image reference."""

    status_code = 502
    default_message = "Failed to fetch image"


class AIProviderError(ContentGatewayError):
    """The generative-text provider failed. Converted to fallback text, never surfaced."""

    status_code = 502
    default_message = "AI provider error"


class InternalError(ContentGatewayError):
    pass

"""Exceptions raised while translating and dispatching mail through Graph."""


class GraphMailError(Exception):
    """Base class for all graph_mailer failures."""


class TranslationError(GraphMailError):
    """The email could not be turned into a Graph message."""


class UnsupportedBodyType(TranslationError):
    """Top-level body is neither a text part nor a multipart container."""


class NoTextPartFound(TranslationError):
    """The multipart tree has no usable text representation."""


class AttachmentTooLarge(TranslationError):
    """An attachment exceeds what a single sendMail request can carry."""

    def __init__(self, name: str | None, size: int, limit: int):
        self.name = name
        self.size = size
        self.limit = limit
        super().__init__(
            f"attachment {name or '(unnamed)'} is {size} bytes encoded, limit is {limit}"
        )


class TokenUnavailable(GraphMailError):
    """No token repository could be resolved, or it returned no access token."""


class DispatchFailed(GraphMailError):
    """Graph did not accept the sendMail request."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class EndpointNotConfigured(GraphMailError):
    """No endpoint is registered under the requested (or default) name."""

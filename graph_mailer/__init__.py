"""Send already-parsed email through the Microsoft Graph sendMail API."""

from graph_mailer.errors import (
    AttachmentTooLarge,
    DispatchFailed,
    EndpointNotConfigured,
    GraphMailError,
    NoTextPartFound,
    TokenUnavailable,
    TranslationError,
    UnsupportedBodyType,
)
from graph_mailer.mail_provider import GraphMailClient, GraphMailManager, translate_email
from graph_mailer.models import Address, Email, MultipartNode, TextNode

__all__ = [
    "Address",
    "AttachmentTooLarge",
    "DispatchFailed",
    "Email",
    "EndpointNotConfigured",
    "GraphMailClient",
    "GraphMailError",
    "GraphMailManager",
    "MultipartNode",
    "NoTextPartFound",
    "TextNode",
    "TokenUnavailable",
    "TranslationError",
    "UnsupportedBodyType",
    "translate_email",
]

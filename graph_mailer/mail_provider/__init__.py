"""Mail provider: Graph message translation and sendMail dispatch."""

from graph_mailer.mail_provider.endpoints import EndpointConfig, load_endpoints
from graph_mailer.mail_provider.graph_client import GraphMailClient
from graph_mailer.mail_provider.graph_models import (
    EmailAddress,
    FileAttachment,
    GraphMessage,
    ItemBody,
    Recipient,
    SendMailRequest,
)
from graph_mailer.mail_provider.manager import GraphMailManager
from graph_mailer.mail_provider.mapping import email_to_graph_message, translate_email
from graph_mailer.mail_provider.protocol import ErrorLogger, MailDispatch, TokenProvider

__all__ = [
    "EmailAddress",
    "EndpointConfig",
    "ErrorLogger",
    "FileAttachment",
    "GraphMailClient",
    "GraphMailManager",
    "GraphMessage",
    "ItemBody",
    "MailDispatch",
    "Recipient",
    "SendMailRequest",
    "TokenProvider",
    "email_to_graph_message",
    "load_endpoints",
    "translate_email",
]

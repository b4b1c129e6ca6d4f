"""Data models."""

from graph_mailer.models.email import Address, Email, MimeNode, MultipartNode, TextNode

__all__ = [
    "Address",
    "Email",
    "MimeNode",
    "MultipartNode",
    "TextNode",
]

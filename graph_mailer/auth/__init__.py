"""Token repositories for delegated and app-only Graph API access."""

from graph_mailer.auth.token_repository import MsalTokenRepository

__all__ = [
    "MsalTokenRepository",
]

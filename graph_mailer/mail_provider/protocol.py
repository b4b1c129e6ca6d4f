"""Mail dispatch and token repository protocols."""

from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

from graph_mailer.models.email import Email

ErrorLogger = Callable[[str], None]


@runtime_checkable
class TokenProvider(Protocol):
    """Issues (and may cache or refresh) OAuth2 bearer tokens by key."""

    def get_access_token(self, key: str, ttl: int) -> Optional[Mapping[str, Any]]:
        """Return a mapping with at least 'access_token', or None when no token is available.

        ttl is a hint: a cached token expiring within ttl seconds should be refreshed.
        """
        ...


TokenResolver = Callable[[str], Optional[TokenProvider]]


@runtime_checkable
class MailDispatch(Protocol):
    """Sends one email through the Graph API."""

    def send_email(self, email: Email, save_to_sent_items: bool = False) -> None:
        """Send the message; save_to_sent_items keeps a copy in 'Sent Items'."""
        ...

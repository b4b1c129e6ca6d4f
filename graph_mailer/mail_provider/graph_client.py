"""Microsoft Graph sendMail client: one named endpoint with its own token key."""

import threading
from typing import Any, Mapping, Optional

import httpx

from graph_mailer.config import GRAPH_BASE_URL
from graph_mailer.errors import DispatchFailed, TokenUnavailable, TranslationError
from graph_mailer.mail_provider.endpoints import EndpointConfig, coerce_endpoint_config
from graph_mailer.mail_provider.graph_models import SendMailRequest
from graph_mailer.mail_provider.mapping import email_to_graph_message
from graph_mailer.mail_provider.protocol import ErrorLogger, MailDispatch, TokenProvider, TokenResolver
from graph_mailer.models.email import Email
from graph_mailer.utils.logger import get_logger

logger = get_logger("graph_mailer.graph_client")

SEND_MAIL_PATH = "/me/sendMail"
SEND_MAIL_ACCEPTED = 202


def _default_error_log(msg: str) -> None:
    logger.error(msg)


class GraphMailClient(MailDispatch):
    """Sends mail through Graph as the account behind one token key.

    The token repository is resolved lazily: options['token_repo'] may be a
    repository or a resolver called with the token key; the first repository
    it yields is kept for the life of the client.
    """

    def __init__(
        self,
        name: str,
        config: "EndpointConfig | Mapping[str, Any] | None" = None,
        options: Optional[Mapping[str, Any]] = None,
    ):
        options = options or {}
        self.name = name
        self.config = coerce_endpoint_config(config).for_endpoint(name)
        self._err_log: ErrorLogger = options.get("error_log") or _default_error_log
        self._token_repo: "TokenProvider | TokenResolver" = (
            options.get("token_repo") or self._default_resolver
        )
        self._token_lock = threading.Lock()
        self._base_url = (options.get("base_url") or GRAPH_BASE_URL).rstrip("/")
        self._http_client: Optional[httpx.Client] = options.get("http_client")
        self._owns_http_client = self._http_client is None
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=httpx.Timeout(30.0))

    def _default_resolver(self, key: str) -> Optional[TokenProvider]:
        factory = self.config.token_repo_factory
        if factory is None:
            return None
        return factory(key)

    def _log_error(self, msg: str) -> None:
        self._err_log(msg)

    def get_token_repository(self) -> TokenProvider:
        """Resolve (once) and return the token repository for this client."""
        with self._token_lock:
            repo = self._token_repo
            if isinstance(repo, TokenProvider):
                return repo
            try:
                repo = repo(self.config.token_key)
            except Exception as e:
                self._log_error(f"token repository resolution failed for graph mail client {self.name}: {e}")
                raise TokenUnavailable(f"token repository resolution failed for {self.name}") from e
            if isinstance(repo, TokenProvider):
                self._token_repo = repo
                logger.debug("graph_client.token_repo_resolved", endpoint=self.name)
                return repo
        self._log_error(f"no token repository for graph mail client: {self.name}")
        raise TokenUnavailable(f"no token repository for {self.name}")

    def get_access_token(self) -> str:
        """Fetch a bearer token for this endpoint's token key."""
        repo = self.get_token_repository()
        try:
            token = repo.get_access_token(self.config.token_key, self.config.token_ttl)
        except Exception as e:
            self._log_error(f"token acquisition failed for graph mail client {self.name}: {type(e).__name__}: {e}")
            raise TokenUnavailable(f"token acquisition failed for {self.name}") from e
        access_token = (token or {}).get("access_token")
        if not access_token:
            self._log_error(f"no access token for graph mail client {self.name}: key={self.config.token_key}")
            raise TokenUnavailable(f"no access token for {self.name}")
        return access_token

    def send_email(self, email: Email, save_to_sent_items: bool = False) -> None:
        """Send one email via POST /me/sendMail. Success is exactly HTTP 202."""
        access_token = self.get_access_token()
        try:
            message = email_to_graph_message(email, self.config.text_subtype)
        except TranslationError as e:
            self._log_error(f"failed to translate email for graph mail client {self.name}: {e}")
            raise

        payload = SendMailRequest(message=message, saveToSentItems=save_to_sent_items).to_payload()
        log = logger.bind(endpoint=self.name, subject=email.subject)
        log.debug("graph_client.send.start", recipients=len(message.toRecipients or []))
        try:
            response = self._http_client.post(
                f"{self._base_url}{SEND_MAIL_PATH}",
                json=payload,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.config.timeout if self.config.timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as e:
            self._log_error(f"failed to send email with MS Graph ({self.name}): {type(e).__name__}: {e}")
            raise DispatchFailed(f"failed to send email: {e}") from e

        status = response.status_code
        if status != SEND_MAIL_ACCEPTED:
            self._log_error(f"failed to send email with MS Graph ({self.name}): status={status}")
            raise DispatchFailed(f"failed to send email: status={status}", status=status)
        log.info("graph_client.send.ok", status=status, save_to_sent_items=save_to_sent_items)

    def close(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()

    def __enter__(self) -> "GraphMailClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

"""Manager of named Graph mail clients.

Endpoints are registered with configure() and retrieved by name with get();
clients are created on first use and cached per manager. The manager also
sends through the default endpoint, so it can stand in for a single client.
"""

import threading
from pathlib import Path
from typing import Any, Mapping, Optional

from graph_mailer.errors import EndpointNotConfigured
from graph_mailer.mail_provider.endpoints import EndpointConfig, coerce_endpoint_config, load_endpoints
from graph_mailer.mail_provider.graph_client import GraphMailClient
from graph_mailer.mail_provider.protocol import MailDispatch
from graph_mailer.models.email import Email
from graph_mailer.utils.logger import get_logger

logger = get_logger("graph_mailer.manager")


class GraphMailManager(MailDispatch):
    """Registry of Graph mail endpoint configs and their lazily built clients."""

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        # Options (error_log, token_repo, http_client, base_url) are passed to every client.
        self._options = dict(options or {})
        self._configs: dict[str, EndpointConfig] = {}
        self._clients: dict[str, GraphMailClient] = {}
        self._default: Optional[str] = None
        self._lock = threading.Lock()

    @classmethod
    def from_endpoints(
        cls,
        endpoints: Mapping[str, "EndpointConfig | Mapping[str, Any]"],
        options: Optional[Mapping[str, Any]] = None,
    ) -> "GraphMailManager":
        """Build a manager from name -> config, with the first endpoint as default."""
        manager = cls(options)
        first = True
        for name, config in endpoints.items():
            manager.configure(name, config, default=first)
            first = False
        return manager

    @classmethod
    def from_file(
        cls,
        path: Path | None = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "GraphMailManager":
        return cls.from_endpoints(load_endpoints(path), options)

    @property
    def default_name(self) -> Optional[str]:
        return self._resolve_name(None)

    def names(self) -> list[str]:
        return list(self._configs)

    def configure(
        self,
        name: str,
        config: "EndpointConfig | Mapping[str, Any] | None",
        default: bool = False,
    ) -> "GraphMailManager":
        """Register (or replace) the config for an endpoint."""
        endpoint_config = coerce_endpoint_config(config)
        with self._lock:
            self._configs[name] = endpoint_config
            stale = self._clients.pop(name, None)
            if default:
                self._default = name
        if stale is not None:
            stale.close()
        logger.debug("manager.configure", endpoint=name, default=default)
        return self

    def _resolve_name(self, name: Optional[str]) -> Optional[str]:
        if name is not None:
            return name
        if self._default is not None:
            return self._default
        return next(iter(self._configs), None)

    def get(self, name: Optional[str] = None) -> Optional[GraphMailClient]:
        """Client for name (or the default endpoint); None when nothing is configured under it."""
        with self._lock:
            resolved = self._resolve_name(name)
            if resolved is None:
                return None
            client = self._clients.get(resolved)
            if client is not None:
                return client
            config = self._configs.get(resolved)
            if config is None:
                return None
            client = GraphMailClient(resolved, config, self._options)
            self._clients[resolved] = client
        logger.debug("manager.client_created", endpoint=resolved)
        return client

    def send_email(self, email: Email, save_to_sent_items: bool = False) -> None:
        """Send through the default endpoint."""
        client = self.get()
        if client is None:
            msg = "no graph mail endpoint configured"
            error_log = self._options.get("error_log")
            if error_log:
                error_log(msg)
            else:
                logger.error(msg)
            raise EndpointNotConfigured(msg)
        client.send_email(email, save_to_sent_items)

    def close(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()

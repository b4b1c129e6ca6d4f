"""MSAL-backed token repository. One persistent token cache per token key, auto-refreshed."""

import threading
import time
from pathlib import Path
from typing import Any, Optional

import msal

from graph_mailer.config import TOKEN_CACHE_DIR
from graph_mailer.utils.logger import get_logger

logger = get_logger("graph_mailer.auth.token_repository")

# /me/sendMail needs a delegated token (signed-in user)
DELEGATED_SCOPES = ["https://graph.microsoft.com/Mail.Send"]


class MsalTokenRepository:
    """Token repository keyed by token key; each key has its own on-disk MSAL cache.

    Tokens come silently from the account signed in by login(); MSAL refreshes
    them with the cached refresh token.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        cache_dir: Path | None = None,
    ):
        self._tenant_id = tenant_id
        self._client_id = client_id
        self._cache_dir = Path(cache_dir or TOKEN_CACHE_DIR)
        self._apps: dict[str, tuple[Any, msal.SerializableTokenCache]] = {}
        self._lock = threading.Lock()

    def cache_path(self, key: str) -> Path:
        return self._cache_dir / f"{key}.json"

    def _load_cache(self, key: str) -> msal.SerializableTokenCache:
        """Create a SerializableTokenCache and load from disk if file exists."""
        cache = msal.SerializableTokenCache()
        path = self.cache_path(key)
        if path.exists():
            try:
                cache.deserialize(path.read_text(encoding="utf-8"))
            except ValueError as e:
                logger.warning("token_repository.cache_unreadable", key=key, path=str(path), error=str(e))
        return cache

    def _save_cache(self, key: str, cache: msal.SerializableTokenCache) -> None:
        """Persist token cache to disk."""
        if not cache.has_state_changed:
            return
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_path(key).write_text(cache.serialize(), encoding="utf-8")

    def _app_for(self, key: str):
        entry = self._apps.get(key)
        if entry is not None:
            return entry
        cache = self._load_cache(key)
        authority = f"https://login.microsoftonline.com/{self._tenant_id}"
        app = msal.PublicClientApplication(
            client_id=self._client_id,
            authority=authority,
            token_cache=cache,
        )
        self._apps[key] = (app, cache)
        return app, cache

    def _acquire(self, app, key: str, ttl: int) -> Optional[dict[str, Any]]:
        accounts = app.get_accounts()
        if not accounts:
            logger.warning("token_repository.no_account", key=key)
            return None
        result = app.acquire_token_silent(DELEGATED_SCOPES, account=accounts[0])
        if result and "access_token" in result and int(result.get("expires_in", 0)) <= ttl:
            result = app.acquire_token_silent(DELEGATED_SCOPES, account=accounts[0], force_refresh=True)
        return result

    def get_access_token(self, key: str, ttl: int) -> Optional[dict[str, Any]]:
        """Return {'access_token', 'expires_on'} for key, or None when no token can be had."""
        with self._lock:
            app, cache = self._app_for(key)
            result = self._acquire(app, key, ttl)
            self._save_cache(key, cache)
        if not result or "access_token" not in result:
            logger.warning(
                "token_repository.acquire_failed",
                key=key,
                error=(result or {}).get("error_description") or (result or {}).get("error"),
            )
            return None
        expires_on = int(time.time()) + int(result.get("expires_in", 0))
        logger.debug("token_repository.token_issued", key=key, expires_on=expires_on)
        return {"access_token": result["access_token"], "expires_on": expires_on}

    def login(self, key: str, prompt=print) -> dict[str, Any]:
        """Sign in an account for key with the device code flow."""
        with self._lock:
            app, cache = self._app_for(key)
            flow = app.initiate_device_flow(scopes=DELEGATED_SCOPES)
            if "user_code" not in flow:
                raise RuntimeError(flow.get("error_description", "Failed to create device flow"))
            prompt(flow["message"])
            result = app.acquire_token_by_device_flow(flow)
            if "access_token" not in result:
                raise RuntimeError(
                    result.get("error_description", result.get("error", "Device flow failed"))
                )
            self._save_cache(key, cache)
        logger.info("token_repository.login_ok", key=key)
        return result

    def __call__(self, key: str) -> "MsalTokenRepository":
        # Usable directly as a token_repo_factory: every key shares this repository.
        return self

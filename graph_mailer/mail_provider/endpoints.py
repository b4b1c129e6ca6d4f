"""Graph mail endpoint configuration: per-endpoint options and YAML loading."""

from pathlib import Path
from typing import Any, Callable, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

from graph_mailer.config import DEFAULT_TEXT_SUBTYPE, DEFAULT_TOKEN_TTL, GRAPH_ENDPOINTS_PATH
from graph_mailer.utils.logger import get_logger

logger = get_logger("graph_mailer.endpoints")


class EndpointConfig(BaseModel):
    """Options for one named Graph mail endpoint."""

    token_key: Optional[str] = None  # defaults to the endpoint name
    token_ttl: int = Field(DEFAULT_TOKEN_TTL, ge=0)
    text_subtype: Literal["html", "plain"] = DEFAULT_TEXT_SUBTYPE
    timeout: Optional[float] = Field(None, gt=0)
    token_repo_factory: Optional[Callable[[str], Any]] = None

    model_config = {"frozen": True, "extra": "forbid"}

    def for_endpoint(self, name: str) -> "EndpointConfig":
        """Return a copy with token_key filled in from the endpoint name."""
        if self.token_key:
            return self
        return self.model_copy(update={"token_key": name})


def coerce_endpoint_config(config: "EndpointConfig | Mapping[str, Any] | None") -> EndpointConfig:
    if isinstance(config, EndpointConfig):
        return config
    return EndpointConfig.model_validate(dict(config or {}))


def resolve_endpoint_aliases(raw: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Resolve string entries to the config they name. No chaining; unknown targets give {}."""
    resolved: dict[str, dict[str, Any]] = {}
    for name, config in raw.items():
        if isinstance(config, str):
            target = raw.get(config)
            if not isinstance(target, Mapping):
                logger.warning("endpoints.alias_unresolved", endpoint=name, target=config)
                target = {}
            config = target
        if config is None:
            config = {}
        if not isinstance(config, Mapping):
            raise ValueError(f"Endpoint {name!r} must be a mapping or an alias string, got {type(config)}")
        resolved[str(name)] = dict(config)
    return resolved


def load_endpoints(path: Path | None = None) -> dict[str, dict[str, Any]]:
    """Load endpoint configs from YAML (top-level 'endpoints' mapping, in file order)."""
    path = path or GRAPH_ENDPOINTS_PATH
    if not path.exists():
        raise FileNotFoundError(
            f"Endpoints config not found: {path}. Set GRAPH_ENDPOINTS_PATH or create config/endpoints.yaml."
        )
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in endpoints config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Endpoints config must be a YAML object (dict), got {type(data)}")
    raw = data.get("endpoints", data)
    if not isinstance(raw, dict):
        raise ValueError(f"'endpoints' must be a mapping, got {type(raw)}")
    endpoints = resolve_endpoint_aliases(raw)
    for config in endpoints.values():
        EndpointConfig.model_validate(config)
    logger.info("endpoints.config_loaded", path=str(path), endpoint_count=len(endpoints))
    return endpoints

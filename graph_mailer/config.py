"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"
LOG_FILE = os.getenv("LOG_FILE", "").strip() or None  # JSONL output when set

# Graph API
GRAPH_BASE_URL = os.getenv("GRAPH_BASE_URL", "https://graph.microsoft.com/v1.0").rstrip("/")
GRAPH_ENDPOINTS_PATH = Path(
    os.getenv("GRAPH_ENDPOINTS_PATH", "") or CONFIG_DIR / "endpoints.yaml"
)

# Per-endpoint defaults (overridden by each endpoint's config)
DEFAULT_TOKEN_TTL = int(os.getenv("GRAPH_TOKEN_TTL", "120"))
DEFAULT_TEXT_SUBTYPE = os.getenv("GRAPH_TEXT_SUBTYPE", "html").lower()

# Azure app registration (for the MSAL token repository)
AZURE_TENANT_ID = os.getenv("AZURE_TENANT_ID", "")
AZURE_CLIENT_ID = os.getenv("AZURE_CLIENT_ID", "")

# Token caches, one JSON file per token key
TOKEN_CACHE_DIR = Path(
    os.getenv("TOKEN_CACHE_DIR", "") or Path.home() / ".graph-mailer" / "tokens"
)

"""Shared CLI helpers: console, logger, token repository and manager construction."""

from pathlib import Path

import typer
from rich.console import Console

from graph_mailer.auth import MsalTokenRepository
from graph_mailer.config import AZURE_CLIENT_ID, AZURE_TENANT_ID
from graph_mailer.mail_provider import GraphMailManager
from graph_mailer.models.email import Email
from graph_mailer.utils.email_parser import parse_eml_file
from graph_mailer.utils.logger import get_logger

console = Console()
logger = get_logger("graph_mailer.cli")


def get_token_repository() -> MsalTokenRepository:
    """MSAL token repository from AZURE_TENANT_ID / AZURE_CLIENT_ID; exits when they are unset."""
    missing = [k for k, v in (("AZURE_TENANT_ID", AZURE_TENANT_ID), ("AZURE_CLIENT_ID", AZURE_CLIENT_ID)) if not v]
    if missing:
        console.print(f"[red]Missing environment variables: {', '.join(missing)}[/red]")
        logger.warning("cli.missing_env", missing=missing)
        raise typer.Exit(1)
    return MsalTokenRepository(tenant_id=AZURE_TENANT_ID, client_id=AZURE_CLIENT_ID)


def get_manager(config_path: Path | None = None) -> GraphMailManager:
    """Manager for the endpoints YAML, every endpoint backed by the MSAL token repository."""
    return GraphMailManager.from_file(
        config_path,
        options={"token_repo": get_token_repository()},
    )


def read_email(path: Path) -> Email:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    email = parse_eml_file(path)
    logger.debug("cli.email_loaded", path=str(path), subject=email.subject)
    return email

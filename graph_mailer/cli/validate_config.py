"""Validate endpoints config: load YAML, resolve aliases, print summary table."""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.table import Table

from graph_mailer.mail_provider import GraphMailManager
from graph_mailer.mail_provider.endpoints import load_endpoints

from .shared import console, logger


def validate_config(
    config: Path | None = typer.Option(None, "--config", "-c", help="Endpoints YAML (overrides GRAPH_ENDPOINTS_PATH)"),
) -> None:
    """Load the endpoints YAML, validate each endpoint, print summary table."""
    log = logger.bind(command="validate-config")
    log.info("validate_config.start")

    try:
        endpoints = load_endpoints(config)
    except FileNotFoundError as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("validate_config.fail", error=str(e))
        raise SystemExit(1) from e
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("validate_config.fail", error=str(e))
        raise SystemExit(1) from e

    if not endpoints:
        console.print("[red]No endpoints configured.[/red]")
        log.error("validate_config.empty")
        raise SystemExit(1)

    manager = GraphMailManager.from_endpoints(endpoints)
    table = Table(title="Graph mail endpoints")
    table.add_column("Endpoint", style="cyan")
    table.add_column("Token key", style="green")
    table.add_column("TTL (s)", justify="right")
    table.add_column("Body")
    table.add_column("Timeout (s)", justify="right")
    table.add_column("Default", justify="center")

    for name in manager.names():
        client = manager.get(name)
        cfg = client.config
        table.add_row(
            name,
            cfg.token_key or name,
            str(cfg.token_ttl),
            cfg.text_subtype,
            "-" if cfg.timeout is None else str(cfg.timeout),
            "yes" if name == manager.default_name else "",
        )
    manager.close()

    console.print(table)
    console.print(f"[green]Config valid. {len(endpoints)} endpoints.[/green]")
    log.info("validate_config.ok", endpoints=len(endpoints))

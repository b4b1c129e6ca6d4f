"""Send mode: send an .eml file through a configured Graph endpoint."""

from pathlib import Path

import typer

from graph_mailer.errors import GraphMailError
from graph_mailer.utils.logger import bind_context, clear_context

from .shared import console, get_manager, logger, read_email


def send(
    eml: Path = typer.Argument(..., help="RFC 822 message file (.eml)"),
    endpoint: str | None = typer.Option(None, "--endpoint", "-e", help="Endpoint name (default endpoint if omitted)"),
    save: bool = typer.Option(False, "--save/--no-save", help="Save a copy to Sent Items"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Endpoints YAML (overrides GRAPH_ENDPOINTS_PATH)"),
) -> None:
    """Send an email through the Graph sendMail API."""
    log = logger.bind(command="send", eml=str(eml), endpoint=endpoint)
    log.info("send.start")
    email = read_email(eml)
    try:
        manager = get_manager(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("send.config_error", error=str(e))
        raise typer.Exit(1)

    client = manager.get(endpoint)
    if client is None:
        console.print(f"[red]Unknown endpoint: {endpoint or '(default)'}[/red]")
        log.warning("send.unknown_endpoint", known=manager.names())
        raise typer.Exit(1)

    bind_context(command="send", endpoint=client.name)
    try:
        client.send_email(email, save_to_sent_items=save)
    except GraphMailError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)
    finally:
        manager.close()
        clear_context()

    console.print(f"[green]Sent via {client.name}.[/green]")
    log.info("send.complete", endpoint=client.name)

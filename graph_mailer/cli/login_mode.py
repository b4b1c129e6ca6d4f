"""Login mode: device code sign-in for a delegated token key."""

import typer

from .shared import console, get_token_repository, logger


def login(
    key: str = typer.Argument(..., help="Token key (an endpoint's token_key, by default its name)"),
) -> None:
    """Sign in with the device code flow and cache the token for KEY."""
    log = logger.bind(command="login", key=key)
    repo = get_token_repository()
    console.print("[bold]Sign-in required[/bold]: open the URL below and enter the code.\n")
    try:
        repo.login(key, prompt=console.print)
    except RuntimeError as e:
        console.print(f"[red]Sign-in failed: {e}[/red]")
        log.warning("login.failed", error=str(e))
        raise typer.Exit(1)
    console.print(f"[green]Token cached at {repo.cache_path(key)}[/green]")
    log.info("login.complete")

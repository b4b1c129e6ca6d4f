"""Translate mode: print the Graph message JSON for an .eml file without sending it."""

import json
from pathlib import Path

import typer

from graph_mailer.errors import TranslationError
from graph_mailer.mail_provider.mapping import translate_email

from .shared import console, logger, read_email


def translate(
    eml: Path = typer.Argument(..., help="RFC 822 message file (.eml)"),
    text_subtype: str = typer.Option("html", "--text-subtype", "-t", help="Preferred body: html or plain"),
) -> None:
    """Print the Graph sendMail message object for an email."""
    log = logger.bind(command="translate", eml=str(eml))
    email = read_email(eml)
    try:
        message = translate_email(email, text_subtype)
    except TranslationError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        log.warning("translate.failed", error=str(e), error_type=type(e).__name__)
        raise typer.Exit(1)
    console.print_json(json.dumps(message))
    log.info("translate.complete", attachments=len(message.get("attachments", [])))

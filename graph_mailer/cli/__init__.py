"""CLI commands: one module per command (translate, send, validate-config, login)."""

from typer import Typer

from graph_mailer.cli import login_mode, send_mode, translate_mode, validate_config as validate_config_module

app = Typer(help="Send email through the Microsoft Graph sendMail API")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(translate_mode.translate)
    app.command()(send_mode.send)
    app.command()(login_mode.login)
    app.command(name="validate-config")(validate_config_module.validate_config)


register_commands()

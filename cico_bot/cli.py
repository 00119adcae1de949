# cico_bot/cli.py
"""
CLI interface for cico-bot.

Thin operator layer: start the bot, inspect configuration and stored users,
and migrate settings from a legacy database.json file.
"""

import asyncio

import typer

app = typer.Typer(
    name="cico-bot",
    help="Telegram bot for attendance portal check-in/check-out reports.",
    no_args_is_help=True,
)


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _mask(secret: str | None) -> str:
    """Show only the last 4 characters of a secret."""
    if not secret:
        return "-"
    if len(secret) <= 4:
        return "****"
    return "****" + secret[-4:]


async def _get_store():
    """Open the settings store configured for this machine."""
    from cico_bot.bot.app import create_store
    from cico_bot.config.loader import load_config

    store = create_store(load_config())
    await store.initialize()
    return store


@app.command("run")
def run_bot():
    """Start the bot (long polling). Ctrl+C to stop."""
    from cico_bot.bot.app import run_bot as _run_bot
    from cico_bot.config.loader import load_config
    from cico_bot.logging_config import configure_logging

    config = load_config()
    configure_logging(config.logging.level, config.logging.json_output)

    try:
        _run_bot(config)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("config")
def show_config():
    """Show the config file path and effective settings."""
    from cico_bot.config.loader import get_config_path, load_config

    config = load_config()
    typer.echo(f"Config file: {get_config_path()}")
    typer.echo(f"Bot token:   {_mask(config.telegram.bot_token)}")
    typer.echo(f"Portal URL:  {config.portal.base_url or '-'}")
    typer.echo(f"Database:    {config.storage.db_path or '(default)'}")
    typer.echo(
        f"Export:      every {config.export.progress_every} records, "
        f"{config.export.inter_record_delay}s delay, "
        f"{config.export.max_send_attempts} attempts"
    )


@app.command("users")
def list_users():
    """List stored user settings (tokens masked)."""
    from rich.console import Console
    from rich.table import Table

    async def _list():
        store = await _get_store()
        try:
            return await store.list_all()
        finally:
            await store.close()

    users = _run(_list())
    if not users:
        typer.echo("No users stored.")
        return

    table = Table("USER ID", "TOKEN", "STRETCH", "DUMP CHANNEL")
    for user_id, settings in users.items():
        table.add_row(
            user_id,
            _mask(settings.auth_token),
            "on" if settings.stretch_images else "off",
            settings.dump_destination or "-",
        )
    Console().print(table)


@app.command("import-json")
def import_json(path: str = typer.Argument(..., help="Path to a legacy database.json")):
    """Import user settings from a legacy JSON database file."""
    from cico_bot.models.sqlite_store import import_json_database

    async def _import():
        store = await _get_store()
        try:
            return await import_json_database(store, path)
        finally:
            await store.close()

    try:
        count = _run(_import())
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Imported {count} user(s) from {path}")


if __name__ == "__main__":
    app()

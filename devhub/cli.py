"""DevHub CLI -- run the API and manage its data from the shell."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from devhub import __version__
from devhub.auth.models import Role
from devhub.config import Settings

console = Console()


def _load_settings(config: str | None) -> Settings:
    return Settings.from_file(config) if config else Settings.from_env()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """DevHub -- blog, forum and contact platform.

    Settings come from DEVHUB_* environment variables unless a command
    takes --config.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--config", "-c", default=None, type=click.Path(exists=True), help="YAML settings file")
def serve(host: str, port: int, config: str | None):
    """Run the REST API with uvicorn."""
    import uvicorn

    from web.backend.app.main import create_app

    settings = _load_settings(config)
    console.print(f"\n[bold blue]DevHub[/] serving on http://{host}:{port} (data: {settings.data_dir})\n")
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


# ── Seed ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("seed_file", type=click.Path(exists=True))
@click.option("--config", "-c", default=None, type=click.Path(exists=True), help="YAML settings file")
def seed(seed_file: str, config: str | None):
    """Load sample users, posts and threads from SEED_FILE."""
    from devhub.seed import apply_seed, load_seed
    from devhub.services import Services

    services = Services.build(_load_settings(config))
    try:
        report = apply_seed(services, load_seed(seed_file))
    finally:
        services.close()

    table = Table(title="Seed results")
    table.add_column("Item", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Users created", str(report.users_created))
    table.add_row("Users already present", str(report.users_existing))
    table.add_row("Blog posts created", str(report.posts_created))
    table.add_row("Forum threads created", str(report.threads_created))
    table.add_row("Skipped", str(report.skipped))
    console.print(table)


# ── Admin ────────────────────────────────────────────────────────────


@main.command(name="create-admin")
@click.argument("email")
@click.option("--config", "-c", default=None, type=click.Path(exists=True), help="YAML settings file")
def create_admin(email: str, config: str | None):
    """Grant the admin role to the account registered with EMAIL."""
    from devhub.auth.store import UserStore

    settings = _load_settings(config)
    users = UserStore(settings.data_dir / "auth", token_secret=settings.jwt_secret)
    user = users.get_user_by_email(email)
    if user is None:
        console.print(f"[red]No account registered with {email}[/]")
        raise SystemExit(1)
    users.set_role(user.id, Role.admin)
    console.print(f"[green]{user.username}[/] is now an admin")


@main.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True), help="YAML settings file")
def stats(config: str | None):
    """Show contact message counts by status."""
    from devhub.services import Services

    services = Services.build(_load_settings(config))
    try:
        summary = services.contacts.stats()
    finally:
        services.close()

    table = Table(title="Contact messages")
    table.add_column("Status", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Pending", str(summary.pending))
    table.add_row("Read", str(summary.read))
    table.add_row("Replied", str(summary.replied))
    table.add_row("Last 7 days", str(summary.recent_week))
    table.add_row("[bold]Total[/]", f"[bold]{summary.total}[/]")
    console.print(table)


if __name__ == "__main__":
    main()

"""Command-line interface for Storefront."""

import asyncio
import os
from pathlib import Path
from typing import Iterable, Optional

import click
from rich import box
from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront import __version__
from storefront.config import ConfigError, generate_config_template, get_config, load_config
from storefront.db.models import Banner, User, UserRole
from storefront.logging_config import LogContext, configure_logging, get_logger

console = Console()
logger = get_logger(__name__)

BANNER_FOLDER = "banners"


async def _run_in_session(operation):
    """Run ``operation(session)`` in one committed transaction."""
    from storefront.db.session import async_session_factory, close_db

    try:
        async with async_session_factory() as session:
            try:
                result = await operation(session)
                await session.commit()
                return result
            except Exception:
                await session.rollback()
                raise
    finally:
        await close_db()


async def promote_user(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()
    if user is not None:
        user.role = UserRole.ADMIN
        await db.flush()
    return user


def find_orphaned_files(stored: Iterable[str], referenced: Iterable[str]) -> list[str]:
    """Stored upload URLs that no record refers to."""
    in_use = set(referenced)
    return sorted(url for url in stored if url not in in_use)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file (.storefrontrc or storefront.toml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Set logging level (overrides config file)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "human"], case_sensitive=False),
    default=None,
    help="Log output format (overrides config file)",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None, log_format: str | None) -> None:
    """Storefront - e-commerce API and back office

    Configuration priority (highest to lowest):
    1. Command-line options
    2. Environment variables
    3. Config file (--config, .storefrontrc, storefront.toml)
    4. Built-in defaults
    """
    if config:
        # Picked up by get_config() wherever the app loads it
        os.environ["STOREFRONT_CONFIG"] = str(Path(config).resolve())
        get_config.cache_clear()

    try:
        loaded = load_config()
    except ConfigError as e:
        console.print(f"[red]Config error: {e}[/red]")
        raise click.Abort()

    configure_logging(
        level=log_level or loaded.logging.level,
        json_output=(log_format or loaded.logging.format) == "json",
        log_file=loaded.logging.file,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = loaded


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    console.print(f"[bold cyan]Storefront API[/bold cyan] on http://{host}:{port}")
    uvicorn.run("storefront.api.app:app", host=host, port=port, reload=reload)


@cli.command()
def seed() -> None:
    """Create sample categories and products.

    Products that already exist (by title) are left alone.
    """
    from storefront.cli.seed import SEED_CATEGORIES, seed_catalog

    with LogContext(command="seed"):
        result = asyncio.run(_run_in_session(seed_catalog))

    table = Table(title="Seeded Products", box=box.ROUNDED)
    table.add_column("Product", style="cyan")
    table.add_column("Result")
    for title in result.created:
        table.add_row(title, "[green]created[/green]")
    for title in result.skipped:
        table.add_row(title, "[dim]exists[/dim]")
    console.print(table)

    console.print(
        f"[green]✓[/green] {len(SEED_CATEGORIES)} categories, "
        f"{len(result.created)} products created, {len(result.skipped)} skipped"
    )


@cli.command("promote-admin")
@click.argument("email")
def promote_admin(email: str) -> None:
    """Give the user with EMAIL the ADMIN role."""

    async def operation(db: AsyncSession) -> Optional[User]:
        return await promote_user(db, email)

    with LogContext(command="promote-admin"):
        user = asyncio.run(_run_in_session(operation))
    if user is None:
        console.print(f"[red]No user with email {email}[/red]")
        raise SystemExit(1)

    console.print(f"[green]✓ {user.email} is now an admin[/green]")


@cli.command("cleanup-banners")
@click.option("--dry-run", is_flag=True, help="List files without deleting them")
def cleanup_banners(dry_run: bool) -> None:
    """Delete stored banner images that no banner uses."""
    from storefront.api.shared.services.storage import get_storage

    async def referenced_urls(db: AsyncSession) -> list[str]:
        result = await db.execute(select(Banner.image_url))
        return list(result.scalars().all())

    storage = get_storage()
    referenced = asyncio.run(_run_in_session(referenced_urls))
    orphans = find_orphaned_files(storage.list_urls(BANNER_FOLDER), referenced)

    if not orphans:
        console.print("[green]✓ No orphaned banner images[/green]")
        return

    for url in orphans:
        if dry_run:
            console.print(f"[yellow]would delete[/yellow] {url}")
            continue
        storage.delete(url)
        console.print(f"[red]deleted[/red] {url}")

    verb = "found" if dry_run else "deleted"
    console.print(f"\n{len(orphans)} orphaned banner image(s) {verb}")


@cli.command("init-config")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["yaml", "toml"], case_sensitive=False),
    default="yaml",
    help="Config file format",
)
@click.option("--output", "-o", type=click.Path(), default=None, help="Output file path")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(format: str, output: str | None, force: bool) -> None:
    """Write a configuration file template.

    Examples:
        storefront init-config                 # Create .storefrontrc (YAML)
        storefront init-config -f toml         # Create storefront.toml
    """
    if output:
        output_path = Path(output)
    else:
        output_path = Path("storefront.toml" if format == "toml" else ".storefrontrc")

    if output_path.exists() and not force:
        console.print(f"[yellow]Config file already exists: {output_path}[/yellow]")
        console.print("[dim]Use --force to overwrite[/dim]")
        raise click.Abort()

    output_path.write_text(generate_config_template(format=format))
    console.print(f"[green]✓ Created config file: {output_path}[/green]")
    console.print("[dim]Environment variables can be referenced using ${VAR_NAME} syntax.[/dim]")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

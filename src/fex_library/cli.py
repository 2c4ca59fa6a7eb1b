"""
fex-library command line.

Usage:
    fex-library list
    fex-library install --destination ~/fex
    fex-library install --catalog my-list.toml --destination ~/fex --use-version-check
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from . import __version__
from .catalog import Catalog
from .default_list import default_catalog
from .exceptions import CatalogError
from .fetch import HttpFetcher
from .installer import build_library
from .outcome import OutcomeStatus
from .outcome import ResolutionOutcome
from .settings import LibrarySettings


def _load_catalog(catalog_path: str | None) -> Catalog:
    if catalog_path is None:
        return default_catalog()
    return Catalog.from_toml(Path(catalog_path))


@click.group()
@click.version_option(version=__version__, prog_name="fex-library")
@click.option("--verbose", "-v", is_flag=True, help="Enable progress logging.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(verbose: bool, debug: bool) -> None:
    """Download a list of File Exchange entries into a local library."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


@cli.command("list")
@click.option("--catalog", "catalog_path", type=click.Path(dir_okay=False), default=None, help="Catalog TOML file.")
def list_entries(catalog_path: str | None) -> None:
    """Show the catalog entries that would be installed."""
    try:
        catalog = _load_catalog(catalog_path)
    except CatalogError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(2)

    for entry in catalog:
        repo = f"  ({entry.alternate_repo})" if entry.alternate_repo else ""
        click.echo(f"{entry.name:<24}{entry.identifier:>8}{repo}")


@cli.command()
@click.option("--catalog", "catalog_path", type=click.Path(dir_okay=False), default=None, help="Catalog TOML file.")
@click.option(
    "--destination",
    "-d",
    type=click.Path(file_okay=False),
    required=True,
    help="Library root; one subdirectory is created per entry.",
)
@click.option("--use-version-check", is_flag=True, help="Skip entries whose installed version is current.")
@click.option("--no-shortcut", is_flag=True, help="Do not write '_<name> on FEX.url' bookmark files.")
@click.option("--silent", is_flag=True, help="Only report failed downloads.")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds (default: none).")
def install(
    catalog_path: str | None,
    destination: str,
    use_version_check: bool,
    no_shortcut: bool,
    silent: bool,
    timeout: float | None,
) -> None:
    """Install every catalog entry into DESTINATION."""
    try:
        catalog = _load_catalog(catalog_path)
    except CatalogError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(2)

    settings = LibrarySettings(
        make_shortcut=not no_shortcut,
        use_version_check=use_version_check,
        timeout=timeout,
    )

    def report(outcome: ResolutionOutcome) -> None:
        if outcome.status is OutcomeStatus.FAILED:
            click.secho(outcome.describe(), fg="red")
            click.echo(f"  {outcome.manual_pointer()}")
        elif not silent:
            click.echo(outcome.describe())

    async def run():
        async with HttpFetcher(timeout=settings.timeout) as fetcher:
            return await build_library(
                catalog,
                Path(destination).expanduser(),
                fetcher,
                settings=settings,
                on_outcome=report,
            )

    result = asyncio.run(run())

    if not silent:
        click.echo(f"\n{len(result.installed)} installed or current, {len(result.failed)} failed")
    if not result.ok:
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

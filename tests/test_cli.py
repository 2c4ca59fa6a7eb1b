"""Tests for the fex-library command line."""

import pytest
from click.testing import CliRunner
from fex_library import cli as cli_module
from fex_library.cli import cli

from .fakes import ARCHIVE
from .fakes import PAGE
from .fakes import MockFetcher
from .fakes import fex_page
from .fakes import make_zip

CATALOG = """
[[entry]]
name = "widget"
identifier = 12345

[[entry]]
name = "ghost"
identifier = 99999
"""


@pytest.fixture
def fetcher(monkeypatch):
    fake = MockFetcher(
        pages={PAGE.format(12345): fex_page(12345, "7")},
        artifacts={ARCHIVE.format(12345, 7): make_zip({"widget.m": "%"})},
    )
    monkeypatch.setattr(cli_module, "HttpFetcher", lambda timeout=None: fake)
    return fake


def test_list_default_catalog():
    result = CliRunner().invoke(cli, ["list"])

    assert result.exit_code == 0
    assert "export_fig" in result.output
    assert "altmany/export_fig" in result.output


def test_list_from_file(tmp_path):
    catalog = tmp_path / "catalog.toml"
    catalog.write_text(CATALOG)

    result = CliRunner().invoke(cli, ["list", "--catalog", str(catalog)])

    assert result.exit_code == 0
    assert "widget" in result.output
    assert "99999" in result.output
    assert "export_fig" not in result.output


def test_install_reports_outcomes(tmp_path, fetcher):
    catalog = tmp_path / "catalog.toml"
    catalog.write_text(CATALOG)
    destination = tmp_path / "fex"

    result = CliRunner().invoke(cli, ["install", "--catalog", str(catalog), "--destination", str(destination)])

    assert result.exit_code == 1  # ghost failed
    assert "installed (version 7): widget" in result.output
    assert "something went wrong (unknown identifier): ghost" in result.output
    assert PAGE.format(99999) in result.output
    assert (destination / "widget" / "widget.m").exists()
    assert (destination / "widget" / "_widget on FEX.url").exists()


def test_install_silent_only_reports_failures(tmp_path, fetcher):
    catalog = tmp_path / "catalog.toml"
    catalog.write_text(CATALOG)

    result = CliRunner().invoke(
        cli,
        ["install", "--catalog", str(catalog), "-d", str(tmp_path / "fex"), "--silent", "--no-shortcut"],
    )

    assert "widget" not in result.output
    assert "ghost" in result.output
    assert not (tmp_path / "fex" / "widget" / "_widget on FEX.url").exists()


def test_install_all_ok_exits_zero(tmp_path, fetcher):
    catalog = tmp_path / "catalog.toml"
    catalog.write_text('[[entry]]\nname = "widget"\nidentifier = 12345\n')

    result = CliRunner().invoke(cli, ["install", "--catalog", str(catalog), "-d", str(tmp_path / "fex")])

    assert result.exit_code == 0
    assert "1 installed or current, 0 failed" in result.output


def test_install_invalid_catalog(tmp_path, fetcher):
    catalog = tmp_path / "catalog.toml"
    catalog.write_text('[[entry]]\nname = "widget"\nidentifier = -1\n')

    result = CliRunner().invoke(cli, ["install", "--catalog", str(catalog), "-d", str(tmp_path / "fex")])

    assert result.exit_code == 2
    assert fetcher.page_requests == []

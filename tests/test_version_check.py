"""Tests for the lock-backed version checker."""

from pathlib import Path

import pytest
from fex_library import FetchError
from fex_library import InstallLock
from fex_library import LockVersionChecker
from fex_library import VersionCheckerProtocol
from fex_library import VersionCheckStatus

from .fakes import PAGE
from .fakes import MockFetcher
from .fakes import fex_page
from .fakes import installed_outcome


def installed(destination: Path, name: str, identifier: int, version: str | None) -> InstallLock:
    (destination / name).mkdir()
    (destination / name / f"{name}.m").write_text("%")
    lock = InstallLock(destination / "fex-library.lock")
    lock.record(installed_outcome(name, identifier, version), destination / name)
    return lock


def test_is_a_version_checker(tmp_path):
    checker = LockVersionChecker(InstallLock(tmp_path / "l"), MockFetcher(), tmp_path)
    assert isinstance(checker, VersionCheckerProtocol)


@pytest.mark.asyncio
async def test_not_recorded_is_unknown(tmp_path):
    fetcher = MockFetcher()
    checker = LockVersionChecker(InstallLock(tmp_path / "l"), fetcher, tmp_path)

    result = await checker.check("widget", 12345)

    assert result.status is VersionCheckStatus.UNKNOWN
    assert fetcher.page_requests == []


@pytest.mark.asyncio
async def test_matching_version_is_up_to_date(tmp_path):
    lock = installed(tmp_path, "widget", 12345, "7")
    fetcher = MockFetcher(pages={PAGE.format(12345): fex_page(12345, "7")})

    result = await LockVersionChecker(lock, fetcher, tmp_path).check("widget", 12345)

    assert result.status is VersionCheckStatus.UP_TO_DATE
    assert result.version_label == "7"
    assert result.is_current


@pytest.mark.asyncio
async def test_newer_version_is_unknown(tmp_path):
    lock = installed(tmp_path, "widget", 12345, "7")
    fetcher = MockFetcher(pages={PAGE.format(12345): fex_page(12345, "8")})

    result = await LockVersionChecker(lock, fetcher, tmp_path).check("widget", 12345)

    assert result.status is VersionCheckStatus.UNKNOWN
    assert not result.is_current


@pytest.mark.asyncio
async def test_unreadable_page_is_error(tmp_path):
    lock = installed(tmp_path, "widget", 12345, "7")
    fetcher = MockFetcher(pages={PAGE.format(12345): FetchError("timeout")})

    result = await LockVersionChecker(lock, fetcher, tmp_path).check("widget", 12345)

    assert result.status is VersionCheckStatus.ERROR


@pytest.mark.asyncio
async def test_emptied_directory_is_unknown(tmp_path):
    lock = installed(tmp_path, "widget", 12345, "7")
    (tmp_path / "widget" / "widget.m").unlink()
    (tmp_path / "widget" / "_widget on FEX.url").write_text("[InternetShortcut]")
    fetcher = MockFetcher(pages={PAGE.format(12345): fex_page(12345, "7")})

    result = await LockVersionChecker(lock, fetcher, tmp_path).check("widget", 12345)

    assert result.status is VersionCheckStatus.UNKNOWN
    assert fetcher.page_requests == []


@pytest.mark.asyncio
async def test_repository_install_without_version_is_unknown(tmp_path):
    lock = installed(tmp_path, "tool", 5, None)

    result = await LockVersionChecker(lock, MockFetcher(), tmp_path).check("tool", 5)

    assert result.status is VersionCheckStatus.UNKNOWN


@pytest.mark.asyncio
async def test_identifier_change_is_unknown(tmp_path):
    lock = installed(tmp_path, "widget", 12345, "7")

    result = await LockVersionChecker(lock, MockFetcher(), tmp_path).check("widget", 54321)

    assert result.status is VersionCheckStatus.UNKNOWN

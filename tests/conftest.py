"""Shared test fixtures for hoard-engine."""

from pathlib import Path

import pytest

from hoard_engine.environment.host import HostInfo

FIXTURES = Path(__file__).parent / "fixtures"

TEST_VARS = (
    "HOARD_TEST_WORK",
    "HOARD_TEST_HOME",
    "HOARD_TEST_EDITOR",
    "HOARD_TEST_FOO",
    "HOARD_TEST_BAZ",
    "HOARD_TEST_STEAM",
    "HOARD_TEST_FLATPAK",
)


def _host(os_name="linux", hostname="testbox", search_path="", home=None, **environ):
    return HostInfo(
        os_name=os_name,
        hostname=hostname,
        environ=environ,
        search_path=search_path,
        home=home or Path("/home/tester"),
    )


@pytest.fixture
def make_host():
    """Factory for HostInfo snapshots; keyword extras become variables."""
    return _host


@pytest.fixture
def host():
    return _host()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the fixture configs look at."""
    for var in TEST_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def minimal_config():
    return FIXTURES / "config-minimal.yaml"

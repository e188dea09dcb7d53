"""Shared fixtures for procinspect tests."""

import pytest

from fakes import HOST, FakeProc, FakeRunner


@pytest.fixture
def fake_proc(tmp_path):
    """An empty fake /proc tree."""
    return FakeProc(tmp_path / "proc")


@pytest.fixture
def host():
    """Fixed synthetic host environment: 100 ticks/s, 4 KiB pages."""
    return HOST


@pytest.fixture
def runner():
    """A command runner where every command is missing."""
    return FakeRunner()

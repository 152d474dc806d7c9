"""Shared fixtures for the uadevice test suite."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_rule_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point XDG directories at an empty temp tree and clear the rules override."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("UADEVICE_REGEXES", raising=False)
    return tmp_path

"""Global test fixtures and configuration."""

from __future__ import annotations

import os
import shutil
from typing import TYPE_CHECKING

import pytest

from cactus.shared import SESSION
from cactus.utils.config_loader import ConfigLoader

if TYPE_CHECKING:
	from collections.abc import Iterator

# Tests creating real repositories need a git executable
skip_git_tests = pytest.mark.skipif(
	shutil.which("git") is None or os.environ.get("SKIP_GIT_TESTS") == "1",
	reason="git is not available or SKIP_GIT_TESTS=1",
)


@pytest.fixture(autouse=True)
def git_environment(monkeypatch: pytest.MonkeyPatch) -> None:
	"""Give git an identity and allow local submodule clones, ignoring user config."""
	monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
	monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
	monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
	monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
	monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
	monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
	monkeypatch.setenv("GIT_CONFIG_COUNT", "1")
	monkeypatch.setenv("GIT_CONFIG_KEY_0", "protocol.file.allow")
	monkeypatch.setenv("GIT_CONFIG_VALUE_0", "always")


@pytest.fixture(autouse=True)
def fresh_session(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
	"""Start every test without shared project trees, loaded config or overrides."""
	for name in list(os.environ):
		if name.startswith("CACTUS_") or name.endswith("_ASSETS_HOME"):
			monkeypatch.delenv(name)
	SESSION.clear()
	ConfigLoader._instance = None  # noqa: SLF001
	yield
	SESSION.clear()
	ConfigLoader._instance = None  # noqa: SLF001

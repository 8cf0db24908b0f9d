"""Shared pytest fixtures for the formidable-scaffold test suite.

Provides reusable fixtures for:
- Skeleton zip archives shaped like the upstream GitHub download
- Extracted application trees with the files the pipeline rewrites
- Onboarding answer presets
- Mock subprocess helpers
"""

from __future__ import annotations

import json
import textwrap
import zipfile
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from formidable_scaffold.config import ArchiveConfig, Config
from formidable_scaffold.models import OnboardingAnswers


# ---------------------------------------------------------------------------
# Skeleton contents
# ---------------------------------------------------------------------------

ENV_EXAMPLE = textwrap.dedent("""\
    APP_NAME=Formidable
    APP_KEY=
    CLIENT_URL=http://localhost:8000
    DB_CONNECTION=sqlite
    DB_HOST=127.0.0.1
""")

SESSION_IMBA = textwrap.dedent("""\
    export default {
      driver: 'memory'
    \tsame_site: helpers.env 'SESSION_SAME_SITE', 'none'
    }
""")

DATABASE_IMBA = textwrap.dedent("""\
    export default {
    \tuseNullAsDefault: null
    }
""")

PACKAGE_JSON = {"name": "formidablejs", "version": "0.0.0", "private": True}

SKELETON_FILES: dict[str, str] = {
    ".env.example": ENV_EXAMPLE,
    "package.json": json.dumps(PACKAGE_JSON, indent=2),
    "package-lock.json": "{}",
    "config/session.imba": SESSION_IMBA,
    "config/database.imba": DATABASE_IMBA,
    "app/Http/Controllers/Controller.imba": "export class Controller\n",
}

ARCHIVE_ROOT = "formidablejs-main"


def build_skeleton_zip(
    path: Path,
    files: dict[str, str] | None = None,
    root: str = ARCHIVE_ROOT,
) -> Path:
    """Write a zip whose entries all live under a single *root* folder,
    with explicit directory entries like GitHub's archive endpoint."""
    files = SKELETON_FILES if files is None else files
    directories: set[str] = {f"{root}/"}
    for name in files:
        parts = name.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            directories.add(f"{root}/{'/'.join(parts[:depth])}/")

    with zipfile.ZipFile(path, "w") as archive:
        for directory in sorted(directories):
            archive.writestr(directory, "")
        for name, content in files.items():
            archive.writestr(f"{root}/{name}", content)
    return path


@pytest.fixture
def skeleton_zip(tmp_path: Path) -> Path:
    """A skeleton archive on disk."""
    return build_skeleton_zip(tmp_path / "skeleton.zip")


@pytest.fixture
def skeleton_bytes(tmp_path: Path) -> bytes:
    """Raw bytes of a skeleton archive, for serving over a mock transport."""
    return build_skeleton_zip(tmp_path / "served.zip").read_bytes()


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """An already-extracted application tree (lock file excluded)."""
    root = tmp_path / "my-app"
    for name, content in SKELETON_FILES.items():
        if name == "package-lock.json":
            continue
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory for a Config whose download path lives under tmp_path."""

    def factory(**overrides) -> Config:
        archive = ArchiveConfig(
            url="https://example.test/skeleton.zip",
            download_path=tmp_path / "download" / "skeleton.zip",
        )
        return Config(archive=archive, **overrides)

    return factory


# ---------------------------------------------------------------------------
# Onboarding presets
# ---------------------------------------------------------------------------

@pytest.fixture
def api_answers() -> OnboardingAnswers:
    return OnboardingAnswers(type="api", database="pg", manager="npm")


@pytest.fixture
def react_answers() -> OnboardingAnswers:
    return OnboardingAnswers(type="full-stack", stack="react", database="skip", manager="npm")


@pytest.fixture
def imba_spa_answers() -> OnboardingAnswers:
    return OnboardingAnswers(
        type="full-stack", stack="imba", scaffolding="spa", database="sqlite3", manager="yarn"
    )


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory

"""Formidable scaffolder configuration.

Centralised, typed configuration for the scaffolder.  All settings use
Pydantic v2 models so they are validated at construction time and can be
overridden from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


DEFAULT_ARCHIVE_URL = "https://github.com/formidablejs/formidablejs/archive/refs/heads/main.zip"


def _default_download_path() -> Path:
    return Path(tempfile.gettempdir()) / "formidablejs-master.zip"


class ArchiveConfig(BaseModel):
    """Where the application skeleton comes from and how it is unpacked."""

    url: str = Field(default=DEFAULT_ARCHIVE_URL)
    download_path: Path = Field(default_factory=_default_download_path)
    excluded_files: list[str] = Field(
        default_factory=lambda: ["package-lock.json"],
        description="Base names never written during extraction",
    )
    timeout: int = Field(default=60, ge=1, description="Download timeout in seconds")


class ToolsConfig(BaseModel):
    """External tools spawned by the post-processing pipeline."""

    default_manager: str = Field(default="npm")
    craftsman: str = Field(
        default="./node_modules/.bin/craftsman",
        description="Project-local CLI, resolved relative to the output directory",
    )
    command_timeout: int = Field(
        default=1800, ge=1, description="Per-command timeout in seconds"
    )
    install_flags: list[str] = Field(default_factory=lambda: ["--legacy-peer-deps"])


class Config(BaseModel):
    """Global scaffolder configuration.

    Instances are typically created once by the CLI entry point and then
    passed to ``Scaffold`` and ``PostProcessor``.
    """

    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    poll_interval: float = Field(
        default=0.1, gt=0, description="Completion waiter polling interval in seconds"
    )
    wait_timeout: Optional[float] = Field(
        default=None, gt=0, description="Upper bound on waiting for the scaffold; None waits forever"
    )
    stubs_dir: Optional[Path] = Field(
        default=None, description="Root of publishable, hook and modifier file sets"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            FORMIDABLE_ARCHIVE_URL, FORMIDABLE_ARCHIVE_TIMEOUT,
            FORMIDABLE_DEFAULT_MANAGER, FORMIDABLE_COMMAND_TIMEOUT,
            FORMIDABLE_POLL_INTERVAL, FORMIDABLE_WAIT_TIMEOUT,
            FORMIDABLE_STUBS_DIR.
        """
        archive_kwargs: dict[str, Any] = {}
        if os.environ.get("FORMIDABLE_ARCHIVE_URL"):
            archive_kwargs["url"] = os.environ["FORMIDABLE_ARCHIVE_URL"]
        if os.environ.get("FORMIDABLE_ARCHIVE_TIMEOUT"):
            archive_kwargs["timeout"] = int(os.environ["FORMIDABLE_ARCHIVE_TIMEOUT"])

        tools_kwargs: dict[str, Any] = {}
        if os.environ.get("FORMIDABLE_DEFAULT_MANAGER"):
            tools_kwargs["default_manager"] = os.environ["FORMIDABLE_DEFAULT_MANAGER"]
        if os.environ.get("FORMIDABLE_COMMAND_TIMEOUT"):
            tools_kwargs["command_timeout"] = int(os.environ["FORMIDABLE_COMMAND_TIMEOUT"])

        kwargs: dict[str, Any] = {}
        if os.environ.get("FORMIDABLE_POLL_INTERVAL"):
            kwargs["poll_interval"] = float(os.environ["FORMIDABLE_POLL_INTERVAL"])
        if os.environ.get("FORMIDABLE_WAIT_TIMEOUT"):
            kwargs["wait_timeout"] = float(os.environ["FORMIDABLE_WAIT_TIMEOUT"])
        if os.environ.get("FORMIDABLE_STUBS_DIR"):
            kwargs["stubs_dir"] = Path(os.environ["FORMIDABLE_STUBS_DIR"])

        return cls(
            archive=ArchiveConfig(**archive_kwargs),
            tools=ToolsConfig(**tools_kwargs),
            **kwargs,
        )

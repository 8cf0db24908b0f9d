"""Pydantic v2 models shared across the scaffolder.

Defines the onboarding answers that drive every conditional step of the
post-processing pipeline, plus the result record produced by a finished
archive extraction.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class AppType(str, Enum):
    """Kind of application to create."""
    API = "api"
    FULL_STACK = "full-stack"


class Stack(str, Enum):
    """Frontend stack of a full-stack application."""
    IMBA = "imba"
    REACT = "react"
    VUE = "vue"


class ScaffoldingStyle(str, Enum):
    """Scaffolding flavour of an Imba full-stack application."""
    BLANK = "blank"
    SPA = "spa"


class Manager(str, Enum):
    """Supported package managers."""
    NPM = "npm"
    YARN = "yarn"


SKIP_DATABASE = "skip"

INERTIA_STACKS = (Stack.REACT, Stack.VUE)


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------

class OnboardingAnswers(BaseModel):
    """The user's resolved choices.

    Instances are frozen: onboarding builds the final record incrementally
    with ``model_copy(update=...)``.  ``None`` means the question has not
    been answered yet.
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[AppType] = Field(default=None, description="api or full-stack")
    stack: Optional[Stack] = Field(default=None, description="Only meaningful for full-stack")
    scaffolding: Optional[ScaffoldingStyle] = Field(
        default=None, description="Only meaningful for full-stack + imba"
    )
    database: Optional[str] = Field(
        default=None, description="Database driver package name, or 'skip'"
    )
    manager: Optional[Manager] = Field(default=None, description="npm or yarn")

    @property
    def is_full_stack(self) -> bool:
        return self.type == AppType.FULL_STACK

    @property
    def uses_inertia(self) -> bool:
        """True for a full-stack application on a React or Vue stack."""
        return self.is_full_stack and self.stack in INERTIA_STACKS

    @property
    def is_imba_spa(self) -> bool:
        return (
            self.is_full_stack
            and self.stack == Stack.IMBA
            and self.scaffolding == ScaffoldingStyle.SPA
        )

    @property
    def has_database(self) -> bool:
        """True when a concrete driver was chosen (neither unset nor skipped)."""
        return self.database is not None and self.database != SKIP_DATABASE


# ---------------------------------------------------------------------------
# Extraction result
# ---------------------------------------------------------------------------

class ExtractionOutcome(BaseModel):
    """What a successful fetch + extract wrote into the output directory."""

    output_dir: Path
    files_written: int = Field(default=0, ge=0)
    directories_created: int = Field(default=0, ge=0)
    skipped: list[str] = Field(
        default_factory=list, description="Relative paths excluded from extraction"
    )

"""Publishables, modifiers and hooks applied during post-processing.

Each collaborator is a callable ``(output_dir) -> None`` registered under a
fixed name.  ``CollaboratorRegistry.from_directory`` builds them from a stubs
tree laid out as::

    <stubs>/publishables/<name>/...   copied into the application
    <stubs>/hooks/<name>/...          copied into the application
    <stubs>/modifiers/<name>.json     literal line rewrites

A modifier file holds a JSON list of ``{"file", "match", "replace"}`` rules.
Applying a name with nothing registered prints a warning and does nothing.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from formidable_scaffold.line_mutator import replace_exact, update_line
from formidable_scaffold.utils import print_warning

Collaborator = Callable[[Path], None]

# Publishables
AUTH_MAIL = "auth-mail"
MAIL = "mail"
WEB = "web"
SPA = "spa"
INERTIA = "inertia"

# Modifiers
PRETTY_ERRORS = "pretty-errors"
INERTIA_RESOLVER = "inertia-resolver"
INERTIA_CONFIG = "inertia-config"

# Hooks
REACT = "react"
VUE = "vue"


class CollaboratorError(Exception):
    """Raised when a stubs tree holds a file that cannot be loaded."""


class CollaboratorKind(str, Enum):
    PUBLISHABLE = "publishable"
    MODIFIER = "modifier"
    HOOK = "hook"


class ModifierRule(BaseModel):
    """Replace a line of *file* whose trimmed text equals *match*."""

    file: str = Field(..., description="Path relative to the application root")
    match: str
    replace: str


_RULES = TypeAdapter(list[ModifierRule])


class FileSetPublisher:
    """Copies a directory tree into the application, overwriting files."""

    def __init__(self, source: str | Path) -> None:
        self.source = Path(source)

    def __call__(self, output_dir: Path) -> None:
        shutil.copytree(self.source, output_dir, dirs_exist_ok=True)

    def __repr__(self) -> str:
        return f"FileSetPublisher({str(self.source)!r})"


class LiteralModifier:
    """Applies ``ModifierRule``s through the line mutator."""

    def __init__(self, rules: list[ModifierRule]) -> None:
        self.rules = rules

    @classmethod
    def from_file(cls, path: str | Path) -> "LiteralModifier":
        """Load rules from a JSON file.

        Raises:
            CollaboratorError: If the file is unreadable or not a valid rule list.
        """
        try:
            rules = _RULES.validate_json(Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            raise CollaboratorError(f"Invalid modifier file {path}: {exc}") from exc
        return cls(rules)

    def __call__(self, output_dir: Path) -> None:
        for rule in self.rules:
            update_line(output_dir / rule.file, replace_exact(rule.match, rule.replace))


class CollaboratorRegistry:
    """Name -> collaborator lookup for each kind."""

    def __init__(self) -> None:
        self._entries: dict[CollaboratorKind, dict[str, Collaborator]] = {
            kind: {} for kind in CollaboratorKind
        }

    def register(self, kind: CollaboratorKind, name: str, collaborator: Collaborator) -> None:
        self._entries[kind][name] = collaborator

    def get(self, kind: CollaboratorKind, name: str) -> Collaborator | None:
        return self._entries[kind].get(name)

    def names(self, kind: CollaboratorKind) -> list[str]:
        return sorted(self._entries[kind])

    def apply(self, kind: CollaboratorKind, name: str, output_dir: Path) -> bool:
        """Run the collaborator registered as *name*.

        Returns:
            ``True`` if one was registered and ran, ``False`` otherwise.
        """
        collaborator = self.get(kind, name)
        if collaborator is None:
            print_warning(f"No {kind.value} named '{name}' is registered; skipping.")
            return False
        collaborator(output_dir)
        return True

    @classmethod
    def from_directory(cls, stubs_dir: str | Path | None) -> "CollaboratorRegistry":
        """Build a registry from a stubs tree.  ``None`` yields an empty one.

        Raises:
            CollaboratorError: If a modifier file cannot be loaded.
        """
        registry = cls()
        if stubs_dir is None:
            return registry

        root = Path(stubs_dir)
        for kind, folder in (
            (CollaboratorKind.PUBLISHABLE, "publishables"),
            (CollaboratorKind.HOOK, "hooks"),
        ):
            base = root / folder
            if base.is_dir():
                for entry in sorted(base.iterdir()):
                    if entry.is_dir():
                        registry.register(kind, entry.name, FileSetPublisher(entry))

        modifiers = root / "modifiers"
        if modifiers.is_dir():
            for entry in sorted(modifiers.glob("*.json")):
                registry.register(
                    CollaboratorKind.MODIFIER, entry.stem, LiteralModifier.from_file(entry)
                )

        return registry

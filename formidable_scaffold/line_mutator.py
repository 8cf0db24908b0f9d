"""Line-level text mutation.

Rewrites configuration files one line at a time without parsing them.  The
transform only ever sees the text of the current line; line separators are
kept exactly as found, so a transform that matches nothing leaves the file
byte-identical.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

LineTransform = Callable[[str], str]

_SEPARATOR = re.compile(r"(\r\n|\n|\r)")


def update_line(path: str | Path, transform: LineTransform) -> int:
    """Apply *transform* to every line of *path* and write the result back.

    Args:
        path: File to rewrite in place.
        transform: ``str -> str`` applied to each line's text, without its
            separator.

    Returns:
        The number of lines the transform changed.

    Raises:
        FileNotFoundError: If *path* does not exist.
        OSError: On any other read or write failure.
    """
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8", newline="") as fh:
        content = fh.read()

    # Even indices hold line text, odd indices the separators between them.
    parts = _SEPARATOR.split(content)
    changed = 0
    for index in range(0, len(parts), 2):
        updated = transform(parts[index])
        if updated != parts[index]:
            parts[index] = updated
            changed += 1

    if changed:
        with file_path.open("w", encoding="utf-8", newline="") as fh:
            fh.write("".join(parts))

    return changed


def replace_exact(match: str, replacement: str) -> LineTransform:
    """Build a transform that swaps a line whose trimmed text equals *match*.

    Lines that differ from *match* in anything but surrounding whitespace are
    returned untouched.
    """

    def _transform(line: str) -> str:
        if line.strip() == match:
            return replacement
        return line

    return _transform


def replace_first_prefixed(prefix: str, replacement: str) -> LineTransform:
    """Build a transform that swaps the first line starting with *prefix*.

    The returned callable remembers whether it has fired, so build a fresh
    one for every file.
    """
    fired = False

    def _transform(line: str) -> str:
        nonlocal fired
        if not fired and line.startswith(prefix):
            fired = True
            return replacement
        return line

    return _transform

"""Unit tests for the line mutator (formidable_scaffold.line_mutator).

Tests cover:
- update_line (rewrite, no-op, idempotence, separators, missing file)
- replace_exact (trimmed exact match only)
- replace_first_prefixed (first match only)
"""

from __future__ import annotations

from pathlib import Path

import pytest

from formidable_scaffold.line_mutator import (
    replace_exact,
    replace_first_prefixed,
    update_line,
)


def _write(path: Path, data: bytes) -> Path:
    path.write_bytes(data)
    return path


# ---------------------------------------------------------------------------
# update_line
# ---------------------------------------------------------------------------


class TestUpdateLine:
    @pytest.mark.unit
    def test_rewrites_matching_line(self, tmp_path: Path):
        path = _write(tmp_path / ".env", b"A=1\nB=2\nC=3\n")
        changed = update_line(path, lambda line: "B=9" if line == "B=2" else line)
        assert changed == 1
        assert path.read_bytes() == b"A=1\nB=9\nC=3\n"

    @pytest.mark.unit
    def test_no_match_leaves_file_byte_identical(self, tmp_path: Path):
        original = b"first\r\nsecond\n\nthird"
        path = _write(tmp_path / "mixed.txt", original)
        changed = update_line(path, lambda line: line)
        assert changed == 0
        assert path.read_bytes() == original

    @pytest.mark.unit
    def test_preserves_crlf_separators(self, tmp_path: Path):
        path = _write(tmp_path / "win.env", b"A=1\r\nB=2\r\n")
        update_line(path, lambda line: line.lower())
        assert path.read_bytes() == b"a=1\r\nb=2\r\n"

    @pytest.mark.unit
    def test_preserves_missing_trailing_newline(self, tmp_path: Path):
        path = _write(tmp_path / "f.txt", b"x\ny")
        update_line(path, lambda line: line.upper())
        assert path.read_bytes() == b"X\nY"

    @pytest.mark.unit
    def test_preserves_line_count_and_order(self, tmp_path: Path):
        lines = [f"line-{i}" for i in range(20)]
        path = _write(tmp_path / "f.txt", ("\n".join(lines) + "\n").encode())
        update_line(path, lambda line: "HIT" if line == "line-7" else line)
        result = path.read_text().split("\n")[:-1]
        assert len(result) == 20
        assert result[7] == "HIT"
        assert [l for i, l in enumerate(result) if i != 7] == [l for i, l in enumerate(lines) if i != 7]

    @pytest.mark.unit
    def test_idempotent_for_self_disabling_transform(self, tmp_path: Path):
        path = _write(tmp_path / ".env", b"CLIENT_URL=http://localhost:8000\nX=1\n")
        transform = replace_exact("CLIENT_URL=http://localhost:8000", "# CLIENT_URL=http://localhost:8000")
        update_line(path, transform)
        once = path.read_bytes()
        assert update_line(path, transform) == 0
        assert path.read_bytes() == once

    @pytest.mark.unit
    def test_transform_sees_line_without_separator(self, tmp_path: Path):
        path = _write(tmp_path / "f.txt", b"a\r\nb\n")
        seen: list[str] = []
        update_line(path, lambda line: seen.append(line) or line)
        assert seen == ["a", "b", ""]

    @pytest.mark.unit
    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            update_line(tmp_path / "nope.env", lambda line: line)

    @pytest.mark.unit
    def test_accepts_string_path(self, tmp_path: Path):
        path = _write(tmp_path / "f.txt", b"a\n")
        update_line(str(path), lambda line: "b" if line == "a" else line)
        assert path.read_text() == "b\n"


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


class TestReplaceExact:
    @pytest.mark.unit
    def test_matches_trimmed_line(self):
        transform = replace_exact("driver: 'memory'", "  driver: 'file'")
        assert transform("    driver: 'memory'  ") == "  driver: 'file'"

    @pytest.mark.unit
    def test_ignores_differently_formatted_line(self):
        transform = replace_exact("CLIENT_URL=http://localhost:8000", "# CLIENT_URL=http://localhost:8000")
        assert transform("CLIENT_URL = http://localhost:8000") == "CLIENT_URL = http://localhost:8000"
        assert transform("CLIENT_URL=\"http://localhost:8000\"") == "CLIENT_URL=\"http://localhost:8000\""


class TestReplaceFirstPrefixed:
    @pytest.mark.unit
    def test_only_first_match_replaced(self, tmp_path: Path):
        path = _write(tmp_path / ".env", b"DB_CONNECTION=sqlite\nDB_CONNECTION=mysql\n")
        update_line(path, replace_first_prefixed("DB_CONNECTION", "DB_CONNECTION=pgsql"))
        assert path.read_text() == "DB_CONNECTION=pgsql\nDB_CONNECTION=mysql\n"

    @pytest.mark.unit
    def test_non_matching_lines_untouched(self):
        transform = replace_first_prefixed("DB_CONNECTION", "DB_CONNECTION=pgsql")
        assert transform("DB_HOST=127.0.0.1") == "DB_HOST=127.0.0.1"
        assert transform(" DB_CONNECTION=x") == " DB_CONNECTION=x"

"""Download and unpack the application skeleton.

``fetch_archive`` streams a remote zip to disk and reports success as a
boolean.  ``extract_archive`` unpacks it into the output directory, dropping
the archive's single top-level folder and skipping excluded files.  File
entries are written concurrently in worker threads; failures are collected
per entry and raised together once every entry has been attempted.
"""

from __future__ import annotations

import asyncio
import shutil
import zipfile
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

import httpx

from formidable_scaffold.models import ExtractionOutcome
from formidable_scaffold.utils import print_error

CHUNK_SIZE = 64 * 1024


class ExtractionError(Exception):
    """Raised when the archive cannot be opened or any entry fails to write.

    Attributes:
        errors: ``(relative_path, message)`` for each failed entry.
    """

    def __init__(self, message: str, errors: list[tuple[str, str]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


async def fetch_archive(
    url: str,
    destination: str | Path,
    *,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Download *url* to *destination*, overwriting any existing file.

    A single attempt is made; there is no retry.

    Args:
        url: Remote archive location.  Redirects are followed.
        destination: Local file path.  Parent directories are created.
        timeout: Request timeout in seconds (ignored when *client* is given).
        client: Optional pre-configured client, closed by the caller.

    Returns:
        ``True`` once the file is fully written, ``False`` on any network or
        write failure.
    """
    target = Path(destination)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0))

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        async with client.stream("GET", url, follow_redirects=True) as response:
            response.raise_for_status()
            with target.open("wb") as fh:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    fh.write(chunk)
    except httpx.HTTPError as exc:
        print_error(f"Could not download {url}: {exc}")
        return False
    except OSError as exc:
        print_error(f"Could not write {target}: {exc}")
        return False
    finally:
        if owns_client:
            await client.aclose()

    return True


# ---------------------------------------------------------------------------
# Extract
# ---------------------------------------------------------------------------


def strip_root(entry_name: str) -> str:
    """Drop the first path segment of an archive entry name.

    Examples::

        strip_root("repo-main/config/app.json") -> "config/app.json"
        strip_root("repo-main/")                -> ""
    """
    segments = entry_name.split("/")[1:]
    return "/".join(segment for segment in segments if segment)


def _resolve_destination(output_dir: Path, relative: str) -> Path:
    destination = (output_dir / PurePosixPath(relative)).resolve()
    if destination != output_dir and output_dir not in destination.parents:
        raise ExtractionError(f"Archive entry escapes the output directory: {relative}")
    return destination


def _write_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    with archive.open(info) as source, destination.open("wb") as target:
        shutil.copyfileobj(source, target, CHUNK_SIZE)


async def _write_all(
    archive: zipfile.ZipFile,
    entries: Iterable[tuple[str, zipfile.ZipInfo, Path]],
) -> list[tuple[str, str]]:
    entries = list(entries)
    results = await asyncio.gather(
        *(asyncio.to_thread(_write_entry, archive, info, dest) for _, info, dest in entries),
        return_exceptions=True,
    )
    errors: list[tuple[str, str]] = []
    for (relative, _, _), result in zip(entries, results):
        if isinstance(result, Exception):
            print_error(f"Could not create {relative}: {result}")
            errors.append((relative, str(result)))
    return errors


async def extract_archive(
    archive_path: str | Path,
    output_dir: str | Path,
    excluded: Iterable[str] = ("package-lock.json",),
) -> ExtractionOutcome:
    """Unpack *archive_path* into *output_dir* without its top-level folder.

    Directory entries are created (idempotently) while the archive is
    enumerated.  File entries whose base name is in *excluded* are skipped;
    the rest are written concurrently.

    Returns:
        An ``ExtractionOutcome`` describing what was written.

    Raises:
        ExtractionError: If the archive is unreadable or any entry failed.
            ``errors`` lists every failed entry.
    """
    root = Path(output_dir).resolve()
    excluded_names = set(excluded)
    outcome = ExtractionOutcome(output_dir=root)

    try:
        archive = zipfile.ZipFile(archive_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ExtractionError(f"Could not open archive {archive_path}: {exc}") from exc

    with archive:
        root.mkdir(parents=True, exist_ok=True)
        pending: list[tuple[str, zipfile.ZipInfo, Path]] = []
        errors: list[tuple[str, str]] = []

        for info in archive.infolist():
            relative = strip_root(info.filename)
            if not relative:
                continue

            try:
                destination = _resolve_destination(root, relative)
            except ExtractionError as exc:
                print_error(str(exc))
                errors.append((relative, str(exc)))
                continue

            if info.is_dir():
                try:
                    destination.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    print_error(f"Could not create {relative}: {exc}")
                    errors.append((relative, str(exc)))
                    continue
                outcome.directories_created += 1
            elif PurePosixPath(relative).name in excluded_names:
                outcome.skipped.append(relative)
            else:
                pending.append((relative, info, destination))

        errors.extend(await _write_all(archive, pending))

    if errors:
        raise ExtractionError(
            f"{len(errors)} archive entr{'y' if len(errors) == 1 else 'ies'} could not be extracted",
            errors=errors,
        )

    outcome.files_written = len(pending)
    return outcome

"""Background acquisition of the application skeleton.

``Scaffold.make()`` marks the state busy and launches fetch + extract as an
asyncio task so the caller can keep onboarding the user.  ``Scaffold.wait()``
awaits that task and returns its single result: an ``ExtractionOutcome`` or
a raised ``FetchError`` / ``ExtractionError``.

Quick usage::

    scaffold = Scaffold("my-app", Path("my-app"), Config())
    scaffold.make()
    answers = await collect_answers(...)
    outcome = await scaffold.wait()
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from formidable_scaffold.archive import extract_archive, fetch_archive
from formidable_scaffold.config import Config
from formidable_scaffold.models import ExtractionOutcome
from formidable_scaffold.state import ScaffoldState, StateError
from formidable_scaffold.utils import wait_for_state


class FetchError(Exception):
    """Raised when the skeleton archive could not be downloaded."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Could not download application skeleton from {url}")


class Scaffold:
    """Fetches and unpacks the skeleton for one application.

    Attributes:
        app_name: Application name as given on the command line.
        output: Directory the application is created in.
        config: Scaffolder configuration.
        state: Observable busy/success state.
    """

    def __init__(self, app_name: str, output: str | Path, config: Config | None = None) -> None:
        self.app_name = app_name
        self.output = Path(output)
        self.config = config or Config()
        self.state = ScaffoldState()
        self._task: Optional[asyncio.Task[ExtractionOutcome]] = None

    @property
    def is_busy(self) -> bool:
        return self.state.busy

    @property
    def is_successful(self) -> bool:
        return self.state.success

    def make(self) -> asyncio.Task[ExtractionOutcome]:
        """Start fetching and extracting in the background.

        Must be called from within a running event loop.  The state flips to
        busy before this method returns.
        """
        self.state.start()
        self._task = asyncio.create_task(self._fetch_and_extract())
        return self._task

    async def _fetch_and_extract(self) -> ExtractionOutcome:
        archive = self.config.archive
        try:
            fetched = await fetch_archive(
                archive.url, archive.download_path, timeout=archive.timeout
            )
            if not fetched:
                raise FetchError(archive.url)
            outcome = await extract_archive(
                archive.download_path, self.output, excluded=archive.excluded_files
            )
        except BaseException:
            self.state.finish(False)
            raise

        self.state.finish(True)
        return outcome

    async def wait(self) -> ExtractionOutcome:
        """Block until the scaffold is done and return its outcome.

        Waits through the completion waiter, bounded by
        ``config.wait_timeout``, then hands back the task's result.

        Raises:
            StateError: If ``make()`` was never called.
            WaitTimeout: If the configured timeout expires first.
            FetchError: If the download failed.
            ExtractionError: If any entry could not be extracted.
        """
        if self._task is None:
            raise StateError("Scaffold.make() has not been called")

        task = self._task
        await wait_for_state(
            task.done,
            interval=self.config.poll_interval,
            timeout=self.config.wait_timeout,
        )
        return task.result()

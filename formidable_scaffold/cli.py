"""``formidable-new``: create a new Formidable application.

Usage::

    formidable-new my-app
    formidable-new my-app --type full-stack --stack react --database SQLite --manager npm --git
    formidable-new .
"""

from __future__ import annotations

import argparse
import asyncio
import re
import sys
from pathlib import Path
from typing import Optional

from rich.panel import Panel

from formidable_scaffold import __version__
from formidable_scaffold.archive import ExtractionError
from formidable_scaffold.collaborators import CollaboratorError, CollaboratorRegistry
from formidable_scaffold.config import Config
from formidable_scaffold.models import OnboardingAnswers
from formidable_scaffold.onboarding import DATABASE_DRIVERS, answers_from_flags, collect_answers
from formidable_scaffold.pipeline import PipelineError, PostProcessor
from formidable_scaffold.scaffold import FetchError, Scaffold
from formidable_scaffold.utils import (
    WaitTimeout,
    console,
    print_dim,
    print_error,
    print_success,
    print_summary_table,
)

CURRENT_DIRECTORY = "."

_INVALID_NAME = re.compile(r"[^a-z0-9\-_]", re.IGNORECASE)


class InvalidApplicationError(Exception):
    """Raised before scaffolding when the name or target directory is unusable."""


def resolve_target(name: str, cwd: Path) -> tuple[str, Path]:
    """Validate *name* and work out the application directory.

    ``.`` scaffolds into *cwd* and takes its directory name; it must be
    empty.  A named directory may already exist and is extracted over.

    Returns:
        ``(app_name, application_directory)``.

    Raises:
        InvalidApplicationError: If the name has characters outside
            ``[a-z0-9-_]``, or the name is ``.`` and *cwd* is not empty.
    """
    if name != CURRENT_DIRECTORY and _INVALID_NAME.search(name):
        raise InvalidApplicationError("Invalid Application name.")

    if name == CURRENT_DIRECTORY:
        if any(cwd.iterdir()):
            raise InvalidApplicationError("Application already exists!")
        return cwd.name, cwd

    return name, cwd / name


def print_welcome() -> None:
    console.print(
        Panel(
            f"[bold bright_cyan]Formidable[/bold bright_cyan]\n[dim]formidable-scaffold {__version__}[/dim]",
            border_style="bright_cyan",
        )
    )


def print_next_steps(args_name: str, application: Path, cwd: Path, answers: OnboardingAnswers) -> None:
    print_success("\nYour application is ready!")
    print_success("Get started with the following commands:\n")

    if application != cwd:
        print_dim(f"$  cd {args_name}")

    manager = answers.manager.value if answers.manager else "npm"
    if answers.uses_inertia:
        print_dim(f"$  {manager} install")
        print_dim(f"$  {manager} run mix:dev")

    print_dim(f"$  {manager} start")


async def create_application(args: argparse.Namespace, config: Config, cwd: Path) -> int:
    """Scaffold, onboard, wait, post-process.  Returns the exit status."""
    try:
        app_name, application = resolve_target(args.name, cwd)
    except InvalidApplicationError as exc:
        print_error(str(exc))
        return 1

    try:
        collaborators = CollaboratorRegistry.from_directory(config.stubs_dir)
    except CollaboratorError as exc:
        print_error(str(exc))
        return 1

    print_welcome()

    scaffold = Scaffold(app_name, application, config)
    scaffold.make()

    seeded = answers_from_flags(
        type=args.type,
        stack=args.stack,
        scaffolding=args.scaffolding,
        database=args.database,
        manager=args.manager,
    )
    answers = await asyncio.to_thread(collect_answers, seeded)

    try:
        with console.status("Downloading application skeleton..."):
            outcome = await scaffold.wait()
    except (FetchError, ExtractionError, WaitTimeout) as exc:
        print_error(f"Scaffolding failed. It could be your network connection. ({exc})")
        return 1

    print_summary_table(
        {
            "Application": app_name,
            "Directory": str(outcome.output_dir),
            "Files": str(outcome.files_written),
            "Excluded": ", ".join(outcome.skipped) or "none",
        },
        title="Skeleton",
    )

    processor = PostProcessor(
        app_name, application, answers,
        config=config, collaborators=collaborators, init_git=args.git,
    )
    try:
        report = await processor.run()
    except PipelineError as exc:
        print_error(str(exc))
        return 1

    if report.failed:
        print_summary_table(report.failed, title="Steps that failed")

    print_next_steps(args.name, application, cwd, answers)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formidable-new",
        description="Create a new Formidable application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  formidable-new my-app --type api\n"
            "  formidable-new . --type full-stack --stack vue --git\n"
        ),
    )
    parser.add_argument("name", help="Application name, or . for the current directory")
    parser.add_argument("--git", action="store_true", help="Initialize a Git repository")
    parser.add_argument("--type", choices=["api", "full-stack"], help="The type of application to create")
    parser.add_argument("--stack", choices=["imba", "react", "vue"], help="The default stack to use")
    parser.add_argument("--scaffolding", choices=["blank", "spa"], help="The default scaffolding to use")
    parser.add_argument("--database", choices=list(DATABASE_DRIVERS), help="The default database driver to use")
    parser.add_argument("--manager", choices=["npm", "yarn"], help="The default package manager to use")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``formidable-new`` and ``python -m formidable_scaffold``."""
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    status = asyncio.run(create_application(args, config, Path.cwd()))
    sys.exit(status)


if __name__ == "__main__":
    main()

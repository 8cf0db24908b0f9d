"""Post-processing pipeline.

Runs the fixed, ordered chain of steps that turns an extracted skeleton into
a configured application:

 0. create-env              copy ``.env.example`` to ``.env``
 1. install                 package manager install/add of the resolved deps
 2. stack-hook              React/Vue file materialisation
 3. publish                 mail file sets + the stack's file sets
 4. modify                  pretty-errors and inertia modifiers
 5. generate-key            ``craftsman key``
 6. set-package-name        rename ``package.json``
 7. comment-out-client-url  ``.env`` rewrite (full-stack)
 8. set-session             ``config/session.imba`` rewrite (full-stack)
 9. set-database            ``DB_CONNECTION`` (+ sqlite default) rewrite
10. cache                   ``craftsman cache --debug``
11. git-init                ``git init`` (opt-in)

Each step is a ``PipelineStep`` with a guard over the onboarding answers.
A failing fatal step aborts the run with ``PipelineError``; a failing
non-fatal step is reported and the run continues.
"""

from __future__ import annotations

import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from formidable_scaffold import steps
from formidable_scaffold.collaborators import CollaboratorRegistry
from formidable_scaffold.config import Config
from formidable_scaffold.models import OnboardingAnswers
from formidable_scaffold.steps import ChildProcessFailure, StepContext
from formidable_scaffold.utils import (
    console,
    format_duration,
    print_error,
    print_step,
    print_warning,
)

Guard = Callable[[OnboardingAnswers], bool]
Action = Callable[[StepContext], Awaitable[None]]

# Errors a step may raise that the runner turns into a report entry.
STEP_ERRORS = (ChildProcessFailure, OSError, json.JSONDecodeError, UnicodeDecodeError)


def always(_: OnboardingAnswers) -> bool:
    return True


def full_stack(answers: OnboardingAnswers) -> bool:
    return answers.is_full_stack


def inertia_stack(answers: OnboardingAnswers) -> bool:
    return answers.uses_inertia


def database_chosen(answers: OnboardingAnswers) -> bool:
    return answers.has_database


class PipelineError(Exception):
    """Raised when a fatal post-processing step fails."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"Step {step}: {message}")


@dataclass(frozen=True)
class PipelineStep:
    """A named unit of work run only when its guard holds."""

    name: str
    guard: Guard
    action: Action
    fatal: bool = True


@dataclass
class PipelineReport:
    """Which steps ran, which were skipped by their guard, which failed."""

    completed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed


class PostProcessor:
    """Applies the post-processing steps to one extracted application.

    Attributes:
        context: Application name, directory, answers, config and collaborators.
        init_git: Whether the trailing ``git init`` step runs.
    """

    def __init__(
        self,
        app_name: str,
        output: str | Path,
        answers: OnboardingAnswers,
        config: Config | None = None,
        collaborators: CollaboratorRegistry | None = None,
        init_git: bool = False,
    ) -> None:
        config = config or Config()
        if collaborators is None:
            collaborators = CollaboratorRegistry.from_directory(config.stubs_dir)
        self.context = StepContext(
            app_name=app_name,
            output=Path(output),
            answers=answers,
            config=config,
            collaborators=collaborators,
        )
        self.init_git = init_git

    def steps(self) -> list[PipelineStep]:
        """Return the step table in execution order."""
        return [
            PipelineStep("create-env", always, steps.create_env),
            PipelineStep("install", always, steps.install),
            PipelineStep("stack-hook", inertia_stack, steps.apply_stack_hook),
            PipelineStep("publish", always, steps.publish),
            PipelineStep("modify", full_stack, steps.modify),
            PipelineStep("generate-key", always, steps.generate_key),
            PipelineStep("set-package-name", always, steps.set_package_name),
            PipelineStep("comment-out-client-url", full_stack, steps.comment_out_client_url, fatal=False),
            PipelineStep("set-session", full_stack, steps.set_session, fatal=False),
            PipelineStep("set-database", database_chosen, steps.set_database),
            PipelineStep("cache", always, steps.cache, fatal=False),
            PipelineStep("git-init", lambda _: self.init_git, steps.git_init, fatal=False),
        ]

    async def run(self) -> PipelineReport:
        """Run every step whose guard holds, in order.

        Returns:
            A ``PipelineReport``; non-fatal failures appear in ``failed``.

        Raises:
            PipelineError: As soon as a fatal step fails.
        """
        report = PipelineReport()
        started = time.monotonic()
        answers = self.context.answers

        console.print("\n[bold]Installation will begin shortly. This might take a while.[/bold]\n")

        for index, step in enumerate(self.steps()):
            if not step.guard(answers):
                report.skipped.append(step.name)
                continue

            print_step(index, step.name)
            try:
                await step.action(self.context)
            except STEP_ERRORS as exc:
                report.failed[step.name] = str(exc)
                if step.fatal:
                    print_error(f"{step.name} failed: {exc}")
                    raise PipelineError(step.name, str(exc)) from exc
                print_warning(f"{step.name} failed, continuing: {exc}")
                continue

            report.completed.append(step.name)

        report.duration = time.monotonic() - started
        console.print(f"[dim]Post-processing finished in {format_duration(report.duration)}[/dim]")
        return report

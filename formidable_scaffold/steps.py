"""Post-processing step actions.

Every action takes a ``StepContext`` and mutates the application directory
or spawns an external tool inside it.  The literals matched by the
configuration rewrites are module constants so tests can assert on them.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from formidable_scaffold.collaborators import (
    AUTH_MAIL,
    INERTIA,
    INERTIA_CONFIG,
    INERTIA_RESOLVER,
    MAIL,
    PRETTY_ERRORS,
    REACT,
    SPA,
    VUE,
    WEB,
    CollaboratorKind,
    CollaboratorRegistry,
)
from formidable_scaffold.config import Config
from formidable_scaffold.dependencies import resolve_dependencies
from formidable_scaffold.line_mutator import replace_exact, replace_first_prefixed, update_line
from formidable_scaffold.models import (
    Manager,
    OnboardingAnswers,
    ScaffoldingStyle,
    Stack,
)
from formidable_scaffold.utils import print_dim, print_warning, run_command

# ---------------------------------------------------------------------------
# Files and literals
# ---------------------------------------------------------------------------

ENV_EXAMPLE_FILE = ".env.example"
ENV_FILE = ".env"
PACKAGE_MANIFEST = "package.json"
SESSION_CONFIG = Path("config") / "session.imba"
DATABASE_CONFIG = Path("config") / "database.imba"

CLIENT_URL_LINE = "CLIENT_URL=http://localhost:8000"
CLIENT_URL_COMMENTED = "# CLIENT_URL=http://localhost:8000"

SESSION_DRIVER_LINE = "driver: 'memory'"
SESSION_DRIVER_REPLACEMENT = "  driver: 'file'"
SESSION_SAME_SITE_LINE = "same_site: helpers.env 'SESSION_SAME_SITE', 'none'"
SESSION_SAME_SITE_REPLACEMENT = "\tsame_site: helpers.env 'SESSION_SAME_SITE', 'lax'"

DB_CONNECTION_PREFIX = "DB_CONNECTION"
NULL_AS_DEFAULT_LINE = "useNullAsDefault: null"
NULL_AS_DEFAULT_REPLACEMENT = "\tuseNullAsDefault: true"

SQLITE_CONNECTION = "sqlite"

DATABASE_CONNECTIONS: dict[str, str] = {
    "mysql": "mysql",
    "pg": "pgsql",
    "sqlite3": SQLITE_CONNECTION,
    "tedious": "mssql",
    "oracledb": "oracle",
}


class ChildProcessFailure(Exception):
    """Raised when a spawned tool cannot start or exits non-zero.

    Attributes:
        command: The argv that was run.
        returncode: Exit status, ``-1`` on timeout, ``None`` if it never started.
    """

    def __init__(self, command: list[str], returncode: Optional[int], detail: str = "") -> None:
        self.command = command
        self.returncode = returncode
        status = "could not be started" if returncode is None else f"exited with {returncode}"
        message = f"Command {status}: {' '.join(command)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


@dataclass
class StepContext:
    """Everything a step needs to act on one application."""

    app_name: str
    output: Path
    answers: OnboardingAnswers
    config: Config = field(default_factory=Config)
    collaborators: CollaboratorRegistry = field(default_factory=CollaboratorRegistry)

    @property
    def manager(self) -> str:
        if self.answers.manager is not None:
            return self.answers.manager.value
        return self.config.tools.default_manager


async def run_tool(command: list[str], cwd: Path, timeout: int) -> None:
    """Run *command* in *cwd* with inherited stdio and check its exit status.

    Raises:
        ChildProcessFailure: If the tool is missing, times out or fails.
    """
    print_dim(f"$ {' '.join(command)}")
    try:
        returncode, _, stderr = await run_command(command, cwd=cwd, timeout=timeout, capture=False)
    except OSError as exc:
        raise ChildProcessFailure(command, None, str(exc)) from exc

    if returncode != 0:
        raise ChildProcessFailure(command, returncode, stderr)


def install_command(manager: str, dependencies: list[str], flags: list[str]) -> list[str]:
    """Build the package-manager argv.

    Yarn adds packages with ``add``; every other case uses ``install``.
    """
    verb = "add" if dependencies and manager == Manager.YARN.value else "install"
    return [manager, verb, *dependencies, *flags]


def connection_for(driver: str) -> Optional[str]:
    """Map a database driver package to its connection name."""
    return DATABASE_CONNECTIONS.get(driver)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


async def create_env(ctx: StepContext) -> None:
    shutil.copyfile(ctx.output / ENV_EXAMPLE_FILE, ctx.output / ENV_FILE)


async def install(ctx: StepContext) -> None:
    dependencies = resolve_dependencies(ctx.answers)
    command = install_command(ctx.manager, dependencies, ctx.config.tools.install_flags)
    await run_tool(command, ctx.output, ctx.config.tools.command_timeout)


async def apply_stack_hook(ctx: StepContext) -> None:
    """Materialise the React or Vue hook files."""
    hook = {Stack.REACT: REACT, Stack.VUE: VUE}[ctx.answers.stack]
    ctx.collaborators.apply(CollaboratorKind.HOOK, hook, ctx.output)


async def publish(ctx: StepContext) -> None:
    """Publish the mail file sets, then the set matching the chosen stack."""
    names = [AUTH_MAIL, MAIL]

    answers = ctx.answers
    if answers.is_full_stack:
        if answers.scaffolding == ScaffoldingStyle.BLANK:
            names.append(WEB)
        elif answers.scaffolding == ScaffoldingStyle.SPA:
            names.append(SPA)
        elif answers.uses_inertia:
            names.extend([WEB, INERTIA])

    for name in names:
        ctx.collaborators.apply(CollaboratorKind.PUBLISHABLE, name, ctx.output)


async def modify(ctx: StepContext) -> None:
    names = [PRETTY_ERRORS]
    if ctx.answers.uses_inertia:
        names.extend([INERTIA_RESOLVER, INERTIA_CONFIG])

    for name in names:
        ctx.collaborators.apply(CollaboratorKind.MODIFIER, name, ctx.output)


async def generate_key(ctx: StepContext) -> None:
    await run_tool([ctx.config.tools.craftsman, "key"], ctx.output, ctx.config.tools.command_timeout)


async def set_package_name(ctx: StepContext) -> None:
    """Rename the package in ``package.json`` after the application."""
    manifest = ctx.output / PACKAGE_MANIFEST
    package = json.loads(manifest.read_text(encoding="utf-8"))
    package["name"] = ctx.app_name.replace(" ", "-")
    manifest.write_text(json.dumps(package, indent=2, ensure_ascii=False), encoding="utf-8")


async def comment_out_client_url(ctx: StepContext) -> None:
    update_line(ctx.output / ENV_FILE, replace_exact(CLIENT_URL_LINE, CLIENT_URL_COMMENTED))


async def set_session(ctx: StepContext) -> None:
    session = ctx.output / SESSION_CONFIG
    update_line(session, replace_exact(SESSION_DRIVER_LINE, SESSION_DRIVER_REPLACEMENT))
    update_line(session, replace_exact(SESSION_SAME_SITE_LINE, SESSION_SAME_SITE_REPLACEMENT))


async def set_database(ctx: StepContext) -> None:
    """Point ``DB_CONNECTION`` at the chosen driver's connection."""
    connection = connection_for(ctx.answers.database)
    if connection is None:
        print_warning(f"Unknown database driver '{ctx.answers.database}'; DB_CONNECTION left as is.")
        return

    update_line(
        ctx.output / ENV_FILE,
        replace_first_prefixed(DB_CONNECTION_PREFIX, f"{DB_CONNECTION_PREFIX}={connection}"),
    )

    if connection == SQLITE_CONNECTION:
        update_line(
            ctx.output / DATABASE_CONFIG,
            replace_exact(NULL_AS_DEFAULT_LINE, NULL_AS_DEFAULT_REPLACEMENT),
        )


async def cache(ctx: StepContext) -> None:
    await run_tool(
        [ctx.config.tools.craftsman, "cache", "--debug"],
        ctx.output,
        ctx.config.tools.command_timeout,
    )


async def git_init(ctx: StepContext) -> None:
    await run_tool(["git", "init"], ctx.output, ctx.config.tools.command_timeout)

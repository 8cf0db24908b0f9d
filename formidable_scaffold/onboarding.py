"""Collect onboarding answers: command-line flags first, prompts for the rest.

Questions are asked in a fixed order (type, database, stack, scaffolding,
manager) and only when they are meaningful for the answers so far.  Prompts
block, so callers running an event loop should use ``asyncio.to_thread``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

from rich.prompt import Prompt

from formidable_scaffold.models import (
    SKIP_DATABASE,
    AppType,
    Manager,
    OnboardingAnswers,
    ScaffoldingStyle,
    Stack,
)
from formidable_scaffold.utils import print_dim

Ask = Callable[..., str]

DATABASE_DRIVERS: dict[str, str] = {
    "MySQL / MariaDB": "mysql",
    "PostgreSQL / Amazon Redshift": "pg",
    "SQLite": "sqlite3",
    "MSSQL": "tedious",
    "Oracle": "oracledb",
    "skip": SKIP_DATABASE,
}


def database_driver(label: str) -> str:
    """Map a database label (or a driver name) to its driver package.

    Raises:
        ValueError: If *label* is neither a known label nor a known driver.
    """
    if label in DATABASE_DRIVERS:
        return DATABASE_DRIVERS[label]
    if label in DATABASE_DRIVERS.values():
        return label
    raise ValueError(f"Unknown database: {label}")


def answers_from_flags(
    type: Optional[str] = None,
    stack: Optional[str] = None,
    scaffolding: Optional[str] = None,
    database: Optional[str] = None,
    manager: Optional[str] = None,
) -> OnboardingAnswers:
    """Seed answers from command-line flags; missing flags stay unset."""
    return OnboardingAnswers(
        type=AppType(type) if type else None,
        stack=Stack(stack.lower()) if stack else None,
        scaffolding=ScaffoldingStyle(scaffolding) if scaffolding else None,
        database=database_driver(database) if database else None,
        manager=Manager(manager) if manager else None,
    )


def _choices(enum_type: type) -> list[str]:
    return [member.value for member in enum_type]


def collect_answers(answers: OnboardingAnswers, ask: Ask = Prompt.ask) -> OnboardingAnswers:
    """Prompt for every meaningful question the flags left unanswered.

    Args:
        answers: Answers seeded from flags.
        ask: Prompt function with ``rich.prompt.Prompt.ask``'s signature.

    Returns:
        The finalised answers.
    """
    if answers.type is None:
        answers = answers.model_copy(update={"type": AppType(
            ask("What type of application are you creating?", choices=_choices(AppType), default=AppType.API.value)
        )})
    else:
        print_dim(f"Creating {'an API' if answers.type == AppType.API else 'a full-stack'} application")

    if answers.database is None:
        label = ask("Which database driver should be installed?", choices=list(DATABASE_DRIVERS), default="skip")
        answers = answers.model_copy(update={"database": database_driver(label)})
    elif answers.database != SKIP_DATABASE:
        print_dim(f"Using {answers.database} as default database")

    if answers.is_full_stack:
        if answers.stack is None:
            answers = answers.model_copy(update={"stack": Stack(
                ask("Which stack do you want to use?", choices=_choices(Stack), default=Stack.IMBA.value)
            )})
        else:
            print_dim(f"Using {answers.stack.value} as default stack")

        if answers.stack == Stack.IMBA:
            if answers.scaffolding is None:
                answers = answers.model_copy(update={"scaffolding": ScaffoldingStyle(
                    ask("Which scaffolding do you want to use?", choices=_choices(ScaffoldingStyle), default=ScaffoldingStyle.BLANK.value)
                )})
            else:
                print_dim(f"Using {answers.scaffolding.value} as default scaffolding")

    if answers.manager is None:
        answers = answers.model_copy(update={"manager": Manager(
            ask("Which package manager do you want to use?", choices=_choices(Manager), default=Manager.NPM.value)
        )})
    else:
        print_dim(f"Using {answers.manager.value} as the default package manager")

    return answers

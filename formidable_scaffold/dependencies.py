"""Resolve which npm packages a new application needs from its onboarding answers."""

from __future__ import annotations

from formidable_scaffold.models import OnboardingAnswers

PRETTY_ERRORS_PACKAGE = "@formidablejs/pretty-errors"
VIEW_PACKAGE = "@formidablejs/view"
HTTP_CLIENT_PACKAGE = "axios"
INERTIA_PACKAGE = "@formidablejs/inertia"


def resolve_dependencies(answers: OnboardingAnswers) -> list[str]:
    """Return the ordered list of packages to install.

    Every applicable rule contributes; nothing is removed or deduplicated.

    Examples::

        resolve_dependencies(OnboardingAnswers(type="api", database="pg"))
            -> ["pg"]
        resolve_dependencies(OnboardingAnswers(type="full-stack", stack="react", database="skip"))
            -> ["@formidablejs/pretty-errors", "@formidablejs/inertia"]
    """
    deps: list[str] = []

    if answers.is_full_stack:
        deps.append(PRETTY_ERRORS_PACKAGE)

    if answers.is_imba_spa:
        deps.append(VIEW_PACKAGE)
        deps.append(HTTP_CLIENT_PACKAGE)

    if answers.uses_inertia:
        deps.append(INERTIA_PACKAGE)

    if answers.has_database:
        deps.append(answers.database)

    return deps

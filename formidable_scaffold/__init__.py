"""Formidable application scaffolder.

Downloads the Formidable skeleton in the background while the user answers
onboarding questions, then runs an ordered post-processing pipeline
(install, publish, modify, key generation, configuration rewrites, cache).

Quick usage::

    from formidable_scaffold import Config, OnboardingAnswers, PostProcessor, Scaffold

    scaffold = Scaffold("my-app", Path("my-app"), Config())
    scaffold.make()
    await scaffold.wait()
    await PostProcessor("my-app", Path("my-app"), answers).run()
"""

__version__ = "0.1.0"

from formidable_scaffold.config import Config
from formidable_scaffold.models import OnboardingAnswers
from formidable_scaffold.pipeline import PostProcessor
from formidable_scaffold.scaffold import Scaffold

__all__ = [
    "Config",
    "OnboardingAnswers",
    "PostProcessor",
    "Scaffold",
    "__version__",
]

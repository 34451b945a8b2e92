"""Version helpers for teamcity_dsl."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as metadata_version

from .constants import DISTRIBUTION_NAME, PACKAGE_NAME


@lru_cache()
def cli_version() -> str:
    try:
        from . import __version__
    except Exception:
        __version__ = ""

    if isinstance(__version__, str) and __version__.strip():
        return __version__

    try:
        return metadata_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"


USER_AGENT = f"{PACKAGE_NAME}/{cli_version()}"

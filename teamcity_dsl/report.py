"""Turn a failed generator run into a build failure pointing at its report."""

from __future__ import annotations

import os
from pathlib import Path
from typing import NoReturn, Union

from .errors import BuildFailure

FAILURE_MESSAGE = "Process generating TeamCity configurations failed. See the report at: "


def clickable_file_url(path: Union[str, "os.PathLike[str]"]) -> str:
    """Return a ``file:`` URL for ``path`` that terminals render as a link.

    Falls back to the absolute path when no URI can be built for it.
    """
    absolute = Path(os.path.abspath(path))
    try:
        return absolute.as_uri()
    except ValueError:
        return str(absolute)


def failure_message(report_path: Union[str, "os.PathLike[str]"]) -> str:
    return FAILURE_MESSAGE + clickable_file_url(report_path)


def raise_build_failure(report_path: Union[str, "os.PathLike[str]"]) -> NoReturn:
    raise BuildFailure(failure_message(report_path))

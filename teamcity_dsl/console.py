"""Console helpers for teamcity_dsl."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator

_PREFIX = "[teamcity_dsl]"
_LOG_TO_STDERR = False
_LOG_SILENCED = False


def configure_console(*, quiet: bool = False, stderr: bool = False) -> None:
    global _LOG_TO_STDERR, _LOG_SILENCED
    if stderr:
        _LOG_TO_STDERR = True
    if quiet:
        _LOG_SILENCED = True


def log(message: str) -> None:
    if _LOG_SILENCED:
        return
    stream = sys.stderr if _LOG_TO_STDERR else sys.stdout
    print(f"{_PREFIX} {message}", file=stream)


def log_error(message: str) -> None:
    print(f"{_PREFIX} {message}", file=sys.stderr)


def logs_silenced() -> bool:
    return _LOG_SILENCED


def echo_child(line: str) -> None:
    """Pass one line of generator output through unprefixed."""
    if _LOG_SILENCED:
        return
    stream = sys.stderr if _LOG_TO_STDERR else sys.stdout
    stream.write(line)
    stream.flush()


@contextmanager
def logs_to_stderr() -> Iterator[None]:
    global _LOG_TO_STDERR
    previous = _LOG_TO_STDERR
    _LOG_TO_STDERR = True
    try:
        yield
    finally:
        _LOG_TO_STDERR = previous

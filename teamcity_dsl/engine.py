"""Generator process management: interpreter, tool path and subprocess launch."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections import deque
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .classpath import join_classpath
from .console import echo_child, log
from .constants import MAX_CAPTURE_CHARS, PYTHON_ENV_VAR
from .errors import CLIError
from .utils import format_cli_command


def tool_path() -> Path:
    """Return the ``sys.path`` entry this package was imported from."""
    return Path(__file__).resolve().parent.parent


def resolve_interpreter(explicit: Optional[str] = None) -> str:
    chosen = (explicit or os.environ.get(PYTHON_ENV_VAR) or "").strip()
    if not chosen:
        return sys.executable
    if os.path.isabs(chosen):
        if not os.path.exists(chosen):
            raise CLIError(f"python interpreter not found: {chosen}")
        return chosen
    found = shutil.which(chosen)
    if not found:
        raise CLIError(f"python interpreter '{chosen}' not found in PATH")
    return found


def build_command(interpreter: str, module: str, arguments: Sequence[str]) -> List[str]:
    return [interpreter, "-m", module, *arguments]


def build_environment(
    classpath: Sequence[Path],
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Environment for the child; ``PYTHONPATH`` is replaced by the classpath."""
    env = dict(os.environ if base is None else base)
    env["PYTHONPATH"] = join_classpath(classpath)
    env.setdefault("PYTHONIOENCODING", "utf-8")
    return env


def run_generator_process(
    command: Sequence[str],
    env: Mapping[str, str],
    *,
    cwd: Optional[Path] = None,
    stream: bool = True,
) -> Tuple[int, str]:
    """Run the generator, echoing its output; return the exit code and captured tail.

    A non-zero exit is returned, never raised.
    """
    log(f"exec {format_cli_command(command)}")
    try:
        proc = subprocess.Popen(
            list(command),
            env=dict(env),
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except OSError as exc:
        raise CLIError(f"failed to launch generator process: {exc}") from exc

    captured: deque[str] = deque()
    captured_size = 0

    def capture(line: str) -> None:
        nonlocal captured_size
        if len(line) > MAX_CAPTURE_CHARS:
            captured.clear()
            line = line[-MAX_CAPTURE_CHARS:]
            captured_size = 0
        captured.append(line)
        captured_size += len(line)
        while captured and captured_size > MAX_CAPTURE_CHARS:
            removed = captured.popleft()
            captured_size -= len(removed)

    try:
        assert proc.stdout is not None
        for line in proc.stdout:
            if stream:
                echo_child(line)
            capture(line)
        proc.stdout.close()
        proc.wait()
    except KeyboardInterrupt:
        proc.terminate()
        proc.wait()
        raise
    return proc.returncode, "".join(captured)

"""Generation runner: the build-task action that drives one generator process."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Tuple, Union

from .classpath import join_classpath, subprocess_classpath
from .console import log, log_error, logs_silenced
from .constants import DSL_EXCEPTION_FILENAME
from .dispatch import select_adapter
from .engine import (
    build_command,
    build_environment,
    resolve_interpreter,
    run_generator_process,
    tool_path,
)
from .errors import CLIError, InvalidRequest
from .report import raise_build_failure
from .utils import display_path

Launcher = Callable[..., Tuple[int, str]]


@dataclass(frozen=True)
class GenerationRequest:
    version: str
    format: str
    base_dir: Path
    dest_dir: Path

    @property
    def report_path(self) -> Path:
        return self.dest_dir / DSL_EXCEPTION_FILENAME

    def generator_arguments(self, dependency_paths: Sequence[Path]) -> List[str]:
        """The four positional arguments every adapter expects, in order."""
        return [
            self.format,
            os.path.abspath(self.base_dir),
            os.path.abspath(self.dest_dir),
            join_classpath(dependency_paths),
        ]


@dataclass(frozen=True)
class Success:
    pass


@dataclass(frozen=True)
class Failure:
    exit_code: int
    report_path: Path


GenerationOutcome = Union[Success, Failure]


class RunnerState(Enum):
    IDLE = "idle"
    PREPARING_INPUTS = "preparing-inputs"
    LAUNCHING = "launching"
    AWAITING_EXIT = "awaiting-exit"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def remove_stale_report(dest_dir: Path) -> None:
    report = dest_dir / DSL_EXCEPTION_FILENAME
    try:
        report.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise CLIError(f"failed to delete stale report {report}: {exc}") from exc


class GenerationRunner:
    """Runs the version-appropriate generator adapter in a child interpreter."""

    def __init__(
        self,
        dependency_paths: Sequence[Union[str, Path]],
        *,
        project_root: Optional[Path] = None,
        interpreter: Optional[str] = None,
        tool: Optional[Path] = None,
        stream: bool = True,
        env: Optional[Mapping[str, str]] = None,
        launcher: Launcher = run_generator_process,
    ) -> None:
        self.dependency_paths = [Path(path) for path in dependency_paths]
        self.project_root = project_root
        self.interpreter = interpreter
        self.tool = tool
        self.stream = stream
        self.env = env
        self.launcher = launcher
        self.state = RunnerState.IDLE

    def _check_request(self, request: GenerationRequest) -> None:
        if not request.base_dir.is_dir():
            raise InvalidRequest(f"settings directory does not exist: {request.base_dir}")
        base = Path(os.path.abspath(request.base_dir))
        dest = Path(os.path.abspath(request.dest_dir))
        if base == dest:
            raise InvalidRequest(f"destination must differ from the settings directory: {dest}")
        if dest in base.parents:
            raise InvalidRequest(f"destination must not contain the settings directory: {dest}")
        if base in dest.parents:
            raise InvalidRequest(f"destination must not be inside the settings directory: {dest}")

    def run(self, request: GenerationRequest) -> GenerationOutcome:
        self.state = RunnerState.PREPARING_INPUTS
        try:
            self._check_request(request)
            remove_stale_report(request.dest_dir)
            base = display_path(request.base_dir, self.project_root)
            dest = display_path(request.dest_dir, self.project_root)
            log(f"Generate TeamCity configurations in {request.format} format from {base} to {dest}")
            selection = select_adapter(request.version)
            request.dest_dir.mkdir(parents=True, exist_ok=True)

            self.state = RunnerState.LAUNCHING
            interpreter = resolve_interpreter(self.interpreter)
            classpath = subprocess_classpath(self.tool or tool_path(), self.dependency_paths)
            command = build_command(
                interpreter,
                selection.module,
                request.generator_arguments(self.dependency_paths),
            )
            env = build_environment(classpath, self.env)
        except CLIError:
            self.state = RunnerState.FAILED
            raise

        self.state = RunnerState.AWAITING_EXIT
        try:
            exit_code, output = self.launcher(command, env, cwd=self.project_root, stream=self.stream)
        except BaseException:
            self.state = RunnerState.FAILED
            raise

        if exit_code == 0:
            self.state = RunnerState.SUCCEEDED
            return Success()
        self.state = RunnerState.FAILED
        if output and (not self.stream or logs_silenced()):
            log_error(f"generator output:\n{output.rstrip()}")
        log_error(f"generator process exited with code {exit_code}")
        return Failure(exit_code=exit_code, report_path=request.report_path)

    def execute(self, request: GenerationRequest) -> Success:
        """Task action: run the generator and raise ``BuildFailure`` if it fails."""
        outcome = self.run(request)
        if isinstance(outcome, Failure):
            raise_build_failure(outcome.report_path)
        return outcome

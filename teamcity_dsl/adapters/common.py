"""Shared command line and error handling for the generator adapters.

Every adapter is invoked as::

    python -m teamcity_dsl.adapters.<family> <format> <base-dir> <dest-dir> <classpath>

where ``classpath`` is the DSL-library classpath joined with ``os.pathsep``.
Diagnostics go to stdout so the parent can stream and capture them.
"""

from __future__ import annotations

import argparse
import sys
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Type

from ..classpath import split_classpath
from ..constants import EXIT_CODE_SUBPROCESS, KOTLIN_FORMAT
from ..framework import Framework, initialize_process, load_framework


@dataclass(frozen=True)
class AdapterArgs:
    format: str
    base_dir: Path
    dest_dir: Path
    classpath: str

    @property
    def classpath_entries(self) -> List[str]:
        return split_classpath(self.classpath)


def parse_args(argv: Optional[Sequence[str]], *, prog: str) -> AdapterArgs:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Generate TeamCity configurations from settings DSL sources.",
    )
    parser.add_argument("format", help="settings format (only 'kotlin' is supported)")
    parser.add_argument("base_dir", help="directory holding the DSL sources")
    parser.add_argument("dest_dir", help="directory receiving the generated XML")
    parser.add_argument("classpath", help="DSL-library classpath joined with the path separator")
    ns = parser.parse_args(argv)
    return AdapterArgs(
        format=ns.format,
        base_dir=Path(ns.base_dir),
        dest_dir=Path(ns.dest_dir),
        classpath=ns.classpath,
    )


def emit(message: str) -> None:
    print(message, flush=True)


def emit_traceback(exc: BaseException) -> None:
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stdout)
    sys.stdout.flush()


def load_converters(dsl: Any) -> Any:
    """Read the packaged converters catalog, falling back to an empty one."""
    try:
        return dsl.Converters.read_from_resources()
    except Exception as exc:
        emit(f"Error while initializing configuration converters {exc}")
        emit_traceback(exc)
        return dsl.Converters()


class Adapter(ABC):
    """Template for one framework generation; subclasses build the generator."""

    name = "teamcity_dsl.adapters"
    error_prefix = "Error while generating TeamCity configurations"

    def __init__(self, args: AdapterArgs, framework: Framework) -> None:
        self.args = args
        self.framework = framework

    def prepare(self) -> None:
        """Hook run before the format is checked."""

    @abstractmethod
    def create_generator(self) -> Any:
        """Build the version-specific framework generator."""

    def source_root(self) -> Any:
        return self.framework.settings.VersionedSettingsFileSystem(self.args.base_dir)

    def output_builder(self) -> Any:
        return self.framework.settings.RawConfigsBuilder(self.args.dest_dir)

    def generate(self, generator: Any) -> None:
        generator.generate(self.source_root(), self.output_builder())

    def report_error(self, exc: Exception) -> None:
        emit(f"{self.error_prefix}: {exc}")
        emit_traceback(exc)

    def execute(self) -> int:
        try:
            self.prepare()
            if self.args.format != KOTLIN_FORMAT:
                emit(f"Cannot find generator for settings format '{self.args.format}'")
                return EXIT_CODE_SUBPROCESS
            generator = self.create_generator()
            self.generate(generator)
        except Exception as exc:
            self.report_error(exc)
            return EXIT_CODE_SUBPROCESS
        return 0


def run(adapter_cls: Type[Adapter], argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv, prog=f"python -m {adapter_cls.name}")
    try:
        framework = load_framework()
    except ImportError as exc:
        emit(f"{adapter_cls.error_prefix}: settings DSL framework is not on the classpath ({exc})")
        emit_traceback(exc)
        return EXIT_CODE_SUBPROCESS
    initialize_process(framework)
    return adapter_cls(args, framework).execute()

"""Classpath assembly for the generator process and the generator itself."""

from __future__ import annotations

import inspect
import os
from pathlib import Path
from typing import Any, Collection, List, Optional, Sequence, Union

from .constants import (
    GENERATOR_EXCLUDED_PREFIXES,
    JAR_SUFFIX,
    KOTLIN_COMPILER_JAR,
    KOTLIN_REFLECT_JAR,
    KOTLIN_RUNTIME_JAR,
    KOTLIN_SCRIPT_RUNTIME_JAR,
    KOTLIN_STDLIB_JAR,
)
from .errors import MissingKotlinLib, NotAJar

PathLike = Union[str, "os.PathLike[str]"]


def subprocess_classpath(tool_path: PathLike, dependency_paths: Sequence[PathLike]) -> List[Path]:
    """Tool path first so the child can import its adapter, then the DSL libraries."""
    return [Path(tool_path), *(Path(entry) for entry in dependency_paths)]


def join_classpath(paths: Sequence[PathLike]) -> str:
    return os.pathsep.join(str(path) for path in paths)


def split_classpath(raw: str) -> List[str]:
    return [entry for entry in (raw or "").split(os.pathsep) if entry]


def is_generator_excluded_name(name: str) -> bool:
    if not name.endswith(JAR_SUFFIX):
        return False
    return any(name.startswith(prefix) for prefix in GENERATOR_EXCLUDED_PREFIXES)


def generator_input_classpath(
    entries: Sequence[PathLike],
    excluded: Collection[Path] = (),
) -> List[Path]:
    """Drop the entries that must not be exposed to the generator as plugin jars.

    ``excluded`` holds the Kotlin core jars and the framework's own entry; the
    Kotlin compiler and dokka fat jars are dropped by name.
    """
    excluded_set = {Path(path) for path in excluded}
    result: List[Path] = []
    for entry in entries:
        path = Path(entry)
        if path in excluded_set:
            continue
        if is_generator_excluded_name(path.name):
            continue
        result.append(path)
    return result


def strip_jar(name: str) -> str:
    if not name.endswith(JAR_SUFFIX):
        raise NotAJar(f"{name} doesn't end with {JAR_SUFFIX}")
    return name[: -len(JAR_SUFFIX)]


class KotlinLibs:
    """Locate Kotlin jars on a Maven-style classpath.

    Maven artifacts carry their version in the file name
    (``kotlin-stdlib-1.2.3.jar``), so lookups match on prefix and suffix
    rather than on the exact name.
    """

    def __init__(self, classpath: Sequence[PathLike]) -> None:
        self._classpath = [str(entry) for entry in classpath]

    def jar(self, basename: str) -> Path:
        prefix = strip_jar(basename)
        for element in self._classpath:
            path = Path(element)
            if path.is_file() and path.name.startswith(prefix) and path.name.endswith(JAR_SUFFIX):
                return path
        raise MissingKotlinLib(f"cannot find jar {prefix} on the DSL classpath")

    @property
    def compiler_jar(self) -> Path:
        return self.jar(KOTLIN_COMPILER_JAR)

    @property
    def runtime_jar(self) -> Path:
        return self.jar(KOTLIN_RUNTIME_JAR)

    @property
    def stdlib_jar(self) -> Path:
        return self.jar(KOTLIN_STDLIB_JAR)

    @property
    def script_runtime_jar(self) -> Path:
        return self.jar(KOTLIN_SCRIPT_RUNTIME_JAR)

    @property
    def reflect_jar(self) -> Path:
        return self.jar(KOTLIN_REFLECT_JAR)

    def core_jars(self) -> List[Path]:
        """Runtime, stdlib, script-runtime and reflect jars, in that order."""
        return [self.runtime_jar, self.stdlib_jar, self.script_runtime_jar, self.reflect_jar]


def defining_entry(obj: Any, entries: Sequence[PathLike]) -> Optional[Path]:
    """Return the classpath entry (directory or archive) holding ``obj``'s source file."""
    try:
        source = Path(os.path.abspath(inspect.getfile(obj)))
    except TypeError:
        return None
    for entry in entries:
        candidate = Path(os.path.abspath(entry))
        if candidate == source or candidate in source.parents:
            return Path(entry)
    return None

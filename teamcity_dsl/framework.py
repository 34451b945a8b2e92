"""Boundary to the external settings DSL framework (the ``configs_dsl`` package).

The framework ships with the TeamCity DSL libraries and is only importable
inside the generator process, where the DSL classpath is on ``sys.path``.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import ModuleType
from typing import Collection, List, Sequence

from .constants import FRAMEWORK_LOGGER_NAME, FRAMEWORK_MODULES


@dataclass(frozen=True)
class Framework:
    process: ModuleType
    settings: ModuleType
    dsl: ModuleType
    kotlin: ModuleType


def load_framework() -> Framework:
    modules = {name: importlib.import_module(path) for name, path in FRAMEWORK_MODULES.items()}
    return Framework(**modules)


@lru_cache(maxsize=None)
def initialize_process(framework: Framework) -> None:
    """Silence framework logging and set server-side properties once per process."""
    logging.getLogger(FRAMEWORK_LOGGER_NAME).disabled = True
    logging.disable(logging.CRITICAL)
    framework.process.disable_logging()
    framework.process.init_teamcity_properties()


class ClasspathPluginJars:
    """Plugin-jars provider exposing every given classpath entry as a jar location."""

    def __init__(self, entries: Sequence[Path]) -> None:
        self._entries = [Path(entry) for entry in entries]

    def jar_locations(self) -> List[Path]:
        return list(self._entries)


class EmptyPluginManager:
    def plugin_dirs(self) -> Collection[Path]:
        return []

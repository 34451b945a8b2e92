from __future__ import annotations

import logging
import sys
import zipfile
from pathlib import Path
from typing import Dict, List

import pytest

import teamcity_dsl.config as config
import teamcity_dsl.console as console
import teamcity_dsl.framework as framework
from teamcity_dsl.constants import (
    CACHE_ENV_VAR,
    CONFIG_ENV_VAR,
    FRAMEWORK_LOGGER_NAME,
    PYTHON_ENV_VAR,
    VERSION_ENV_VAR,
)

FRAMEWORK_DIR = Path(__file__).resolve().parent / "fixtures" / "framework"

KOTLIN_JAR_NAMES = [
    "kotlin-runtime-1.2.3.jar",
    "kotlin-stdlib-1.2.3.jar",
    "kotlin-script-runtime-1.2.3.jar",
    "kotlin-reflect-1.2.3.jar",
    "kotlin-compiler-embeddable-1.2.3.jar",
]


@pytest.fixture(autouse=True)
def console_state(monkeypatch) -> None:
    monkeypatch.setattr(console, "_LOG_SILENCED", False)
    monkeypatch.setattr(console, "_LOG_TO_STDERR", False)


@pytest.fixture(autouse=True)
def isolated_framework_modules():
    """Drop fake ``configs_dsl`` modules a test imported so they don't leak into later tests."""
    before = {name for name in sys.modules if name == "configs_dsl" or name.startswith("configs_dsl.")}
    yield
    for name in list(sys.modules):
        if (name == "configs_dsl" or name.startswith("configs_dsl.")) and name not in before:
            del sys.modules[name]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path) -> None:
    for name in (VERSION_ENV_VAR, PYTHON_ENV_VAR, CONFIG_ENV_VAR):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(CACHE_ENV_VAR, str(tmp_path / "cache"))
    user_config = tmp_path / "user-config" / "config.toml"
    monkeypatch.setattr(config, "default_config_path", lambda: user_config)


def _empty_jar(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w"):
        pass
    return path


@pytest.fixture
def dsl_libs(tmp_path) -> Dict[str, Path]:
    """Kotlin jars plus a plugin jar and a dokka fat jar, keyed by file name."""
    libs = tmp_path / "libs"
    names = [*KOTLIN_JAR_NAMES, "dokka-fatjar-0.9.16.jar", "configs-dsl-kotlin-plugin-1.0.jar"]
    return {name: _empty_jar(libs / name) for name in names}


@pytest.fixture
def dsl_classpath(dsl_libs) -> List[Path]:
    return [FRAMEWORK_DIR, *dsl_libs.values()]


@pytest.fixture
def fake_framework(monkeypatch):
    """Put the fake settings DSL framework on ``sys.path`` for in-process adapter runs."""
    monkeypatch.syspath_prepend(str(FRAMEWORK_DIR))
    for name in list(sys.modules):
        if name == "configs_dsl" or name.startswith("configs_dsl."):
            monkeypatch.delitem(sys.modules, name)
    framework.initialize_process.cache_clear()
    yield FRAMEWORK_DIR
    framework.initialize_process.cache_clear()
    logging.disable(logging.NOTSET)
    logging.getLogger(FRAMEWORK_LOGGER_NAME).disabled = False


@pytest.fixture
def make_project(tmp_path):
    def _make(*settings_lines: str, name: str = "project") -> Path:
        root = tmp_path / name
        base = root / ".teamcity"
        base.mkdir(parents=True)
        lines = settings_lines or ("project: Root",)
        (base / "settings.kts").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return root

    return _make

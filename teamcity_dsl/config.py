"""Project settings for teamcity_dsl, loaded from TOML.

Precedence (highest to lowest): CLI flags, environment variables, the config
file, built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from platformdirs import PlatformDirs

from .constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    DEFAULT_BASE_DIR_NAME,
    DEFAULT_BUILD_DIR_NAME,
    DEFAULT_CACHE_DIR_NAME,
    DEFAULT_DEST_DIR_NAME,
    DEFAULT_FORMAT,
    DEFAULT_KOTLIN_VERSION,
    DEFAULT_REPOSITORIES,
    DEFAULT_TEAMCITY_VERSION,
    PYTHON_ENV_VAR,
    VERSION_ENV_VAR,
)
from .errors import CLIError
from .utils import first_present, resolve_against, safe_str, safe_str_list

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover (py<311)
    import tomli as tomllib


@dataclass(frozen=True)
class ConfigFile:
    teamcity_version: Optional[str] = None
    format: Optional[str] = None
    base_dir: Optional[str] = None
    dest_dir: Optional[str] = None
    build_dir: Optional[str] = None
    kotlin_version: Optional[str] = None
    python: Optional[str] = None
    classpath: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    repositories: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DslSettings:
    """Effective settings for one generation (the plugin's extension object)."""

    project_root: Path
    teamcity_version: str
    format: str
    base_dir: Path
    dest_dir: Path
    kotlin_version: str = DEFAULT_KOTLIN_VERSION
    python: Optional[str] = None
    classpath: List[Path] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    repositories: List[str] = field(default_factory=lambda: list(DEFAULT_REPOSITORIES))


def default_config_path() -> Path:
    dirs = PlatformDirs(appname=DEFAULT_CACHE_DIR_NAME, appauthor=False)
    return Path(dirs.user_config_path) / "config.toml"


def resolve_config_path(project_root: Optional[Path] = None) -> Path:
    env_value = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if env_value:
        return Path(env_value).expanduser()
    if project_root is not None:
        project_file = project_root / CONFIG_FILENAME
        if project_file.exists():
            return project_file
    return default_config_path()


def load_config(path: Optional[Path] = None, *, project_root: Optional[Path] = None) -> ConfigFile:
    config_path = path or resolve_config_path(project_root)
    if not config_path.exists():
        return ConfigFile()
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"failed to read config file {config_path}: {exc}") from exc
    except Exception as exc:
        raise CLIError(f"failed to parse config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        return ConfigFile()
    return ConfigFile(
        teamcity_version=safe_str(first_present(data, "teamcity_version", "teamcityVersion")),
        format=safe_str(data.get("format")),
        base_dir=safe_str(first_present(data, "base_dir", "baseDir")),
        dest_dir=safe_str(first_present(data, "dest_dir", "destDir")),
        build_dir=safe_str(first_present(data, "build_dir", "buildDir")),
        kotlin_version=safe_str(first_present(data, "kotlin_version", "kotlinVersion")),
        python=safe_str(data.get("python")),
        classpath=safe_str_list(data.get("classpath")),
        dependencies=safe_str_list(data.get("dependencies")),
        repositories=safe_str_list(data.get("repositories")),
    )


def build_settings(
    project_root: Path,
    config: ConfigFile,
    *,
    teamcity_version: Optional[str] = None,
    format: Optional[str] = None,
    base_dir: Optional[str] = None,
    dest_dir: Optional[str] = None,
    python: Optional[str] = None,
    classpath: Optional[List[str]] = None,
    dependencies: Optional[List[str]] = None,
) -> DslSettings:
    """Merge CLI values, environment and config file into effective settings."""
    root = project_root.expanduser().resolve()
    version = (
        safe_str(teamcity_version)
        or safe_str(os.environ.get(VERSION_ENV_VAR))
        or config.teamcity_version
        or DEFAULT_TEAMCITY_VERSION
    )
    build_root = resolve_against(root, config.build_dir) or root / DEFAULT_BUILD_DIR_NAME
    base = resolve_against(root, safe_str(base_dir) or config.base_dir) or root / DEFAULT_BASE_DIR_NAME
    dest = resolve_against(root, safe_str(dest_dir) or config.dest_dir) or build_root / DEFAULT_DEST_DIR_NAME
    entries = list(classpath) if classpath else list(config.classpath)
    return DslSettings(
        project_root=root,
        teamcity_version=version,
        format=safe_str(format) or config.format or DEFAULT_FORMAT,
        base_dir=base,
        dest_dir=dest,
        kotlin_version=config.kotlin_version or DEFAULT_KOTLIN_VERSION,
        python=safe_str(python) or safe_str(os.environ.get(PYTHON_ENV_VAR)) or config.python,
        classpath=[resolve_against(root, entry) or root for entry in entries],
        dependencies=[*config.dependencies, *(dependencies or [])],
        repositories=list(config.repositories) or list(DEFAULT_REPOSITORIES),
    )


def settings_summary(settings: DslSettings) -> Dict[str, Any]:
    return {
        "project_root": str(settings.project_root),
        "teamcity_version": settings.teamcity_version,
        "format": settings.format,
        "base_dir": str(settings.base_dir),
        "dest_dir": str(settings.dest_dir),
        "kotlin_version": settings.kotlin_version,
        "python": settings.python,
        "classpath": [str(entry) for entry in settings.classpath],
        "dependencies": list(settings.dependencies),
        "repositories": list(settings.repositories),
    }


def config_template() -> str:
    return (
        "# teamcity_dsl configuration (TOML)\n"
        "#\n"
        "# Precedence (highest -> lowest):\n"
        "#   CLI flags > environment variables > this file > built-in defaults\n"
        "\n"
        f"# teamcity_version = \"{DEFAULT_TEAMCITY_VERSION}\"\n"
        f"# format = \"{DEFAULT_FORMAT}\"\n"
        f"# base_dir = \"{DEFAULT_BASE_DIR_NAME}\"\n"
        f"# dest_dir = \"{DEFAULT_BUILD_DIR_NAME}/{DEFAULT_DEST_DIR_NAME}\"\n"
        f"# kotlin_version = \"{DEFAULT_KOTLIN_VERSION}\"\n"
        "\n"
        "# Explicit DSL-library classpath; skips dependency resolution when set.\n"
        "# classpath = [\"libs/configs-dsl-kotlin.jar\", \"libs/kotlin-stdlib-1.0.3.jar\"]\n"
        "\n"
        "# Extra libraries (group:artifact:version) and repositories.\n"
        "# dependencies = [\"org.example:teamcity-dsl-extras:1.0\"]\n"
        "# repositories = [\"https://repo1.maven.org/maven2\"]\n"
        "\n"
        "# python = \"python3\"\n"
    )


def write_default_config(path: Path, *, force: bool) -> Path:
    if path.exists() and not force:
        raise CLIError(f"config file already exists: {path} (use --force to overwrite)")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config_template(), encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"failed to write config file {path}: {exc}") from exc
    return path

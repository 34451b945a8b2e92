"""Command handlers tying settings, dependency resolution and the runner together."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from .args import DependenciesArgs, GenerateArgs
from .config import DslSettings, build_settings, load_config
from .console import log, logs_to_stderr
from .dependencies import Coordinate, default_dependencies, resolve_dependencies
from .dispatch import select_adapter
from .runner import GenerationRequest, GenerationRunner


def _load_settings(
    project_dir: str,
    config_path: Optional[str],
    **overrides: Any,
) -> DslSettings:
    root = Path(project_dir).expanduser().resolve()
    config = load_config(Path(config_path).expanduser() if config_path else None, project_root=root)
    return build_settings(root, config, **overrides)


def dependency_coordinates(settings: DslSettings) -> List[Coordinate]:
    coordinates = default_dependencies(settings.teamcity_version, settings.kotlin_version)
    coordinates.extend(Coordinate.parse(notation) for notation in settings.dependencies)
    return coordinates


def dsl_classpath(settings: DslSettings) -> List[Path]:
    """Explicit classpath entries win; otherwise resolve the version's libraries."""
    if settings.classpath:
        extra = [Coordinate.parse(notation) for notation in settings.dependencies]
        resolved = resolve_dependencies(extra, settings.repositories) if extra else []
        return [*settings.classpath, *resolved]
    return resolve_dependencies(dependency_coordinates(settings), settings.repositories)


def generation_request(settings: DslSettings) -> GenerationRequest:
    return GenerationRequest(
        version=settings.teamcity_version,
        format=settings.format,
        base_dir=settings.base_dir,
        dest_dir=settings.dest_dir,
    )


def handle_generate(args: GenerateArgs) -> int:
    settings = _load_settings(
        args.project_dir,
        args.config,
        teamcity_version=args.teamcity_version,
        format=args.format,
        base_dir=args.base_dir,
        dest_dir=args.dest_dir,
        python=args.python,
        classpath=args.classpath,
        dependencies=args.dependencies,
    )
    request = generation_request(settings)
    select_adapter(request.version)
    runner = GenerationRunner(
        dsl_classpath(settings),
        project_root=settings.project_root,
        interpreter=settings.python,
    )
    runner.execute(request)
    log(f"TeamCity configurations written to {settings.dest_dir}")
    return 0


def handle_dependencies(args: DependenciesArgs, *, as_json: bool = False) -> int:
    settings = _load_settings(
        args.project_dir,
        args.config,
        teamcity_version=args.teamcity_version,
    )
    coordinates = dependency_coordinates(settings)
    if args.resolve:
        with logs_to_stderr():
            resolved = resolve_dependencies(coordinates, settings.repositories)
        entries = [str(path) for path in resolved]
    else:
        entries = [str(coordinate) for coordinate in coordinates]
    if as_json:
        print(json.dumps(entries, indent=2))
        return 0
    for entry in entries:
        print(entry)
    return 0

#!/usr/bin/env python3
"""teamcity_dsl CLI entry point."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import click
import typer

from . import __version__
from .args import DependenciesArgs, GenerateArgs
from .config import (
    build_settings,
    load_config,
    resolve_config_path,
    settings_summary,
    write_default_config,
)
from .console import configure_console, log, log_error
from .constants import (
    CONFIG_FILENAME,
    DEFAULT_TEAMCITY_VERSION,
    EXIT_CODE_INTERRUPT,
    EXIT_CODE_SUBPROCESS,
    EXIT_CODE_USAGE,
    PACKAGE_NAME,
)
from .dispatch import select_adapter
from .errors import BuildFailure, CLIError
from .generator import handle_dependencies, handle_generate

app = typer.Typer(help="Generate TeamCity configurations from settings DSL sources")
config_app = typer.Typer(help="Configuration file helpers")
app.add_typer(config_app, name="config")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PACKAGE_NAME} {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def cli_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="show the teamcity_dsl version and exit",
    ),
) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=EXIT_CODE_USAGE)


@app.command()
def generate(
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="project root directory"),
    teamcity_version: Optional[str] = typer.Option(
        None,
        "--teamcity-version",
        help=f"target TeamCity server version (default: {DEFAULT_TEAMCITY_VERSION})",
    ),
    format: Optional[str] = typer.Option(None, "--format", help="settings format (default: kotlin)"),
    base_dir: Optional[str] = typer.Option(
        None, "--base-dir", help="DSL sources directory (default: <project>/.teamcity)"
    ),
    dest_dir: Optional[str] = typer.Option(
        None,
        "--dest-dir",
        help="output directory (default: <project>/build/generated-configs)",
    ),
    classpath: List[str] = typer.Option(
        [],
        "--classpath",
        "-c",
        help="DSL library path (repeatable); skips dependency resolution",
    ),
    dependency: List[str] = typer.Option(
        [],
        "--dependency",
        help="extra DSL library as group:artifact:version (repeatable)",
    ),
    python: Optional[str] = typer.Option(
        None, "--python", help="interpreter running the generator (default: current)"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", help=f"config file (default: <project>/{CONFIG_FILENAME})"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="only print errors"),
) -> None:
    args = GenerateArgs(
        project_dir=project_dir,
        teamcity_version=teamcity_version,
        format=format,
        base_dir=base_dir,
        dest_dir=dest_dir,
        classpath=list(classpath),
        dependencies=list(dependency),
        python=python,
        config=config,
        quiet=quiet,
    )
    if quiet:
        configure_console(quiet=True)
    try:
        rc = handle_generate(args)
    except BuildFailure as exc:
        log_error(str(exc))
        raise typer.Exit(code=EXIT_CODE_SUBPROCESS) from exc
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    raise typer.Exit(code=rc)


@app.command()
def dependencies(
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="project root directory"),
    teamcity_version: Optional[str] = typer.Option(
        None, "--teamcity-version", help="target TeamCity server version"
    ),
    config: Optional[str] = typer.Option(None, "--config", help="config file"),
    resolve: bool = typer.Option(
        False, "--resolve", help="download the libraries and print their paths"
    ),
    as_json: bool = typer.Option(False, "--json", help="print a JSON array"),
) -> None:
    args = DependenciesArgs(
        project_dir=project_dir,
        teamcity_version=teamcity_version,
        config=config,
        resolve=resolve,
    )
    try:
        rc = handle_dependencies(args, as_json=as_json)
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    raise typer.Exit(code=rc)


@app.command()
def adapter(
    teamcity_version: str = typer.Option(
        DEFAULT_TEAMCITY_VERSION, "--teamcity-version", help="target TeamCity server version"
    ),
) -> None:
    try:
        selection = select_adapter(teamcity_version)
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    typer.echo(f"{selection.name} {selection.module}")


@config_app.command("init")
def config_init(
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="project root directory"),
    force: bool = typer.Option(False, "--force", help="overwrite an existing file"),
) -> None:
    path = Path(project_dir).expanduser() / CONFIG_FILENAME
    try:
        written = write_default_config(path, force=force)
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    log(f"wrote {written}")


@config_app.command("show")
def config_show(
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="project root directory"),
    config: Optional[str] = typer.Option(None, "--config", help="config file"),
) -> None:
    root = Path(project_dir).expanduser().resolve()
    path = Path(config).expanduser() if config else resolve_config_path(root)
    try:
        settings = build_settings(root, load_config(path, project_root=root))
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    payload = {"config_path": str(path), **settings_summary(settings)}
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def main(argv: Optional[Sequence[str]] = None) -> int:
    command = typer.main.get_command(app)
    try:
        rc = command.main(
            args=list(argv) if argv is not None else None,
            prog_name="teamcity-dsl",
            standalone_mode=False,
        )
    except (KeyboardInterrupt, typer.Abort):
        log_error("interrupted")
        return EXIT_CODE_INTERRUPT
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return int(exc.code or 0)
    return rc if isinstance(rc, int) else 0


if __name__ == "__main__":
    sys.exit(main())

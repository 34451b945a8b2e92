"""Argument models shared across teamcity_dsl modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class GenerateArgs:
    """Arguments for `teamcity-dsl generate`."""

    project_dir: str = "."
    teamcity_version: Optional[str] = None
    format: Optional[str] = None
    base_dir: Optional[str] = None
    dest_dir: Optional[str] = None
    classpath: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    python: Optional[str] = None
    config: Optional[str] = None
    quiet: bool = False


@dataclass
class DependenciesArgs:
    """Arguments for `teamcity-dsl dependencies`."""

    project_dir: str = "."
    teamcity_version: Optional[str] = None
    config: Optional[str] = None
    resolve: bool = False

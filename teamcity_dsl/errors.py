"""Error types for teamcity_dsl."""

from __future__ import annotations


class CLIError(Exception):
    """Raised for user-facing CLI errors."""


class UnsupportedVersion(CLIError):
    """The TeamCity version cannot be mapped to a generator adapter."""


class InvalidRequest(CLIError):
    """A generation request failed its preconditions."""


class NotAJar(CLIError, ValueError):
    """A Kotlin library name was given without the .jar suffix."""


class MissingKotlinLib(CLIError):
    """A required Kotlin library is not on the DSL classpath."""


class BuildFailure(Exception):
    """The generator process failed; carries the user-facing report message."""

"""Generate TeamCity XML configurations from settings DSL sources."""

__version__ = "0.1.0"

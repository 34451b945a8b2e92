"""Generator entry point for TeamCity 10.x."""

from __future__ import annotations

import sys
from typing import Any, Optional, Sequence

from ..framework import ClasspathPluginJars
from .common import Adapter, run


class V10Adapter(Adapter):
    name = "teamcity_dsl.adapters.v10"
    error_prefix = "Error while generating TeamCity configs"

    def create_generator(self) -> Any:
        kotlin = self.framework.kotlin
        plugin_jars = ClasspathPluginJars(self.args.classpath_entries)
        return kotlin.KotlinConfigGenerator(
            class_path=kotlin.KotlinClassPath(),
            plugin_jars=plugin_jars,
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(V10Adapter, argv)


if __name__ == "__main__":
    sys.exit(main())

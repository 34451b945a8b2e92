"""Generator entry point for TeamCity 2017.1.x."""

from __future__ import annotations

import sys
from typing import Any, Optional, Sequence

from ..framework import ClasspathPluginJars
from .common import Adapter, load_converters, run


class V2017_1Adapter(Adapter):
    name = "teamcity_dsl.adapters.v2017_1"

    def create_generator(self) -> Any:
        dsl = self.framework.dsl
        kotlin = self.framework.kotlin
        settings = self.framework.settings

        plugin_jars = ClasspathPluginJars(self.args.classpath_entries)
        converters = load_converters(dsl)
        empty = dsl.EMPTY_PARAMETERS
        launcher = dsl.DslLauncher(
            defaults=dsl.DefaultsProviders(empty, empty, empty, empty),
            converters=converters,
            plugin_jars=plugin_jars,
        )
        default_generator = dsl.XmlProjectSettingsGenerator(settings.VersionedSettingsOptions())
        return kotlin.KotlinConfigGenerator(
            registry=dsl.ProjectSettingsGeneratorRegistry(),
            extensions=kotlin.KotlinDslExtensions(),
            default_generator=default_generator,
            class_path=kotlin.KotlinClassPath(),
            launcher=launcher,
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(V2017_1Adapter, argv)


if __name__ == "__main__":
    sys.exit(main())

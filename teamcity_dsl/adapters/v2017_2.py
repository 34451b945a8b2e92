"""Generator entry point for TeamCity 2017.2 and every later release."""

from __future__ import annotations

import shutil
import sys
from typing import Any, List, Optional, Sequence

from ..classpath import KotlinLibs, defining_entry, generator_input_classpath
from ..framework import ClasspathPluginJars, EmptyPluginManager
from .common import Adapter, emit, emit_traceback, load_converters, run


class V2017_2Adapter(Adapter):
    name = "teamcity_dsl.adapters.v2017_2"

    def prepare(self) -> None:
        dest_dir = self.args.dest_dir
        if dest_dir.is_dir():
            shutil.rmtree(dest_dir)
        elif dest_dir.exists():
            dest_dir.unlink()

    def plugin_jars(self, kotlin_libs: KotlinLibs) -> ClasspathPluginJars:
        entries = self.args.classpath_entries
        excluded = set(kotlin_libs.core_jars())
        context_entry = defining_entry(self.framework.kotlin.Context, entries)
        if context_entry is not None:
            excluded.add(context_entry)
        return ClasspathPluginJars(generator_input_classpath(entries, excluded))

    def create_generator(self) -> Any:
        dsl = self.framework.dsl
        kotlin = self.framework.kotlin
        settings = self.framework.settings

        kotlin_libs = KotlinLibs(self.args.classpath_entries)
        plugin_jars = self.plugin_jars(kotlin_libs)
        converters = load_converters(dsl)
        tracker = kotlin.KotlinReadOnlyReasonTracker()
        empty = dsl.EMPTY_PARAMETERS
        launcher = dsl.DslLauncher(
            defaults=dsl.DefaultsProviders(empty, empty, empty, empty),
            converters=converters,
            plugin_jars=plugin_jars,
            data_manager=dsl.NO_OP_DATA_MANAGER,
            plugin_manager=EmptyPluginManager(),
            dependencies=dsl.NO_OP_DEPENDENCIES,
            read_only_tracker=tracker,
        )
        default_generator = dsl.XmlProjectSettingsGenerator(settings.VersionedSettingsOptions())
        return kotlin.KotlinConfigGenerator(
            registry=dsl.ProjectSettingsGeneratorRegistry(),
            extensions=kotlin.KotlinDslExtensions(),
            default_generator=default_generator,
            class_path=kotlin.KotlinClassPath(kotlin_libs),
            launcher=launcher,
            read_only_tracker=tracker,
        )

    def generate(self, generator: Any) -> None:
        options = self.framework.settings.GenOptions()
        options.server_settings_update = False
        generator.generate(self.source_root(), self.output_builder(), options)

    def report_error(self, exc: Exception) -> None:
        if not isinstance(exc, self.framework.settings.VersionedSettingsException):
            super().report_error(exc)
            return
        errors: List[Any] = list(getattr(exc, "errors", None) or [])
        if not errors:
            emit(f"{self.error_prefix}: {exc}")
            emit_traceback(exc)
            return
        emit(f"{self.error_prefix}:")
        for error in errors:
            emit(str(error.description))


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(V2017_2Adapter, argv)


if __name__ == "__main__":
    sys.exit(main())

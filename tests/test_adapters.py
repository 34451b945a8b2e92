import logging
import os
import sys
from pathlib import Path

import pytest

import teamcity_dsl.adapters.v10 as v10
import teamcity_dsl.adapters.v2017_1 as v2017_1
import teamcity_dsl.adapters.v2017_2 as v2017_2
from teamcity_dsl.adapters.common import Adapter, AdapterArgs, parse_args
from teamcity_dsl.classpath import KotlinLibs, join_classpath


def _argv(project: Path, classpath, fmt: str = "kotlin", dest: str = "build/cfg"):
    return [fmt, str(project / ".teamcity"), str(project / dest), join_classpath(classpath)]


def test_parse_args_requires_four_arguments():
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["kotlin", "base", "dest"], prog="adapter")
    assert excinfo.value.code == 2


def test_parse_args_splits_classpath():
    args = parse_args(["kotlin", "base", "dest", f"a.jar{os.pathsep}b.jar"], prog="x")
    assert args.base_dir == Path("base")
    assert args.classpath_entries == ["a.jar", "b.jar"]


def test_adapter_without_generator_cannot_be_created():
    class Incomplete(Adapter):
        name = "teamcity_dsl.adapters.incomplete"

    args = AdapterArgs(format="kotlin", base_dir=Path("base"), dest_dir=Path("dest"), classpath="")
    with pytest.raises(TypeError):
        Incomplete(args, framework=None)


def test_v10_generates_configs(fake_framework, make_project, dsl_classpath, capsys):
    project = make_project("project: Root", "project: Sub")

    assert v10.main(_argv(project, dsl_classpath)) == 0

    dest = project / "build" / "cfg"
    assert (dest / "Root" / "project-config.xml").is_file()
    assert (dest / "Sub" / "project-config.xml").is_file()
    assert not (dest / "dsl_exception.xml").exists()

    import configs_dsl.kotlin as kotlin

    collaborators = kotlin.LAST_GENERATOR.collaborators
    assert collaborators["plugin_jars"].jar_locations() == dsl_classpath
    assert capsys.readouterr().out == ""


def test_process_initialization_runs_once(fake_framework, make_project, dsl_classpath):
    project = make_project()

    assert v10.main(_argv(project, dsl_classpath)) == 0
    assert v10.main(_argv(project, dsl_classpath)) == 0

    import configs_dsl.process as process

    assert process.CALLS == {"disable_logging": 1, "init_teamcity_properties": 1}
    assert logging.getLogger("configs_dsl").disabled


def test_v10_error_prefix(fake_framework, make_project, dsl_classpath, capsys):
    project = make_project("fail: broken settings")

    assert v10.main(_argv(project, dsl_classpath)) == 1

    out = capsys.readouterr().out
    assert "Error while generating TeamCity configs: broken settings" in out
    assert (project / "build" / "cfg" / "dsl_exception.xml").is_file()


def test_v2017_1_generator_failure_prints_trace(fake_framework, make_project, dsl_classpath, capsys):
    project = make_project("project: Root", "fail: unresolved reference: foo")

    assert v2017_1.main(_argv(project, dsl_classpath)) == 1

    out = capsys.readouterr().out
    assert "Error while generating TeamCity configurations: unresolved reference: foo" in out
    assert "Traceback" in out
    assert (project / "build" / "cfg" / "dsl_exception.xml").is_file()


def test_v2017_1_wires_launcher(fake_framework, make_project, dsl_classpath):
    project = make_project()

    assert v2017_1.main(_argv(project, dsl_classpath)) == 0

    import configs_dsl.dsl as dsl
    import configs_dsl.kotlin as kotlin

    collaborators = kotlin.LAST_GENERATOR.collaborators
    launcher = collaborators["launcher"]
    assert isinstance(launcher, dsl.DslLauncher)
    assert launcher.collaborators["converters"].entries
    assert launcher.collaborators["plugin_jars"].jar_locations() == dsl_classpath
    assert launcher.collaborators["defaults"].providers == (dsl.EMPTY_PARAMETERS,) * 4
    assert isinstance(collaborators["default_generator"], dsl.XmlProjectSettingsGenerator)
    assert collaborators["class_path"].kotlin_libs is None


def test_converters_fall_back_to_empty_catalog(
    fake_framework, make_project, dsl_classpath, monkeypatch, capsys
):
    import configs_dsl.dsl as dsl
    import configs_dsl.kotlin as kotlin

    def broken_catalog(cls):
        raise OSError("converters.xml is missing")

    monkeypatch.setattr(dsl.Converters, "read_from_resources", classmethod(broken_catalog))
    project = make_project()

    assert v2017_1.main(_argv(project, dsl_classpath)) == 0

    out = capsys.readouterr().out
    assert "Error while initializing configuration converters converters.xml is missing" in out
    launcher = kotlin.LAST_GENERATOR.collaborators["launcher"]
    assert launcher.collaborators["converters"].entries == {}


def test_v2017_2_unknown_format(fake_framework, make_project, dsl_classpath, capsys):
    project = make_project()
    dest = project / "build" / "cfg"
    dest.mkdir(parents=True)
    (dest / "old.xml").write_text("<old/>", encoding="utf-8")

    assert v2017_2.main(_argv(project, dsl_classpath, fmt="groovy")) == 1

    assert "Cannot find generator for settings format 'groovy'" in capsys.readouterr().out
    assert not dest.exists()


def test_v2017_2_prints_structured_errors(fake_framework, make_project, dsl_classpath, capsys):
    project = make_project("project: Root", "error: E1", "error: E2")

    assert v2017_2.main(_argv(project, dsl_classpath)) == 1

    lines = capsys.readouterr().out.splitlines()
    banner = lines.index("Error while generating TeamCity configurations:")
    assert lines[banner + 1 : banner + 3] == ["E1", "E2"]
    assert not any(line.startswith("Traceback") for line in lines)


def test_v2017_2_exception_without_errors_prints_trace(
    fake_framework, tmp_path, dsl_classpath, capsys
):
    project = tmp_path / "empty"
    (project / ".teamcity").mkdir(parents=True)

    assert v2017_2.main(_argv(project, dsl_classpath)) == 1

    out = capsys.readouterr().out
    assert "Error while generating TeamCity configurations: no settings.kts found" in out
    assert "Traceback" in out


def test_v2017_2_filters_plugin_jars(fake_framework, make_project, dsl_classpath, dsl_libs):
    project = make_project()

    assert v2017_2.main(_argv(project, dsl_classpath)) == 0

    import configs_dsl.kotlin as kotlin

    generator = kotlin.LAST_GENERATOR
    launcher = generator.collaborators["launcher"]
    assert launcher.collaborators["plugin_jars"].jar_locations() == [
        dsl_libs["configs-dsl-kotlin-plugin-1.0.jar"]
    ]
    assert generator.plugin_jars() == [str(dsl_libs["configs-dsl-kotlin-plugin-1.0.jar"])]
    assert generator.options.server_settings_update is False
    assert isinstance(generator.collaborators["class_path"].kotlin_libs, KotlinLibs)
    assert launcher.collaborators["read_only_tracker"] is generator.collaborators["read_only_tracker"]
    assert launcher.collaborators["plugin_manager"].plugin_dirs() == []


def test_v2017_2_requires_kotlin_libs(fake_framework, make_project, capsys):
    project = make_project()

    assert v2017_2.main(_argv(project, [fake_framework])) == 1

    assert "cannot find jar kotlin-runtime on the DSL classpath" in capsys.readouterr().out


def test_adapter_reports_missing_framework(monkeypatch, make_project, capsys):
    monkeypatch.setitem(sys.modules, "configs_dsl", None)
    project = make_project()

    assert v2017_2.main(_argv(project, [])) == 1

    out = capsys.readouterr().out
    assert "settings DSL framework is not on the classpath" in out

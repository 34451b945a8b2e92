import json

from typer.testing import CliRunner

import teamcity_dsl
import teamcity_dsl.cli as cli
import teamcity_dsl.constants as constants
import teamcity_dsl.generator as generator
from teamcity_dsl.report import FAILURE_MESSAGE

runner = CliRunner()


def _classpath_args(entries):
    args = []
    for entry in entries:
        args.extend(["--classpath", str(entry)])
    return args


def test_cli_help_invocation():
    result = runner.invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.stdout


def test_cli_version_flag():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"teamcity_dsl {teamcity_dsl.__version__}"


def test_cli_without_command_shows_help():
    result = runner.invoke(cli.app, [])
    assert result.exit_code == constants.EXIT_CODE_USAGE
    assert "Commands" in result.stdout


def test_main_returns_interrupt_code_on_keyboard_interrupt(monkeypatch):
    class FakeCommand:
        def main(self, *args, **kwargs):
            raise KeyboardInterrupt

    monkeypatch.setattr(cli.typer.main, "get_command", lambda _app: FakeCommand())
    assert cli.main(["generate"]) == constants.EXIT_CODE_INTERRUPT


def test_main_returns_interrupt_code_on_abort(monkeypatch):
    class FakeCommand:
        def main(self, *args, **kwargs):
            raise cli.typer.Abort()

    monkeypatch.setattr(cli.typer.main, "get_command", lambda _app: FakeCommand())
    assert cli.main(["generate"]) == constants.EXIT_CODE_INTERRUPT


def test_main_returns_usage_code_for_bad_options(capsys):
    assert cli.main(["generate", "--no-such-option"]) == constants.EXIT_CODE_USAGE


def test_cli_adapter_command():
    result = runner.invoke(cli.app, ["adapter", "--teamcity-version", "2023.5"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "V2017_2 teamcity_dsl.adapters.v2017_2"

    result = runner.invoke(cli.app, ["adapter", "--teamcity-version", "10.0.5"])
    assert result.stdout.strip() == "V10 teamcity_dsl.adapters.v10"


def test_cli_adapter_rejects_blank_version():
    result = runner.invoke(cli.app, ["adapter", "--teamcity-version", " "])
    assert result.exit_code == constants.EXIT_CODE_USAGE
    assert "must not be empty" in result.output


def test_cli_config_init_and_show(tmp_path):
    result = runner.invoke(cli.app, ["config", "init", "--project-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert (tmp_path / constants.CONFIG_FILENAME).is_file()

    result = runner.invoke(cli.app, ["config", "init", "--project-dir", str(tmp_path)])
    assert result.exit_code == constants.EXIT_CODE_USAGE
    assert "already exists" in result.output

    (tmp_path / constants.CONFIG_FILENAME).write_text(
        'teamcity_version = "2017.1.5"\ndest_dir = "out"\n', encoding="utf-8"
    )
    result = runner.invoke(cli.app, ["config", "show", "--project-dir", str(tmp_path)])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["config_path"] == str(tmp_path.resolve() / constants.CONFIG_FILENAME)
    assert payload["teamcity_version"] == "2017.1.5"
    assert payload["dest_dir"] == str(tmp_path.resolve() / "out")


def test_cli_dependencies_lists_coordinates(tmp_path):
    result = runner.invoke(
        cli.app,
        ["dependencies", "--project-dir", str(tmp_path), "--teamcity-version", "2017.2", "--json"],
    )
    assert result.exit_code == 0
    notations = json.loads(result.stdout)
    assert "org.jetbrains.teamcity:configs-dsl-kotlin:2017.2" in notations
    assert notations[0] == f"org.jetbrains.kotlin:kotlin-stdlib:{constants.DEFAULT_KOTLIN_VERSION}"


def test_cli_dependencies_resolve_prints_paths(tmp_path, monkeypatch):
    def fake_resolve(coordinates, repositories):
        return [tmp_path / coordinate.filename for coordinate in coordinates]

    monkeypatch.setattr(generator, "resolve_dependencies", fake_resolve)
    result = runner.invoke(
        cli.app, ["dependencies", "--project-dir", str(tmp_path), "--resolve", "--json"]
    )
    assert result.exit_code == 0
    paths = json.loads(result.stdout)
    assert paths[0] == str(tmp_path / f"kotlin-stdlib-{constants.DEFAULT_KOTLIN_VERSION}.jar")


def test_cli_dependencies_rejects_bad_notation(tmp_path):
    (tmp_path / constants.CONFIG_FILENAME).write_text('dependencies = ["broken"]\n', encoding="utf-8")
    result = runner.invoke(cli.app, ["dependencies", "--project-dir", str(tmp_path)])
    assert result.exit_code == constants.EXIT_CODE_USAGE
    assert "invalid dependency notation" in result.output


def test_cli_generate_success(make_project, dsl_classpath):
    project = make_project("project: Root")
    result = runner.invoke(
        cli.app,
        [
            "generate",
            "--project-dir",
            str(project),
            "--teamcity-version",
            "2017.2.3",
            *_classpath_args(dsl_classpath),
        ],
    )
    assert result.exit_code == 0, result.output
    dest = project / "build" / "generated-configs"
    assert (dest / "Root" / "project-config.xml").is_file()
    assert "Generate TeamCity configurations in kotlin format from .teamcity to " in result.output
    assert "TeamCity configurations written to" in result.output


def test_cli_generate_failure_exit_code(make_project, dsl_classpath):
    project = make_project("fail: cannot compile settings")
    result = runner.invoke(
        cli.app,
        ["generate", "--project-dir", str(project), "--quiet", *_classpath_args(dsl_classpath)],
    )
    assert result.exit_code == constants.EXIT_CODE_SUBPROCESS
    assert FAILURE_MESSAGE in result.output
    assert "dsl_exception.xml" in result.output
    assert "cannot compile settings" in result.output
    assert "Generate TeamCity configurations in" not in result.output


def test_cli_generate_quiet_unknown_format_shows_child_message(make_project, dsl_classpath):
    project = make_project()
    result = runner.invoke(
        cli.app,
        [
            "generate",
            "--project-dir",
            str(project),
            "--teamcity-version",
            "2018.1",
            "--format",
            "groovy",
            "--quiet",
            *_classpath_args(dsl_classpath),
        ],
    )
    assert result.exit_code == constants.EXIT_CODE_SUBPROCESS
    assert "Cannot find generator for settings format 'groovy'" in result.output
    assert FAILURE_MESSAGE in result.output


def test_cli_generate_rejects_dest_containing_sources(make_project, dsl_classpath):
    project = make_project()
    result = runner.invoke(
        cli.app,
        [
            "generate",
            "--project-dir",
            str(project),
            "--teamcity-version",
            "2018.1",
            "--dest-dir",
            ".",
            *_classpath_args(dsl_classpath),
        ],
    )
    assert result.exit_code == constants.EXIT_CODE_USAGE
    assert "must not contain the settings directory" in result.output
    assert (project / ".teamcity" / "settings.kts").is_file()


def test_cli_generate_missing_settings_dir(tmp_path, dsl_classpath):
    result = runner.invoke(
        cli.app,
        ["generate", "--project-dir", str(tmp_path), *_classpath_args(dsl_classpath)],
    )
    assert result.exit_code == constants.EXIT_CODE_USAGE
    assert "settings directory does not exist" in result.output

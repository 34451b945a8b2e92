"""Shared constants for teamcity_dsl."""

from __future__ import annotations

from typing import Dict, List

PACKAGE_NAME = "teamcity_dsl"
DISTRIBUTION_NAME = "teamcity-dsl"

DEFAULT_TEAMCITY_VERSION = "10.0.5"
DEFAULT_KOTLIN_VERSION = "1.0.3"
DEFAULT_FORMAT = "kotlin"
KOTLIN_FORMAT = "kotlin"
DEFAULT_BASE_DIR_NAME = ".teamcity"
DEFAULT_BUILD_DIR_NAME = "build"
DEFAULT_DEST_DIR_NAME = "generated-configs"
DSL_EXCEPTION_FILENAME = "dsl_exception.xml"
CONFIG_FILENAME = "teamcity-dsl.toml"
DEFAULT_CACHE_DIR_NAME = "teamcity_dsl"

CONFIG_ENV_VAR = "TEAMCITY_DSL_CONFIG"
CACHE_ENV_VAR = "TEAMCITY_DSL_CACHE_DIR"
VERSION_ENV_VAR = "TEAMCITY_DSL_VERSION"
PYTHON_ENV_VAR = "TEAMCITY_DSL_PYTHON"

EXIT_CODE_SUBPROCESS = 1
EXIT_CODE_USAGE = 2
EXIT_CODE_INTERRUPT = 130

HTTP_TIMEOUT_SECONDS = 30.0

MAVEN_CENTRAL_REPOSITORY = "https://repo1.maven.org/maven2"
JETBRAINS_MAVEN_REPOSITORY = "https://download.jetbrains.com/teamcity-repository"
DEFAULT_REPOSITORIES: List[str] = [MAVEN_CENTRAL_REPOSITORY, JETBRAINS_MAVEN_REPOSITORY]

DSL_PLUGIN_VERSION = "1.0-SNAPSHOT"
DSL_PLUGIN_ARTIFACTS = [
    "configs-dsl-kotlin-ant",
    "configs-dsl-kotlin-bugzilla",
    "configs-dsl-kotlin-bundled",
    "configs-dsl-kotlin-charisma",
    "configs-dsl-kotlin-commandLineRunner",
    "configs-dsl-kotlin-commit-status-publisher",
    "configs-dsl-kotlin-dotNetRunners",
    "configs-dsl-kotlin-file-content-replacer",
    "configs-dsl-kotlin-gradle",
    "configs-dsl-kotlin-jetbrains.git",
    "configs-dsl-kotlin-jira",
    "configs-dsl-kotlin-Maven2",
    "configs-dsl-kotlin-mercurial",
    "configs-dsl-kotlin-perforce",
    "configs-dsl-kotlin-ssh-manager",
    "configs-dsl-kotlin-svn",
    "configs-dsl-kotlin-swabra",
    "configs-dsl-kotlin-teamcity-powershell",
    "configs-dsl-kotlin-tfs",
    "configs-dsl-kotlin-visualstudiotest",
]

# Modules of the external DSL framework, loaded from the DSL-library classpath.
FRAMEWORK_MODULES: Dict[str, str] = {
    "process": "configs_dsl.process",
    "settings": "configs_dsl.settings",
    "dsl": "configs_dsl.dsl",
    "kotlin": "configs_dsl.kotlin",
}
FRAMEWORK_LOGGER_NAME = "configs_dsl"

KOTLIN_COMPILER_JAR = "kotlin-compiler-embeddable.jar"
KOTLIN_RUNTIME_JAR = "kotlin-runtime.jar"
KOTLIN_STDLIB_JAR = "kotlin-stdlib.jar"
KOTLIN_SCRIPT_RUNTIME_JAR = "kotlin-script-runtime.jar"
KOTLIN_REFLECT_JAR = "kotlin-reflect.jar"

# File name prefixes never handed to the generator as plugin jars.
GENERATOR_EXCLUDED_PREFIXES = ("kotlin-compiler-embeddable", "dokka-fatjar")
JAR_SUFFIX = ".jar"

MAX_CAPTURE_CHARS = 200_000

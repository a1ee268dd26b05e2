import json

import pytest

from keyguardian.config import CONFIG_ENV_VAR, ConfigError, find_config_file, load_config
from keyguardian.models import Severity

from .helpers import write


def test_missing_config_uses_defaults(project):
    config = load_config(root=project)

    assert config.ignored_files == []
    assert config.ignored_extensions == []
    assert config.custom_patterns == []


def test_legacy_json_config_with_camel_case_keys(project):
    write(
        project,
        ".apiguardian.json",
        json.dumps(
            {
                "ignoredFiles": ["dist/", "*.log"],
                "ignoredExtensions": [".svg"],
                "customPatterns": [
                    {"name": "Internal Token", "pattern": "/itk_[a-z]{8}/i", "severity": "HIGH"}
                ],
            }
        ),
    )

    config = load_config(root=project)

    assert config.ignored_files == ["dist/", "*.log"]
    assert config.ignored_extensions == [".svg"]
    assert config.custom_patterns[0].name == "Internal Token"
    assert config.custom_patterns[0].severity == Severity.HIGH


def test_yaml_config_with_snake_case_keys(project):
    write(
        project,
        ".keyguardian.yml",
        "ignored_files:\n"
        "  - fixtures/\n"
        "custom_patterns:\n"
        "  - name: Corp ID\n"
        "    pattern: corp-[0-9]{6}\n"
        "max_workers: 2\n",
    )

    config = load_config(root=project)

    assert config.ignored_files == ["fixtures/"]
    assert config.custom_patterns[0].severity == Severity.MEDIUM
    assert config.max_workers == 2


def test_search_order_prefers_keyguardian_file(project):
    write(project, ".apiguardian.json", "{}")
    preferred = write(project, ".keyguardian.json", "{}")

    assert find_config_file(project) == preferred


def test_environment_variable_overrides_search(project, tmp_path, monkeypatch):
    write(project, ".keyguardian.json", json.dumps({"ignoredFiles": ["a/"]}))
    override = write(tmp_path, "custom.json", json.dumps({"ignoredFiles": ["b/"]}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(override))

    assert load_config(root=project).ignored_files == ["b/"]


def test_empty_json_file_means_defaults(project):
    write(project, ".keyguardian.json", "  \n")

    assert load_config(root=project).ignored_files == []


@pytest.mark.parametrize(
    "name,content",
    [
        (".keyguardian.json", "{not json"),
        (".keyguardian.json", "[1, 2]"),
        (".keyguardian.json", json.dumps({"customPatterns": [{"name": "x", "pattern": "y", "severity": "urgent"}]})),
        (".keyguardian.json", json.dumps({"ignoredFiles": "dist/"})),
        (".keyguardian.yml", "ignored_files: [unclosed"),
    ],
)
def test_malformed_config_raises(project, name, content):
    write(project, name, content)

    with pytest.raises(ConfigError):
        load_config(root=project)


def test_explicit_missing_path_raises(project):
    with pytest.raises(ConfigError, match="not found"):
        load_config(project / "nope.json")

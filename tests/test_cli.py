import json
import shutil

import pytest
from click.testing import CliRunner

from keyguardian.cli import cli

from .helpers import AWS_KEY, write


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_scan_all_reports_findings_and_fails(project):
    write(project, "src/config.js", f'const key = "{AWS_KEY}";\n')

    result = invoke("scan", "--all", "--root", str(project))

    assert result.exit_code == 1
    assert "AWS Access Key" in result.output
    assert "src/config.js" in result.output
    assert "Commit blocked" in result.output


def test_scan_clean_project_succeeds(project):
    write(project, "src/app.py", 'password = "hunter2"\n')

    result = invoke("scan", "--all", "--root", str(project))

    assert result.exit_code == 0
    assert "No API keys or secrets detected" in result.output


def test_scan_json_output(project):
    write(project, "a.py", f"k = '{AWS_KEY}'\n")

    result = invoke("scan", "--all", "--root", str(project), "--format", "json")

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["files_scanned"] == 1
    assert payload["findings"][0]["patternName"] == "AWS Access Key"
    assert payload["findings"][0]["severity"] == "critical"
    assert payload["findings"][0]["line"] == 1


def test_scan_explicit_targets_and_output_file(project, tmp_path):
    target = write(project, "one.py", f"k = '{AWS_KEY}'\n")
    write(project, "two.py", f"k = '{AWS_KEY}'\n")
    output = tmp_path / "results.json"

    result = invoke("scan", str(target), "--root", str(project), "--output", str(output))

    assert result.exit_code == 1
    saved = json.loads(output.read_text())
    assert [finding["file"] for finding in saved["findings"]] == ["one.py"]


def test_scan_concurrent(project):
    write(project, "a.py", f"k = '{AWS_KEY}'\n")
    write(project, "b.py", "clean\n")

    result = invoke("scan", "--all", "--concurrent", "--root", str(project), "--format", "json")

    assert result.exit_code == 1
    assert len(json.loads(result.stdout)["findings"]) == 1


def test_scan_without_git_falls_back_to_project(project):
    write(project, "a.py", f"k = '{AWS_KEY}'\n")

    result = invoke("scan", "--root", str(project))

    assert result.exit_code == 1
    assert "scanning current directory" in result.output
    assert "AWS Access Key" in result.output


def test_bad_custom_pattern_is_a_configuration_error(project):
    write(
        project,
        ".keyguardian.json",
        json.dumps({"customPatterns": [{"name": "Broken", "pattern": "(oops"}]}),
    )

    result = invoke("scan", "--all", "--root", str(project))

    assert result.exit_code == 2
    assert "Configuration error" in result.output


def test_show_config(project):
    config_path = write(project, "guardian.json", json.dumps({"ignoredFiles": ["dist/"]}))

    result = invoke("show-config", "--config", str(config_path))

    assert result.exit_code == 0
    assert json.loads(result.stdout)["ignoredFiles"] == ["dist/"]


def test_install_hooks_outside_repository_fails(tmp_path):
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path):
        result = runner.invoke(cli, ["install-hooks"])

    assert result.exit_code == 1
    assert "Failed to install git hooks" in result.output


@pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
def test_staged_scan_from_subdirectory_uses_repository_root(project, monkeypatch):
    from git import Repo

    repo = Repo.init(project)
    write(project, "node_modules/pkg/index.js", f"k = '{AWS_KEY}'\n")
    write(project, "config.js", f"const key = '{AWS_KEY}';\n")
    write(project, "src/app.py", "print('hello')\n")
    repo.index.add(["node_modules/pkg/index.js", "config.js", "src/app.py"])
    monkeypatch.chdir(project / "src")

    result = invoke("scan", "--staged", "--format", "json")

    assert result.exit_code == 1
    findings = json.loads(result.stdout)["findings"]
    assert [finding["file"] for finding in findings] == ["config.js"]

import os

import pytest

from keyguardian.ignore import IgnoreResolver, RuleKind, parse_rule, relative_path, should_ignore
from keyguardian.models import GuardianConfig


@pytest.fixture
def root(tmp_path):
    return tmp_path / "project"


def test_default_rules_ignore_vcs_dependencies_and_env_example(root):
    resolver = IgnoreResolver(root=root)

    assert resolver.should_ignore(root / ".git")
    assert resolver.should_ignore(root / ".git" / "config")
    assert resolver.should_ignore(root / "a" / "node_modules" / "b" / "secret.js")
    assert resolver.should_ignore(root / ".env.example")
    assert resolver.should_ignore(root / "config" / ".env.example")
    assert resolver.should_ignore(root / "assets" / "logo.PNG")
    assert not resolver.should_ignore(root / "src" / "app.py")
    assert not resolver.should_ignore(root / ".env.example.bak")


def test_directory_rule_matches_at_any_depth(root):
    config = GuardianConfig(ignoredFiles=["vendor/"])

    assert should_ignore(root / "vendor" / "lib.js", config, root)
    assert should_ignore(root / "a" / "b" / "vendor" / "c" / "lib.js", config, root)
    assert not should_ignore(root / "vendored" / "lib.js", config, root)


def test_multi_segment_directory_rule_is_anchored_at_root(root):
    config = GuardianConfig(ignoredFiles=["build/output/"])

    assert should_ignore(root / "build" / "output" / "app.js", config, root)
    assert not should_ignore(root / "src" / "build" / "output" / "app.js", config, root)


def test_wildcard_rule(root):
    config = GuardianConfig(ignoredFiles=["*.log"])

    assert should_ignore(root / "debug.log", config, root)
    assert should_ignore(root / "logs" / "today.log", config, root)
    assert should_ignore(root / "DEBUG.LOG", config, root)
    assert not should_ignore(root / "logfile.txt", config, root)
    assert not should_ignore(root / "app.logger.py", config, root)


def test_wildcard_rule_with_directory_part(root):
    config = GuardianConfig(ignoredFiles=["fixtures/*.json"])

    assert should_ignore(root / "fixtures" / "users.json", config, root)
    assert should_ignore(root / "tests" / "fixtures" / "users.json", config, root)
    assert not should_ignore(root / "users.json", config, root)


def test_wildcard_directory_rule_skips_plain_files(root):
    (root / "cache_store").mkdir(parents=True)
    (root / "src").mkdir()
    config = GuardianConfig(ignoredFiles=["cache*/"])

    assert should_ignore(root / "cache_store", config, root)
    assert should_ignore(root / "cache_store" / "blob.txt", config, root)
    assert should_ignore(root / "src" / "cache_old" / "data.py", config, root)
    assert not should_ignore(root / "cache_config.py", config, root)
    assert not should_ignore(root / "src" / "cache_config.py", config, root)


def test_exact_rule_matches_path_suffix_or_name(root):
    config = GuardianConfig(ignoredFiles=["config/secrets.json", "credentials.txt"])

    assert should_ignore(root / "config" / "secrets.json", config, root)
    assert should_ignore(root / "app" / "config" / "secrets.json", config, root)
    assert not should_ignore(root / "secrets.json", config, root)
    assert should_ignore(root / "deep" / "Credentials.TXT", config, root)


def test_rules_are_case_insensitive_and_separator_normalized(root):
    config = GuardianConfig(ignoredFiles=["Build\\"])
    resolver = IgnoreResolver(config, root)

    assert resolver.should_ignore(root / "build" / "out.js")
    assert resolver.should_ignore(os.path.join(str(root), "BUILD\\out.js"))
    assert resolver.should_ignore(root / "Node_Modules" / "pkg" / "index.js")


def test_paths_outside_root_only_match_extensions(tmp_path, root):
    resolver = IgnoreResolver(GuardianConfig(ignoredFiles=["*.log"]), root)

    assert not resolver.should_ignore(tmp_path / "node_modules" / "pkg" / "index.js")
    assert not resolver.should_ignore(tmp_path / "elsewhere" / "debug.log")
    assert resolver.should_ignore(tmp_path / "elsewhere" / "image.png")
    assert not resolver.should_ignore(root)


def test_ignoring_is_a_union_of_rule_categories(root):
    config = GuardianConfig(ignoredFiles=["tmp/", "*.bak", "notes.md"], ignoredExtensions=[".txt"])
    resolver = IgnoreResolver(config, root)

    assert resolver.should_ignore(root / "tmp" / "a.py")
    assert resolver.should_ignore(root / "a.py.bak")
    assert resolver.should_ignore(root / "docs" / "notes.md")
    assert resolver.should_ignore(root / "readme.TXT")
    assert not resolver.should_ignore(root / "src" / "a.py")


def test_empty_configuration_keeps_only_builtin_rules(root):
    resolver = IgnoreResolver(GuardianConfig(), root)

    assert not resolver.should_ignore(root / "src" / "settings.py")
    assert not resolver.should_ignore(root / "debug.log")
    assert resolver.should_ignore(root / "archive.zip")


@pytest.mark.parametrize(
    "raw,kind,value",
    [
        ("dist/", RuleKind.DIRECTORY, "dist"),
        ("./Dist\\", RuleKind.DIRECTORY, "dist"),
        ("*.min.js", RuleKind.WILDCARD, "*.min.js"),
        ("cache*/", RuleKind.WILDCARD, "cache*"),
        ("/secrets.txt", RuleKind.EXACT, "secrets.txt"),
    ],
)
def test_parse_rule_categorizes_once(raw, kind, value):
    rule = parse_rule(raw)

    assert rule.kind == kind
    assert rule.value == value


def test_blank_rules_are_dropped():
    assert parse_rule("   ") is None
    assert parse_rule("/") is None


def test_relative_path(root):
    assert relative_path(root / "A" / "b.txt", root) == "a/b.txt"
    assert relative_path(root, root) is None
    assert relative_path(root.parent / "other.txt", root) is None

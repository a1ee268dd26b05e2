from pathlib import Path

import pytest

from keyguardian.config import CONFIG_ENV_VAR


@pytest.fixture(autouse=True)
def no_config_override(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root

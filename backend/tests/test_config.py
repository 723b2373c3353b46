"""Settings loading: defaults, YAML file and environment overrides."""

import os

import pytest

from geetgatha.config import Settings


@pytest.fixture
def clean_cwd(tmp_path, monkeypatch):
    """Run in an empty directory with no GEETGATHA_ variables set."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("GEETGATHA_"):
            monkeypatch.delenv(key)
    return tmp_path


def test_01_defaults_without_config_file(clean_cwd):
    settings = Settings()

    assert settings.models.text_model == "gemini-3-pro-preview"
    assert settings.pipeline.reset_grace_seconds == 2.0
    assert settings.pipeline.originality_threshold == 70
    assert settings.pipeline.retry_max_attempts == 3
    assert settings.gemini.api_key is None
    assert settings.storage.database_url == "sqlite+aiosqlite:///geetgatha.db"


def test_02_yaml_file_is_read(clean_cwd):
    (clean_cwd / "config.yaml").write_text(
        "models:\n  text_model: ollama/llama3.1\n"
        "pipeline:\n  originality_threshold: 60\n"
        "ollama:\n  endpoint: http://gpu-box:11434\n"
    )

    settings = Settings()

    assert settings.models.text_model == "ollama/llama3.1"
    assert settings.pipeline.originality_threshold == 60
    assert settings.ollama.endpoint == "http://gpu-box:11434"


def test_03_environment_beats_yaml(clean_cwd, monkeypatch):
    (clean_cwd / "config.yaml").write_text("pipeline:\n  originality_threshold: 60\n")
    monkeypatch.setenv("GEETGATHA_PIPELINE__ORIGINALITY_THRESHOLD", "80")
    monkeypatch.setenv("GEETGATHA_GEMINI__API_KEY", "env-key")

    settings = Settings()

    assert settings.pipeline.originality_threshold == 80
    assert settings.gemini.api_key == "env-key"

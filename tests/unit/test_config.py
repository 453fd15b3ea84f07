"""Tests for configuration loading."""

import pytest

from storyflow.config import load_config
from storyflow.generation import NullContentGenerator, get_generator
from storyflow.generation.agent import AgentContentGenerator
from storyflow.generation.http import HttpContentGenerator


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
generation:
  backend: agent
  model: openai:gpt-4o
compiler:
  fallback_voice: nova
  bgm_volume: 0.2
render:
  output_dir: /tmp/scripts
"""
    )
    monkeypatch.setenv("STORYFLOW_CONFIG", str(config_path))
    monkeypatch.delenv("STORYFLOW_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = load_config()
    assert config.generation.backend == "agent"
    assert config.generation.model == "openai:gpt-4o"
    assert config.compiler.fallback_voice == "nova"
    assert config.compiler.bgm_volume == 0.2
    assert config.compiler.image_model == "gpt-image-1"
    assert config.render.output_dir == "/tmp/scripts"
    assert config.database_url is None


def test_missing_config_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("STORYFLOW_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.delenv("STORYFLOW_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = load_config()
    assert config.generation.backend == "none"
    assert config.compiler.fallback_voice == "alloy"
    assert config.compiler.bgm_volume == 0.5
    assert len(config.compiler.caption_styles) == 14


def test_database_url_env_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("database_url: sqlite://from-file.db\n")
    monkeypatch.setenv("STORYFLOW_CONFIG", str(config_path))
    monkeypatch.setenv("STORYFLOW_DATABASE_URL", "sqlite://from-env.db")

    assert load_config().database_url == "sqlite://from-env.db"


def test_get_generator_uses_config(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
generation:
  backend: http
  endpoint: http://generator.local/api/
  timeout: 5
"""
    )
    monkeypatch.setenv("STORYFLOW_CONFIG", str(config_path))
    monkeypatch.delenv("STORYFLOW_GENERATION", raising=False)

    generator = get_generator()
    assert isinstance(generator, HttpContentGenerator)
    assert generator.endpoint == "http://generator.local/api"
    assert generator.timeout == 5


def test_get_generator_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("STORYFLOW_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("STORYFLOW_GENERATION", "agent")
    assert isinstance(get_generator(), AgentContentGenerator)

    monkeypatch.setenv("STORYFLOW_GENERATION", "none")
    assert isinstance(get_generator(), NullContentGenerator)


def test_get_generator_rejects_bad_backends(tmp_path, monkeypatch):
    monkeypatch.setenv("STORYFLOW_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.delenv("STORYFLOW_GENERATION", raising=False)

    with pytest.raises(ValueError):
        get_generator("carrier-pigeon")
    with pytest.raises(ValueError):
        get_generator("http")

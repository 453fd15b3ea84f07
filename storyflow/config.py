from __future__ import annotations

import os
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_BGM_URL,
    DEFAULT_BGM_VOLUME,
    DEFAULT_CAPTION_STYLES,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_LANGUAGE,
    DEFAULT_SPEECH_PROVIDER,
    DEFAULT_STYLE,
    FALLBACK_VOICE,
    FORMAT_VERSION,
)


class GenerationConfig(BaseModel):
    """Settings for the content generation backend."""

    backend: Literal["none", "agent", "http"] = "none"
    model: str = "openai:gpt-4o-mini"
    endpoint: Optional[str] = None
    timeout: float = 60.0


class CompilerConfig(BaseModel):
    """Defaults applied while compiling a storyboard into a script."""

    fallback_voice: str = FALLBACK_VOICE
    default_style: str = DEFAULT_STYLE
    image_model: str = DEFAULT_IMAGE_MODEL
    speech_provider: str = DEFAULT_SPEECH_PROVIDER
    bgm_volume: float = DEFAULT_BGM_VOLUME
    caption_styles: List[str] = Field(default_factory=lambda: list(DEFAULT_CAPTION_STYLES))
    format_version: str = FORMAT_VERSION
    default_language: str = DEFAULT_LANGUAGE
    default_bgm_url: Optional[str] = DEFAULT_BGM_URL


class RenderConfig(BaseModel):
    """Where compiled scripts are handed off."""

    output_dir: Optional[str] = None


class StoryflowConfig(BaseModel):
    """Top-level configuration model."""

    generation: GenerationConfig = GenerationConfig()
    compiler: CompilerConfig = CompilerConfig()
    render: RenderConfig = RenderConfig()
    database_url: Optional[str] = None


def load_config(path: Optional[str] = None) -> StoryflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to STORYFLOW_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("STORYFLOW_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = StoryflowConfig(**data)
    else:
        config = StoryflowConfig()

    env_db_url = os.getenv("STORYFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config

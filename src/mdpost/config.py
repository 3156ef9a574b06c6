"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDPOST_"


class Settings(BaseModel):
    app_name:      str = "mdpost"
    db_url:        str = "sqlite:///mdpost.db"
    max_nesting:   int = Field(default=2, ge=1, le=6, description="Max heading depth that starts a section")
    output_dir:    str = Field(default="dist",     description="Directory for exported MD/MDX + JSON files")
    output_format: str = Field(default="md", pattern="^(md|mdx)$", description="md or mdx")
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    required_fields: list[str] = Field(
        default=["layout", "title", "date"], description="Front-matter fields that must be non-empty",
    )
    require_fence_language: bool = Field(default=False, description="Warn on code fences without a language")
    report_format: str = Field(default="text", pattern="^(text|json)$", description="Lint report format")


def _from_env(name: str, raw: str) -> Any:
    """Comma-split list fields; leave scalar coercion to pydantic."""
    annotation = Settings.model_fields[name].annotation
    if getattr(annotation, "__origin__", None) is list:
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDPOST_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = _from_env(name, val)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid settings: {e}") from e

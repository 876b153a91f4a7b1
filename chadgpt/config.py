"""ChadGPT - YAML configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .claude_client import DEFAULT_API_URL
from .message_utils import DEFAULT_MAX_LINES
from .models import PromptTemplate
from .runtime_paths import resolve_config_path

logger = logging.getLogger("chadgpt.config")

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


class IRCConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str
    port: int = Field(default=6667, ge=1, le=65535)
    tls: bool = False
    tls_verify: bool = True
    password: Optional[str] = None
    nick: str = Field(..., min_length=1)
    username: Optional[str] = None
    realname: Optional[str] = None
    keepnick: bool = False
    max_nick_attempts: int = Field(default=0, ge=0)
    channels: list[str] = Field(default_factory=list)
    ignored_nicks: list[str] = Field(default_factory=list)

    @field_validator("nick")
    @classmethod
    def _nick_has_no_spaces(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError("nick must not contain whitespace")
        return value


class BackendConfig(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = "Anthropic"
    api_url: str = DEFAULT_API_URL
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: Optional[float] = None
    max_tokens: int = Field(default=256, ge=1)
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    max_lines: int = Field(default=DEFAULT_MAX_LINES, ge=1)
    messages: list[PromptTemplate] = Field(
        default_factory=lambda: [PromptTemplate(role="user", content="{{message}}")]
    )


class Config(BaseModel):
    model_config = {"extra": "forbid"}

    irc: IRCConfig
    backend: BackendConfig = Field(default_factory=BackendConfig)
    path: Optional[Path] = Field(default=None, exclude=True)


def parse_config(raw: dict, path: Optional[Path] = None) -> Config:
    if not isinstance(raw, dict):
        raise ConfigError(f"{path or 'config'}: top level must be a mapping")
    try:
        cfg = Config(**raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"{path or 'config'}: {problems}") from exc
    cfg.path = path
    return cfg


def load_config(path: Optional[str | Path] = None) -> Config:
    config_path = resolve_config_path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{config_path}: invalid YAML: {exc}") from exc
    cfg = parse_config(raw or {}, config_path)
    logger.info("Loaded config from %s", config_path)
    return cfg

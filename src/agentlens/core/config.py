"""agentlens configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from agentlens.core.constants import (
    BUFFER_MAX_CHARS,
    CONFIG_FILENAME,
    CURRENT_CONFIG_VERSION,
    IDLE_QUIET_PERIOD_S,
    MESSAGE_MAX_CHARS,
    MIN_ALPHA_RATIO,
    RECENT_WINDOW_CHARS,
    _default_data_dir,
)
from agentlens.core.exceptions import ConfigError, ConfigNotFoundError


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class InterpreterConfig(BaseModel):
    """Tuning constants for the output interpreter."""

    model_config = {"extra": "forbid"}

    buffer_max_chars: int = BUFFER_MAX_CHARS
    recent_window_chars: int = RECENT_WINDOW_CHARS
    message_max_chars: int = MESSAGE_MAX_CHARS
    min_alpha_ratio: float = MIN_ALPHA_RATIO
    extra_keywords: list[str] = Field(default_factory=list)
    """Additional case-insensitive words that mark a stream as an agent."""

    @field_validator("buffer_max_chars")
    @classmethod
    def validate_buffer(cls, v: int) -> int:
        if not (256 <= v <= 65536):
            raise ValueError("buffer_max_chars must be between 256 and 65536")
        return v

    @field_validator("message_max_chars")
    @classmethod
    def validate_message_len(cls, v: int) -> int:
        if not (10 <= v <= 500):
            raise ValueError("message_max_chars must be between 10 and 500")
        return v

    @field_validator("min_alpha_ratio")
    @classmethod
    def validate_ratio(cls, v: float) -> float:
        if not (0.0 <= v <= 1.0):
            raise ValueError("min_alpha_ratio must be between 0.0 and 1.0")
        return v

    @field_validator("extra_keywords", mode="before")
    @classmethod
    def parse_keywords(cls, v: Any) -> Any:
        """Accept both list and comma-separated string."""
        if isinstance(v, str):
            return [kw.strip() for kw in v.split(",") if kw.strip()]
        return v

    @model_validator(mode="after")
    def window_fits_buffer(self) -> InterpreterConfig:
        if not (1 <= self.recent_window_chars <= self.buffer_max_chars):
            raise ValueError("recent_window_chars must be between 1 and buffer_max_chars")
        return self


class WatchdogConfig(BaseModel):
    model_config = {"extra": "forbid"}

    quiet_period_s: float = IDLE_QUIET_PERIOD_S

    @field_validator("quiet_period_s")
    @classmethod
    def validate_quiet_period(cls, v: float) -> float:
        if not (0.1 <= v <= 60.0):
            raise ValueError("quiet_period_s must be between 0.1 and 60.0")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class AgentLensConfig(BaseModel):
    """Root agentlens configuration model."""

    config_version: int = CURRENT_CONFIG_VERSION
    interpreter: InterpreterConfig = Field(default_factory=InterpreterConfig)
    watchdog: WatchdogConfig = Field(default_factory=WatchdogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("AGENTLENS_CONFIG"):
        return Path(env_path)
    return _default_data_dir() / CONFIG_FILENAME


def load_config(path: Path | str | None = None) -> AgentLensConfig:
    """
    Load AgentLensConfig from a TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (AGENTLENS_*)
      2. Config file (platform data dir / config.toml, or $AGENTLENS_CONFIG)
    """
    import tomllib

    cfg_path = Path(path) if path is not None else _config_file_path()

    if not cfg_path.exists():
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    try:
        with open(cfg_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as exc:
        raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    _apply_env_overrides(data)

    try:
        return AgentLensConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc


def load_config_or_default(path: Path | str | None = None) -> AgentLensConfig:
    """Like :func:`load_config`, but fall back to defaults when no file exists."""
    try:
        return load_config(path)
    except ConfigNotFoundError:
        data: dict[str, Any] = {}
        _apply_env_overrides(data)
        try:
            return AgentLensConfig.model_validate(data)
        except Exception as exc:
            raise ConfigError(f"Invalid AGENTLENS_* environment overrides: {exc}") from exc


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay AGENTLENS_* environment variables onto parsed TOML."""
    if level := os.environ.get("AGENTLENS_LOG_LEVEL", ""):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("AGENTLENS_LOG_FORMAT", ""):
        data.setdefault("logging", {})["format"] = fmt
    if quiet := os.environ.get("AGENTLENS_QUIET_PERIOD_S", ""):
        data.setdefault("watchdog", {})["quiet_period_s"] = quiet
    if keywords := os.environ.get("AGENTLENS_EXTRA_KEYWORDS", ""):
        data.setdefault("interpreter", {})["extra_keywords"] = keywords


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to TOML file with secure permissions (0600)."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    config_data.setdefault("config_version", CURRENT_CONFIG_VERSION)

    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.rename(cfg_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(0o600)
    return cfg_path

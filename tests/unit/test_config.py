"""Unit tests for agentlens.core.config — AgentLensConfig loading and validation."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from agentlens.core.config import (
    AgentLensConfig,
    InterpreterConfig,
    load_config,
    load_config_or_default,
    save_config,
)
from agentlens.core.constants import (
    BUFFER_MAX_CHARS,
    IDLE_QUIET_PERIOD_S,
    MESSAGE_MAX_CHARS,
    MIN_ALPHA_RATIO,
    RECENT_WINDOW_CHARS,
)
from agentlens.core.exceptions import ConfigError, ConfigNotFoundError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "config.toml"
    p.write_text(content)
    return p


TUNED_TOML = """
[interpreter]
buffer_max_chars = 4000
message_max_chars = 80
extra_keywords = ["codex", "aider"]

[watchdog]
quiet_period_s = 1.5
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "AGENTLENS_CONFIG",
        "AGENTLENS_LOG_LEVEL",
        "AGENTLENS_LOG_FORMAT",
        "AGENTLENS_QUIET_PERIOD_S",
        "AGENTLENS_EXTRA_KEYWORDS",
    ):
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_interpreter_defaults(self) -> None:
        cfg = AgentLensConfig()
        assert cfg.interpreter.buffer_max_chars == BUFFER_MAX_CHARS == 2000
        assert cfg.interpreter.recent_window_chars == RECENT_WINDOW_CHARS == 500
        assert cfg.interpreter.message_max_chars == MESSAGE_MAX_CHARS == 60
        assert cfg.interpreter.min_alpha_ratio == MIN_ALPHA_RATIO
        assert cfg.interpreter.extra_keywords == []

    def test_watchdog_default(self) -> None:
        assert AgentLensConfig().watchdog.quiet_period_s == IDLE_QUIET_PERIOD_S

    def test_logging_defaults(self) -> None:
        cfg = AgentLensConfig()
        assert cfg.logging.level == "INFO"
        assert cfg.logging.format == "text"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_buffer_too_small(self) -> None:
        with pytest.raises(ValueError):
            InterpreterConfig(buffer_max_chars=10)

    def test_window_larger_than_buffer(self) -> None:
        with pytest.raises(ValueError, match="recent_window_chars"):
            InterpreterConfig(buffer_max_chars=300, recent_window_chars=400)

    def test_message_len_bounds(self) -> None:
        with pytest.raises(ValueError):
            InterpreterConfig(message_max_chars=5)

    def test_ratio_bounds(self) -> None:
        with pytest.raises(ValueError):
            InterpreterConfig(min_alpha_ratio=1.5)

    def test_keywords_from_comma_string(self) -> None:
        cfg = InterpreterConfig(extra_keywords="codex, aider,,")  # type: ignore[arg-type]
        assert cfg.extra_keywords == ["codex", "aider"]

    def test_unknown_interpreter_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            InterpreterConfig(bufer_max_chars=3000)  # type: ignore[call-arg]

    def test_log_level_normalised(self) -> None:
        cfg = AgentLensConfig.model_validate({"logging": {"level": "debug"}})
        assert cfg.logging.level == "DEBUG"

    def test_bad_log_format(self) -> None:
        with pytest.raises(ValueError):
            AgentLensConfig.model_validate({"logging": {"format": "xml"}})


# ---------------------------------------------------------------------------
# Load config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_tuned_values(self, tmp_path: Path) -> None:
        cfg = load_config(_write_config(tmp_path, TUNED_TOML))
        assert cfg.interpreter.buffer_max_chars == 4000
        assert cfg.interpreter.message_max_chars == 80
        assert cfg.interpreter.recent_window_chars == RECENT_WINDOW_CHARS
        assert cfg.interpreter.extra_keywords == ["codex", "aider"]
        assert cfg.watchdog.quiet_period_s == 1.5

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(_write_config(tmp_path, ""))
        assert cfg == AgentLensConfig()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "nonexistent.toml")

    def test_invalid_toml_raises(self, tmp_path: Path) -> None:
        p = _write_config(tmp_path, "this is not valid toml %%% [[[")
        with pytest.raises(ConfigError):
            load_config(p)

    def test_out_of_range_raises(self, tmp_path: Path) -> None:
        p = _write_config(tmp_path, "[watchdog]\nquiet_period_s = 0.0\n")
        with pytest.raises(ConfigError, match="quiet_period_s"):
            load_config(p)

    def test_config_env_var_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        p = _write_config(tmp_path, TUNED_TOML)
        monkeypatch.setenv("AGENTLENS_CONFIG", str(p))
        assert load_config().interpreter.buffer_max_chars == 4000

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        p = _write_config(tmp_path, TUNED_TOML)
        monkeypatch.setenv("AGENTLENS_QUIET_PERIOD_S", "3.5")
        monkeypatch.setenv("AGENTLENS_EXTRA_KEYWORDS", "gemini")
        monkeypatch.setenv("AGENTLENS_LOG_LEVEL", "debug")
        monkeypatch.setenv("AGENTLENS_LOG_FORMAT", "json")
        cfg = load_config(p)
        assert cfg.watchdog.quiet_period_s == 3.5
        assert cfg.interpreter.extra_keywords == ["gemini"]
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.format == "json"

    def test_or_default_without_file(self, tmp_path: Path) -> None:
        cfg = load_config_or_default(tmp_path / "absent.toml")
        assert cfg == AgentLensConfig()

    def test_or_default_applies_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AGENTLENS_QUIET_PERIOD_S", "0.5")
        cfg = load_config_or_default(tmp_path / "absent.toml")
        assert cfg.watchdog.quiet_period_s == 0.5

    def test_or_default_bad_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENTLENS_QUIET_PERIOD_S", "forever")
        with pytest.raises(ConfigError):
            load_config_or_default(tmp_path / "absent.toml")


# ---------------------------------------------------------------------------
# Save config
# ---------------------------------------------------------------------------


class TestSaveConfig:
    def test_save_and_reload(self, tmp_path: Path) -> None:
        p = tmp_path / "nested" / "config.toml"
        data = AgentLensConfig().model_dump()
        data["interpreter"]["extra_keywords"] = ["codex"]
        written = save_config(data, p)
        assert written == p
        cfg = load_config(p)
        assert cfg.interpreter.extra_keywords == ["codex"]
        assert cfg.config_version == 1

    def test_saved_file_permissions(self, tmp_path: Path) -> None:
        p = tmp_path / "config.toml"
        save_config(AgentLensConfig().model_dump(), p)
        mode = p.stat().st_mode
        assert stat.S_IMODE(mode) == 0o600

    def test_no_tmp_left_behind(self, tmp_path: Path) -> None:
        p = tmp_path / "config.toml"
        save_config({}, p)
        assert not (tmp_path / "config.tmp").exists()
        assert "config_version = 1" in p.read_text()

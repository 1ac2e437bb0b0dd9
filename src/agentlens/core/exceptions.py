"""agentlens exception hierarchy."""

from __future__ import annotations


class AgentLensError(Exception):
    """Base exception for all agentlens errors."""


class ConfigError(AgentLensError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class SessionError(AgentLensError):
    """Raised when session management fails."""

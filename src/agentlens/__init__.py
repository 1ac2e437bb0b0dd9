"""
agentlens — at-a-glance activity status for AI coding agents running in terminals.

agentlens watches the raw PTY output of an agent CLI and turns it into a
small status signal (working / idle) plus a one-line summary of what the
agent is doing right now.

Package layout (src/agentlens/):
  core/interpreter/ — streaming output interpreter (detection, status, message)
  core/session/     — session driver, idle watchdog, buffer registry
  core/             — config, logging, constants, exceptions
  cli/              — Click CLI entry point (transcript replay, config)
"""

__version__ = "0.4.0"
__all__ = ["__version__"]

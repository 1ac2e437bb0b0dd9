"""Output interpreter — agent detection, status classification, message extraction."""

from agentlens.core.interpreter.interpreter import OutputInterpreter
from agentlens.core.interpreter.models import AgentStatus, InterpreterState, StatusReport

__all__ = [
    "AgentStatus",
    "InterpreterState",
    "OutputInterpreter",
    "StatusReport",
]

"""Error kinds shared across agentmeter components."""

from __future__ import annotations


class AgentMeterError(RuntimeError):
    """Base class for failures reported by agentmeter."""


class StorageError(AgentMeterError):
    """Raised when a document or history file is missing, unreadable or unwritable."""


class ParseError(AgentMeterError):
    """Raised when persisted history or a version string cannot be parsed."""


__all__ = ["AgentMeterError", "ParseError", "StorageError"]

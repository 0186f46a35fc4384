"""
Session State, Step Results and Errors
--------------------------------------

The handful of types that flow between the prompt layer, the steps and the
menu loop.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# ----------------------------------------------------------------
# Custom Exceptions
# ----------------------------------------------------------------
class SetupError(Exception):
    """Base exception for installer errors."""

    pass


class ExecutionError(SetupError):
    """Raised when a command cannot be run or exits non-zero under check."""

    pass


class DownloadError(SetupError):
    """Raised when a file or script cannot be fetched."""

    pass


class ValidationError(SetupError):
    """Raised when a value fails a range or format check."""

    pass


# ----------------------------------------------------------------
# Step Results
# ----------------------------------------------------------------
class StepStatus(Enum):
    SKIPPED = auto()
    SUCCEEDED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one menu action.

    Attributes:
        status: Whether the step was skipped, succeeded or failed.
        reason: Short human-readable detail; empty for a plain skip.
    """

    status: StepStatus
    reason: str = ""

    @classmethod
    def skipped(cls, reason: str = "") -> "StepResult":
        return cls(StepStatus.SKIPPED, reason)

    @classmethod
    def succeeded(cls, message: str = "") -> "StepResult":
        return cls(StepStatus.SUCCEEDED, message)

    @classmethod
    def failed(cls, reason: str) -> "StepResult":
        return cls(StepStatus.FAILED, reason)

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCEEDED


# ----------------------------------------------------------------
# Session State
# ----------------------------------------------------------------
def validate_port(port: int, minimum: int = 1, maximum: int = 65535) -> int:
    """Return ``port`` if it is an int within [minimum, maximum]."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValidationError(f"Port must be an integer, got {port!r}")
    if not minimum <= port <= maximum:
        raise ValidationError(
            f"Port {port} is outside the allowed range {minimum}-{maximum}"
        )
    return port


class SessionState:
    """
    Ports chosen during this run, carried from the SSH and Wings steps to the
    firewall step. Fields start unset and, once recorded, are never cleared.
    """

    SSH_PORT_RANGE = (1024, 65535)
    AGENT_PORT_RANGE = (1, 65535)

    def __init__(self) -> None:
        self._ssh_port: Optional[int] = None
        self._agent_port: Optional[int] = None

    @property
    def ssh_port(self) -> Optional[int]:
        return self._ssh_port

    @ssh_port.setter
    def ssh_port(self, port: int) -> None:
        self._ssh_port = validate_port(port, *self.SSH_PORT_RANGE)

    @property
    def agent_port(self) -> Optional[int]:
        return self._agent_port

    @agent_port.setter
    def agent_port(self, port: int) -> None:
        self._agent_port = validate_port(port, *self.AGENT_PORT_RANGE)

    def __repr__(self) -> str:
        return f"SessionState(ssh_port={self._ssh_port}, agent_port={self._agent_port})"

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class FailureKind(str, Enum):
    transport = "transport"    # network/connection error, no response
    attributed = "attributed"  # executor rejection naming a vertex
    rejected = "rejected"      # executor rejection without attribution


@dataclass(frozen=True)
class ExecutionSuccess:
    """Per-node results; nodes absent from the mapping produced no result."""
    results: Dict[str, Any] = field(default_factory=dict)

    ok = True


@dataclass(frozen=True)
class ExecutionFailure:
    message: str
    status_code: Optional[int] = None
    node_id: Optional[str] = None
    reason: str = ""

    ok = False

    @property
    def kind(self) -> FailureKind:
        if self.status_code is None:
            return FailureKind.transport
        if self.node_id is not None:
            return FailureKind.attributed
        return FailureKind.rejected

    def describe(self) -> str:
        """Workflow-level message shown to the user."""
        if self.kind is FailureKind.transport:
            return f"Could not reach executor:\n{self.message}"
        return f"Server error ({self.status_code}):\n{self.message}"


ExecutionOutcome = Union[ExecutionSuccess, ExecutionFailure]

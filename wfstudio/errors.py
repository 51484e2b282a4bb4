"""
Error hierarchy shared by the editor core.

Node-level execution failures are not exceptions: they travel inside an
ExecutionFailure outcome and end up on the node's transient `error` field.
"""
from typing import Optional


class WorkflowError(Exception):
    """Base class for every error raised by the editor core."""


class WorkflowValidationError(WorkflowError):
    """The graph is structurally inconsistent (dangling edge, duplicate id)."""


class UnknownNodeError(WorkflowError, KeyError):
    """A node id does not resolve to a node in the Graph Store."""

    def __init__(self, node_id: str):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Unknown node: {self.node_id}"


class UnknownEdgeError(WorkflowError, KeyError):
    """An edge id does not resolve to an edge in the Graph Store."""

    def __init__(self, edge_id: str):
        super().__init__(edge_id)
        self.edge_id = edge_id

    def __str__(self) -> str:
        return f"Unknown edge: {self.edge_id}"


class RunInProgressError(WorkflowError):
    """A run was requested while another one is still in flight."""


class PersistenceError(WorkflowError):
    """The workflow store rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

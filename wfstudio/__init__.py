"""
Workflow graph model and execution protocol for the visual workflow editor.

Components:
- GraphStore: live editor graph, id assignment and structural mutation
- canonicalize / hydrate: editor graph <-> canonical Workflow Document
- ExecutionClient: dispatch to the executor, failure attribution
- apply_outcome: merge an execution outcome back onto the graph
- PersistenceClient: list / load / save against the workflow store
- EditorSession: the above wired together for one open workflow
"""

from .converters import canonicalize, hydrate
from .credentials import CredentialStore, SecretProvider, StaticSecretProvider
from .errors import (
    PersistenceError,
    RunInProgressError,
    UnknownEdgeError,
    UnknownNodeError,
    WorkflowError,
    WorkflowValidationError,
)
from .execution_client import ExecutionClient, attribute_failure
from .graph_store import GraphStore, initial_graph
from .merger import apply_outcome, clear_run_state
from .persistence_client import PersistenceClient
from .session import EditorSession

__all__ = [
    "canonicalize", "hydrate",
    "CredentialStore", "SecretProvider", "StaticSecretProvider",
    "PersistenceError", "RunInProgressError", "UnknownEdgeError", "UnknownNodeError",
    "WorkflowError", "WorkflowValidationError",
    "ExecutionClient", "attribute_failure",
    "GraphStore", "initial_graph",
    "apply_outcome", "clear_run_state",
    "PersistenceClient",
    "EditorSession",
]

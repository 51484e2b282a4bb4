from .graph import (
    EDITOR_TAG_KINDS,
    TRANSIENT_FIELDS,
    Edge,
    Graph,
    LLMNodeData,
    Node,
    NodeData,
    NodeKind,
    Position,
    ResultNodeData,
    build_payload,
    kind_for_tag,
    tag_for_kind,
)
from .workflow import (
    SavedWorkflow,
    SavedWorkflowSummary,
    SaveWorkflowRequest,
    SaveWorkflowResponse,
    WorkflowDocument,
    WorkflowEdge,
    WorkflowNode,
)
from .outcome import ExecutionFailure, ExecutionOutcome, ExecutionSuccess, FailureKind

__all__ = [
    "EDITOR_TAG_KINDS", "TRANSIENT_FIELDS",
    "Edge", "Graph", "Node", "NodeData", "NodeKind", "Position",
    "LLMNodeData", "ResultNodeData", "build_payload", "kind_for_tag", "tag_for_kind",
    "WorkflowDocument", "WorkflowNode", "WorkflowEdge",
    "SavedWorkflow", "SavedWorkflowSummary", "SaveWorkflowRequest", "SaveWorkflowResponse",
    "ExecutionFailure", "ExecutionOutcome", "ExecutionSuccess", "FailureKind",
]

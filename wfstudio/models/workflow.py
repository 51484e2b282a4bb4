"""
Wire Models
Canonical Workflow Document and Saved Workflow Records exchanged with the
executor and the workflow store.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .graph import NodeKind, Position


# ============================================================================
# CANONICAL WORKFLOW DOCUMENT
# ============================================================================

class WorkflowNode(BaseModel):
    """Canonical node: editor tag resolved to a kind, transient state stripped"""
    id: str
    type: NodeKind
    position: Position = Field(default_factory=Position)
    data: Dict[str, Any] = Field(default_factory=dict)


class WorkflowEdge(BaseModel):
    id: str
    source: str
    target: str


class WorkflowDocument(BaseModel):
    """
    Transmission/storage form of a graph.

    `config` carries run-scoped parameters. Credentials are only ever merged
    into the copy built for a single execution request.
    """
    id: str
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    config: Dict[str, str] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        """JSON body for the executor/store; `config` omitted when empty."""
        body = self.model_dump(mode="json")
        if not body["config"]:
            body.pop("config")
        return body

    def without_config(self) -> "WorkflowDocument":
        return self.model_copy(update={"config": {}})


# ============================================================================
# SAVED WORKFLOW RECORDS
# ============================================================================

class SavedWorkflowSummary(BaseModel):
    """Workflow summary for list view (no definition body)"""
    id: str
    name: str
    created_at: datetime
    updated_at: datetime


class SavedWorkflow(SavedWorkflowSummary):
    """Full record including the stored definition"""
    definition: WorkflowDocument


class SaveWorkflowRequest(BaseModel):
    """Request to create or update a workflow, keyed by id"""
    id: str
    name: str
    definition: WorkflowDocument


class SaveWorkflowResponse(BaseModel):
    status: str = "saved"

"""
Format Converters
Translates between the editor graph (type tags + transient run state) and the
canonical Workflow Document sent to the executor and the workflow store.
"""

import logging
from typing import Mapping, Optional, Tuple

from .graph_store import validate_graph
from .models.graph import TRANSIENT_FIELDS, Edge, Graph, Node, NodeKind, kind_for_tag, tag_for_kind
from .models.workflow import WorkflowDocument, WorkflowEdge, WorkflowNode
from .util.ids import new_id

logger = logging.getLogger(__name__)


def map_editor_type_to_kind(editor_type: str) -> NodeKind:
    """
    Map an editor type tag to the canonical node kind.

    Editor tags:
        - "LLM"    -> LLM
        - "RESULT" -> RESULT
        - "input"  -> START
        - "output" -> END
        - anything else -> TASK

    Args:
        editor_type: Type tag carried by the editor node

    Returns:
        Canonical NodeKind
    """
    return kind_for_tag(editor_type)


def map_kind_to_editor_type(kind: NodeKind) -> str:
    """Inverse of map_editor_type_to_kind (TASK keeps its kind name)."""
    return tag_for_kind(kind)


def canonicalize(
    graph: Graph,
    workflow_id: Optional[str] = None,
    config: Optional[Mapping[str, str]] = None,
) -> WorkflowDocument:
    """
    Convert an editor graph snapshot to a canonical Workflow Document.

    Editor format:
        nodes = [
            {id: "1", type: "LLM", position: {...}, data: {label, model, prompt, result: "..."}},
            {id: "2", type: "output", position: {...}, data: {label, error: "..."}}
        ]

    Canonical format:
        nodes = [
            {id: "1", type: "LLM", position: {...}, data: {label, model, prompt}},
            {id: "2", type: "END", position: {...}, data: {label}}
        ]

    Args:
        graph: Read-only snapshot of the Graph Store
        workflow_id: Id to stamp on the document; minted when missing
        config: Run-scoped parameters to carry along

    Returns:
        WorkflowDocument with `error`/`result` stripped from every node

    Raises:
        WorkflowValidationError: duplicate node ids or an edge whose ends
            are not both present in the snapshot
    """
    validate_graph(graph.nodes, graph.edges)

    nodes = [
        WorkflowNode(
            id=node.id,
            type=map_editor_type_to_kind(node.type),
            position=node.position,
            data=node.data.to_dict(include_transient=False),
        )
        for node in graph.nodes
    ]
    edges = [WorkflowEdge(id=e.id, source=e.source, target=e.target) for e in graph.edges]

    document = WorkflowDocument(
        id=workflow_id or new_id("wf-"),
        nodes=nodes,
        edges=edges,
        config=dict(config or {}),
    )
    logger.debug(
        "Canonicalized workflow %s: %d node(s), %d edge(s)",
        document.id, len(nodes), len(edges),
    )
    return document


def hydrate(document: WorkflowDocument) -> Tuple[Tuple[Node, ...], Tuple[Edge, ...]]:
    """
    Convert a canonical document back to editor nodes and edges, ready for
    GraphStore.replace_all. Canonical documents never carry run state, so
    the hydrated nodes start clean.
    """
    nodes = tuple(
        Node.create(
            id=n.id,
            type=map_kind_to_editor_type(n.type),
            position=n.position,
            data={k: v for k, v in n.data.items() if k not in TRANSIENT_FIELDS},
        )
        for n in document.nodes
    )
    edges = tuple(Edge(id=e.id, source=e.source, target=e.target) for e in document.edges)
    return nodes, edges

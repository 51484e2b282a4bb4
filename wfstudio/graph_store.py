"""
Graph Store
In-memory node/edge collections backing the editor.

Every mutation builds a new Graph snapshot and swaps it in with a single
assignment, so readers never observe a half-applied change.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from .errors import UnknownEdgeError, UnknownNodeError, WorkflowValidationError
from .models.graph import (
    EDITOR_TAG_KINDS,
    TRANSIENT_FIELDS,
    Edge,
    Graph,
    Node,
    NodeKind,
    Position,
    tag_for_kind,
)

logger = logging.getLogger(__name__)

Listener = Callable[[Graph], None]

# Vertical spacing used when stacking newly added nodes.
_NODE_SPACING = 150.0

# Only plain ASCII digit ids take part in the id counter.
_NUMERIC_ID_RE = re.compile(r"[0-9]+")

_KIND_NAMES = frozenset(kind.value for kind in NodeKind)


def initial_graph() -> Graph:
    """Starter workflow shown on a fresh canvas: one LLM node feeding a result."""
    return Graph(
        nodes=(
            Node.create("1", "LLM", Position(x=250, y=5),
                        {"label": "Start", "model": "GPT-4", "prompt": "Hello"}),
            Node.create("2", "RESULT", Position(x=250, y=200), {"label": "Result"}),
        ),
        edges=(Edge(id="e1-2", source="1", target="2"),),
    )


def validate_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
    """Raise WorkflowValidationError on duplicate ids or dangling edges."""
    node_ids: Set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            raise WorkflowValidationError(f"Duplicate node id: {node.id}")
        node_ids.add(node.id)

    edge_ids: Set[str] = set()
    for edge in edges:
        if edge.id in edge_ids:
            raise WorkflowValidationError(f"Duplicate edge id: {edge.id}")
        edge_ids.add(edge.id)
        for end in (edge.source, edge.target):
            if end not in node_ids:
                raise WorkflowValidationError(
                    f"Edge {edge.id} references missing node {end}"
                )


def _editor_tag(kind: Union[NodeKind, str]) -> str:
    if isinstance(kind, NodeKind):
        return tag_for_kind(kind)
    if kind in EDITOR_TAG_KINDS:
        return kind
    if kind in _KIND_NAMES:
        return tag_for_kind(NodeKind(kind))
    return kind


class GraphStore:
    """Mutable holder of the live graph; owns id assignment"""

    def __init__(self, graph: Optional[Graph] = None):
        self._state = Graph()
        self._counter = 0
        self._listeners: List[Listener] = []
        if graph is not None:
            self.replace_all(graph.nodes, graph.edges)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def snapshot(self) -> Graph:
        return self._state

    @property
    def nodes(self):
        return self._state.nodes

    @property
    def edges(self):
        return self._state.edges

    def get_node(self, node_id: str) -> Node:
        node = self._state.get_node(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Structural mutation
    # ------------------------------------------------------------------

    def add_node(
        self,
        kind: Union[NodeKind, str] = NodeKind.llm,
        position: Optional[Position] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Append a node and return its id.

        `kind` is a NodeKind, a canonical kind name ("START", "END", "TASK",
        ...) or a raw editor tag ("input", "output", "webhook", ...).
        Canonical names resolve to their editor tag, so "START" and
        NodeKind.start both create an `input` node; any other string is
        kept as the tag and canonicalizes to TASK.
        Ids come from a monotonic counter, skipping any id already in use.
        """
        tag = _editor_tag(kind)
        node_id = self._next_node_id()
        if position is None:
            position = Position(x=250, y=5 + _NODE_SPACING * len(self._state.nodes))
        payload = {"label": f"{tag} Node"}
        payload.update(data or {})
        node = Node.create(node_id, tag, position, payload)

        self._commit(Graph(nodes=self._state.nodes + (node,), edges=self._state.edges))
        logger.debug("Added node %s (%s)", node_id, tag)
        return node_id

    def remove_node(self, node_id: str) -> None:
        """Delete a node together with every edge that touches it."""
        self.get_node(node_id)
        nodes = tuple(n for n in self._state.nodes if n.id != node_id)
        edges = tuple(
            e for e in self._state.edges if node_id not in (e.source, e.target)
        )
        dropped = len(self._state.edges) - len(edges)
        self._commit(Graph(nodes=nodes, edges=edges))
        logger.debug("Removed node %s and %d incident edge(s)", node_id, dropped)

    def update_node_data(self, node_id: str, patch: Mapping[str, Any]) -> Node:
        """Merge `patch` into a node's payload, replacing the node object."""
        transient = [k for k in patch if k in TRANSIENT_FIELDS]
        if transient:
            raise ValueError(f"Run state cannot be edited directly: {', '.join(transient)}")
        self.get_node(node_id)
        return self._replace_node(node_id, lambda n: n.with_data(patch))

    def move_node(self, node_id: str, position: Position) -> Node:
        self.get_node(node_id)
        return self._replace_node(
            node_id, lambda n: Node(id=n.id, type=n.type, position=position, data=n.data)
        )

    def connect(self, source: str, target: str) -> Edge:
        """
        Create an edge between two existing nodes.
        An already connected pair returns the existing edge unchanged.
        """
        for end in (source, target):
            if self._state.get_node(end) is None:
                raise UnknownNodeError(end)

        for edge in self._state.edges:
            if edge.source == source and edge.target == target:
                return edge

        edge = Edge(id=self._next_edge_id(source, target), source=source, target=target)
        self._commit(Graph(nodes=self._state.nodes, edges=self._state.edges + (edge,)))
        logger.debug("Connected %s -> %s (%s)", source, target, edge.id)
        return edge

    def remove_edge(self, edge_id: str) -> None:
        edges = tuple(e for e in self._state.edges if e.id != edge_id)
        if len(edges) == len(self._state.edges):
            raise UnknownEdgeError(edge_id)
        self._commit(Graph(nodes=self._state.nodes, edges=edges))

    def replace_all(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        """
        Swap the entire graph (load / reset). Validation runs before the swap,
        so a rejected graph leaves the current one in place.
        """
        nodes = tuple(nodes)
        edges = tuple(edges)
        validate_graph(nodes, edges)

        numeric = [int(n.id) for n in nodes if _NUMERIC_ID_RE.fullmatch(n.id)]
        self._counter = max(numeric, default=0)
        self._commit(Graph(nodes=nodes, edges=edges))
        logger.info("Graph replaced: %d node(s), %d edge(s)", len(nodes), len(edges))

    def reset(self) -> None:
        graph = initial_graph()
        self.replace_all(graph.nodes, graph.edges)

    # ------------------------------------------------------------------
    # Run state (written by the result merger only)
    # ------------------------------------------------------------------

    def write_run_state(self, patches: Mapping[str, Mapping[str, Optional[str]]]) -> None:
        """
        Apply `error`/`result` patches keyed by node id in one swap.
        Ids that are no longer in the graph are skipped.
        """
        if not patches:
            return
        nodes = []
        for node in self._state.nodes:
            patch = patches.get(node.id)
            if patch is not None:
                node = node.with_data({k: patch.get(k) for k in TRANSIENT_FIELDS if k in patch})
            nodes.append(node)
        self._commit(Graph(nodes=tuple(nodes), edges=self._state.edges))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace_node(self, node_id: str, change: Callable[[Node], Node]) -> Node:
        updated: Dict[str, Node] = {}
        nodes = []
        for node in self._state.nodes:
            if node.id == node_id:
                node = change(node)
                updated[node_id] = node
            nodes.append(node)
        self._commit(Graph(nodes=tuple(nodes), edges=self._state.edges))
        return updated[node_id]

    def _next_node_id(self) -> str:
        taken = set(self._state.node_ids())
        while True:
            self._counter += 1
            candidate = str(self._counter)
            if candidate not in taken:
                return candidate

    def _next_edge_id(self, source: str, target: str) -> str:
        taken = {e.id for e in self._state.edges}
        base = f"e{source}-{target}"
        candidate, n = base, 1
        while candidate in taken:
            n += 1
            candidate = f"{base}-{n}"
        return candidate

    def _commit(self, state: Graph) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

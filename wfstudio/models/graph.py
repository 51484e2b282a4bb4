"""
Editor-side graph model.

Nodes and edges are frozen: every mutation of the Graph Store produces new
objects so that consumers comparing by reference observe the change.
The node payload is a tagged union keyed by the node kind; every payload
carries the transient `error`/`result` fragment.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict


class NodeKind(str, Enum):
    llm = "LLM"
    result = "RESULT"
    task = "TASK"
    start = "START"
    end = "END"


# Editor type tag -> canonical kind. Anything else is a generic task.
EDITOR_TAG_KINDS: Dict[str, NodeKind] = {
    "LLM": NodeKind.llm,
    "RESULT": NodeKind.result,
    "input": NodeKind.start,
    "output": NodeKind.end,
}

# Run-scoped UI state, never part of a workflow definition.
TRANSIENT_FIELDS = ("error", "result")


KIND_EDITOR_TAGS: Dict[NodeKind, str] = {kind: tag for tag, kind in EDITOR_TAG_KINDS.items()}


def kind_for_tag(tag: str) -> NodeKind:
    return EDITOR_TAG_KINDS.get(tag, NodeKind.task)


def tag_for_kind(kind: NodeKind) -> str:
    return KIND_EDITOR_TAGS.get(kind, kind.value)


class Position(BaseModel):
    """Presentation-only canvas coordinate."""
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


# ============================================================================
# NODE PAYLOADS
# ============================================================================

@dataclass(frozen=True)
class NodeData:
    """
    Payload shared by every node kind.

    Keys the payload class does not declare are kept in `extra` so that a
    loaded definition survives a load/save cycle untouched.
    """
    label: str = ""
    error: Optional[str] = None
    result: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def declared_fields(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "extra")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "NodeData":
        declared = cls.declared_fields()
        known = {k: v for k, v in raw.items() if k in declared}
        extra = {k: v for k, v in raw.items() if k not in declared}
        return cls(**known, extra=extra)

    def to_dict(self, include_transient: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        for name in self.declared_fields():
            if name in TRANSIENT_FIELDS:
                value = getattr(self, name)
                if include_transient and value is not None:
                    out[name] = value
                continue
            out[name] = getattr(self, name)
        return out

    def merge(self, patch: Mapping[str, Any]) -> "NodeData":
        """Return a new payload of the same kind with `patch` applied."""
        raw = self.to_dict()
        raw.update(patch)
        return type(self).from_dict(raw)


@dataclass(frozen=True)
class LLMNodeData(NodeData):
    model: str = "GPT-4"
    prompt: str = ""


@dataclass(frozen=True)
class ResultNodeData(NodeData):
    pass


PAYLOAD_TYPES: Dict[NodeKind, Type[NodeData]] = {
    NodeKind.llm: LLMNodeData,
    NodeKind.result: ResultNodeData,
}


def payload_type(kind: NodeKind) -> Type[NodeData]:
    return PAYLOAD_TYPES.get(kind, NodeData)


def build_payload(tag: str, raw: Optional[Mapping[str, Any]] = None) -> NodeData:
    """Build the payload shape that matches an editor type tag."""
    return payload_type(kind_for_tag(tag)).from_dict(raw or {})


# ============================================================================
# NODES, EDGES, GRAPH SNAPSHOTS
# ============================================================================

@dataclass(frozen=True)
class Node:
    id: str
    type: str  # editor type tag ("LLM", "RESULT", "input", "output", ...)
    position: Position = field(default_factory=Position)
    data: NodeData = field(default_factory=NodeData)

    @classmethod
    def create(
        cls,
        id: str,
        type: str,
        position: Optional[Position] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> "Node":
        return cls(
            id=id,
            type=type,
            position=position or Position(),
            data=build_payload(type, data),
        )

    @property
    def kind(self) -> NodeKind:
        return kind_for_tag(self.type)

    def with_data(self, patch: Mapping[str, Any]) -> "Node":
        return Node(id=self.id, type=self.type, position=self.position, data=self.data.merge(patch))


@dataclass(frozen=True)
class Edge:
    id: str
    source: str
    target: str


@dataclass(frozen=True)
class Graph:
    """Immutable view of the Graph Store at one point in time."""
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

# tests/test_converters.py
import pytest

from wfstudio.converters import canonicalize, hydrate, map_editor_type_to_kind
from wfstudio.errors import WorkflowValidationError
from wfstudio.models.graph import Edge, Graph, Node, NodeKind, Position


@pytest.mark.parametrize(
    "editor_type, kind",
    [
        ("LLM", NodeKind.llm),
        ("RESULT", NodeKind.result),
        ("input", NodeKind.start),
        ("output", NodeKind.end),
        ("default", NodeKind.task),
        ("group", NodeKind.task),
        ("", NodeKind.task),
        ("llm", NodeKind.task),  # tags are case-sensitive
    ],
)
def test_editor_type_mapping_is_total(editor_type, kind):
    assert map_editor_type_to_kind(editor_type) is kind
    # deterministic
    assert map_editor_type_to_kind(editor_type) is map_editor_type_to_kind(editor_type)


def test_canonicalize_strips_run_state(store):
    store.write_run_state({
        "1": {"result": '{\n  "text": "hi"\n}'},
        "2": {"error": "model timeout"},
    })
    doc = canonicalize(store.snapshot(), workflow_id="wf-1")

    for node in doc.nodes:
        assert "error" not in node.data
        assert "result" not in node.data
    assert doc.nodes[0].data == {"label": "Start", "model": "GPT-4", "prompt": "Hello"}
    assert doc.nodes[1].data == {"label": "Result"}


def test_canonicalize_does_not_touch_its_input(store):
    store.write_run_state({"2": {"result": "42"}})
    snapshot = store.snapshot()
    canonicalize(snapshot)
    assert store.snapshot() is snapshot
    assert snapshot.get_node("2").data.result == "42"


def test_canonicalize_maps_kinds_and_copies_edges():
    graph = Graph(
        nodes=(
            Node.create("in", "input", Position(x=1, y=2)),
            Node.create("llm", "LLM", data={"prompt": "Go", "label": "Ask"}),
            Node.create("custom", "webhook", data={"url": "https://x"}),
            Node.create("out", "output"),
        ),
        edges=(
            Edge(id="a", source="in", target="llm"),
            Edge(id="b", source="llm", target="custom"),
            Edge(id="c", source="custom", target="out"),
        ),
    )
    doc = canonicalize(graph, workflow_id="wf-x")

    assert doc.id == "wf-x"
    assert [n.type for n in doc.nodes] == [NodeKind.start, NodeKind.llm, NodeKind.task, NodeKind.end]
    assert doc.nodes[0].position == Position(x=1, y=2)
    assert doc.nodes[2].data == {"label": "", "url": "https://x"}
    assert [(e.id, e.source, e.target) for e in doc.edges] == [
        ("a", "in", "llm"), ("b", "llm", "custom"), ("c", "custom", "out"),
    ]


def test_canonicalize_rejects_dangling_edge():
    graph = Graph(
        nodes=(Node.create("1", "LLM"),),
        edges=(Edge(id="e1-9", source="1", target="9"),),
    )
    with pytest.raises(WorkflowValidationError):
        canonicalize(graph)


def test_canonicalize_rejects_duplicate_node_ids():
    graph = Graph(nodes=(Node.create("1", "LLM"), Node.create("1", "RESULT")))
    with pytest.raises(WorkflowValidationError):
        canonicalize(graph)


def test_canonicalize_does_not_require_connected_or_acyclic_graph():
    graph = Graph(
        nodes=(Node.create("1", "LLM"), Node.create("2", "LLM"), Node.create("3", "RESULT")),
        edges=(Edge(id="a", source="1", target="2"), Edge(id="b", source="2", target="1")),
    )
    doc = canonicalize(graph)
    assert len(doc.nodes) == 3


def test_canonicalize_mints_workflow_id(store):
    doc = canonicalize(store.snapshot())
    assert doc.id.startswith("wf-")
    assert doc.config == {}


def test_wire_form_omits_empty_config(store):
    body = canonicalize(store.snapshot(), workflow_id="wf-1").to_wire()
    assert "config" not in body
    assert body["nodes"][0] == {
        "id": "1",
        "type": "LLM",
        "position": {"x": 250.0, "y": 5.0},
        "data": {"label": "Start", "model": "GPT-4", "prompt": "Hello"},
    }
    assert body["edges"] == [{"id": "e1-2", "source": "1", "target": "2"}]

    with_config = canonicalize(store.snapshot(), workflow_id="wf-1", config={"k": "v"}).to_wire()
    assert with_config["config"] == {"k": "v"}


def test_hydrate_restores_editor_tags_and_payloads():
    graph = Graph(
        nodes=(
            Node.create("s", "input"),
            Node.create("l", "LLM", data={"prompt": "p", "seed": 3}),
            Node.create("t", "webhook"),
            Node.create("e", "output"),
        ),
        edges=(Edge(id="x", source="s", target="l"),),
    )
    nodes, edges = hydrate(canonicalize(graph))

    assert [n.type for n in nodes] == ["input", "LLM", "TASK", "output"]
    assert nodes[1].data.prompt == "p"
    assert nodes[1].data.extra == {"seed": 3}
    assert edges == (Edge(id="x", source="s", target="l"),)


def test_canonicalize_rejects_duplicate_edge_ids():
    graph = Graph(
        nodes=(Node.create("1", "LLM"), Node.create("2", "RESULT")),
        edges=(Edge(id="e", source="1", target="2"), Edge(id="e", source="2", target="1")),
    )
    with pytest.raises(WorkflowValidationError):
        canonicalize(graph)

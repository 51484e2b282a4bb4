# tests/test_merger.py
from wfstudio.merger import apply_outcome, clear_run_state, render_result
from wfstudio.models.outcome import ExecutionFailure, ExecutionSuccess


def _run_state(store):
    return {n.id: (n.data.error, n.data.result) for n in store.nodes}


def test_success_renders_results_deterministically(store):
    apply_outcome(store, ExecutionSuccess(results={"1": {"b": 2, "a": [1, 2]}}))

    assert store.get_node("1").data.result == '{\n  "a": [\n    1,\n    2\n  ],\n  "b": 2\n}'
    assert store.get_node("1").data.error is None
    # absent from the mapping: no result, no error
    assert _run_state(store)["2"] == (None, None)


def test_falsy_payloads_still_count_as_results(store):
    apply_outcome(store, ExecutionSuccess(results={"1": 0, "2": ""}))
    assert store.get_node("1").data.result == "0"
    assert store.get_node("2").data.result == '""'


def test_attributed_failure_marks_only_that_node(store):
    apply_outcome(
        store,
        ExecutionFailure(message="vertex 2 failed: boom", status_code=500, node_id="2", reason="boom"),
    )
    assert _run_state(store) == {"1": (None, None), "2": ("boom", None)}


def test_unattributed_failure_marks_no_node(store):
    apply_outcome(store, ExecutionFailure(message="internal error", status_code=500, reason="internal error"))
    assert _run_state(store) == {"1": (None, None), "2": (None, None)}


def test_new_outcome_clears_previous_run_even_on_failure(store):
    apply_outcome(store, ExecutionSuccess(results={"1": "first", "2": "second"}))
    apply_outcome(
        store,
        ExecutionFailure(message="vertex 1 failed: x", status_code=500, node_id="1", reason="x"),
    )
    assert _run_state(store) == {"1": ("x", None), "2": (None, None)}

    apply_outcome(store, ExecutionFailure(message="down", status_code=None, reason="down"))
    assert _run_state(store) == {"1": (None, None), "2": (None, None)}


def test_results_for_deleted_nodes_are_dropped(store):
    outcome = ExecutionSuccess(results={"1": "ok", "2": "ok"})
    store.remove_node("2")
    apply_outcome(store, outcome)
    assert _run_state(store) == {"1": (None, render_result("ok"))}


def test_merge_keeps_edits_made_while_in_flight(store):
    outcome = ExecutionSuccess(results={"1": {"text": "hi"}})
    # user keeps editing after the request was sent
    store.update_node_data("1", {"prompt": "Edited"})
    new_id = store.add_node("RESULT")
    store.connect("1", new_id)

    apply_outcome(store, outcome)

    node = store.get_node("1")
    assert node.data.prompt == "Edited"
    assert node.data.result == render_result({"text": "hi"})
    assert store.snapshot().node_ids() == ("1", "2", new_id)
    assert len(store.edges) == 2


def test_merge_preserves_structure_and_positions(store):
    before = store.snapshot()
    apply_outcome(store, ExecutionSuccess(results={"2": 1}))
    after = store.snapshot()
    assert after.edges == before.edges
    assert [n.position for n in after.nodes] == [n.position for n in before.nodes]
    assert [n.type for n in after.nodes] == [n.type for n in before.nodes]


def test_clear_run_state(store):
    apply_outcome(store, ExecutionSuccess(results={"1": "a", "2": "b"}))
    clear_run_state(store)
    assert _run_state(store) == {"1": (None, None), "2": (None, None)}

"""
Result Merger
Writes an execution outcome back onto the Graph Store as per-node
`result`/`error` fields. This is the only writer of run state.
"""

import json
import logging
from typing import Any, Dict, Optional

from .graph_store import GraphStore
from .models.graph import Graph
from .models.outcome import ExecutionFailure, ExecutionOutcome, ExecutionSuccess

logger = logging.getLogger(__name__)

_CLEAN = {"error": None, "result": None}


def render_result(payload: Any) -> str:
    """Deterministic rendering of a node result: pretty-printed, sorted keys."""
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def clear_run_state(store: GraphStore) -> Graph:
    """Drop every node's previous `error`/`result`."""
    dirty = [n.id for n in store.nodes if n.data.error is not None or n.data.result is not None]
    store.write_run_state({node_id: _CLEAN for node_id in dirty})
    return store.snapshot()


def apply_outcome(store: GraphStore, outcome: ExecutionOutcome) -> Graph:
    """
    Apply `outcome` to the store as it is now.

    Prior run state is always cleared first. The patch is keyed by node id,
    so edits made while the request was in flight survive, and results for
    nodes deleted in the meantime are dropped.
    """
    patches: Dict[str, Dict[str, Optional[str]]] = {n.id: dict(_CLEAN) for n in store.nodes}

    if isinstance(outcome, ExecutionSuccess):
        for node_id, payload in outcome.results.items():
            if node_id not in patches:
                logger.debug("Dropping result for unknown node %s", node_id)
                continue
            patches[node_id]["result"] = render_result(payload)
    elif isinstance(outcome, ExecutionFailure) and outcome.node_id is not None:
        if outcome.node_id in patches:
            patches[outcome.node_id]["error"] = outcome.reason
        else:
            logger.warning("Failure attributed to unknown node %s", outcome.node_id)

    store.write_run_state(patches)
    return store.snapshot()

"""
Editor session.

Wires the Graph Store, the canonicalizer, the execution and persistence
clients and the result merger together the way the editor screen uses them,
and keeps the single workflow-level status message.

Concurrency: everything runs on one event loop. The only suspension points
are the network calls. While a run is in flight, another run, a load and
`new()` are refused: the outcome is merged by node id, so the graph must
not be swapped underneath it. `is_running` lets the UI disable those actions.
"""
import logging
from typing import List, Optional

from .converters import canonicalize, hydrate
from .errors import PersistenceError, RunInProgressError, WorkflowValidationError
from .execution_client import ExecutionClient, get_execution_client
from .graph_store import GraphStore, initial_graph
from .merger import apply_outcome, clear_run_state
from .models.outcome import ExecutionOutcome
from .models.workflow import SavedWorkflow, SavedWorkflowSummary, SaveWorkflowRequest, WorkflowDocument
from .persistence_client import PersistenceClient
from .util.ids import new_id

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOW_NAME = "Untitled workflow"
RUN_SUCCEEDED = "Workflow executed successfully!"
SAVE_SUCCEEDED = "Workflow saved"


class EditorSession:
    """One open workflow: live graph, its saved identity and the status line"""

    def __init__(
        self,
        store: Optional[GraphStore] = None,
        executor: Optional[ExecutionClient] = None,
        persistence: Optional[PersistenceClient] = None,
    ):
        self.store = store if store is not None else GraphStore(initial_graph())
        self.executor = executor if executor is not None else get_execution_client()
        self.persistence = persistence if persistence is not None else PersistenceClient()

        self.workflow_id: Optional[str] = None
        self.workflow_name: str = DEFAULT_WORKFLOW_NAME

        # Workflow-level status: at most one of these is shown at a time.
        self.error: Optional[str] = None
        self.notice: Optional[str] = None

        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def document(self) -> WorkflowDocument:
        """Canonical snapshot of the current graph (no config, no run state)."""
        return canonicalize(self.store.snapshot(), workflow_id=self.workflow_id)

    def dismiss(self) -> None:
        self.error = None
        self.notice = None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self) -> ExecutionOutcome:
        """
        Canonicalize, dispatch and merge the outcome.

        Raises:
            RunInProgressError: a previous run has not resolved yet
            WorkflowValidationError: the graph cannot be canonicalized;
                nothing is sent and run state is left as it was
        """
        self._ensure_idle("start a run")

        try:
            document = self.document()
        except WorkflowValidationError as e:
            self._set_error(f"Invalid workflow: {e}")
            raise

        self._running = True
        self.dismiss()
        clear_run_state(self.store)
        try:
            outcome = await self.executor.execute(document)
        finally:
            self._running = False

        # merge against the graph as it is now, not the dispatched snapshot
        apply_outcome(self.store, outcome)
        if outcome.ok:
            self.notice = RUN_SUCCEEDED
        else:
            self._set_error(outcome.describe())
        return outcome

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def list_workflows(self) -> List[SavedWorkflowSummary]:
        try:
            return await self.persistence.list()
        except PersistenceError as e:
            self._set_error(str(e))
            raise

    async def load(self, workflow_id: str) -> SavedWorkflow:
        """
        Replace the graph with a saved workflow, discarding unsaved edits.
        A failed fetch or an invalid stored graph leaves the graph unchanged.

        Raises:
            RunInProgressError: a run is in flight, before or after the fetch
            PersistenceError: the store could not return the record
        """
        self._ensure_idle("load a workflow")
        try:
            record = await self.persistence.load(workflow_id)
        except PersistenceError as e:
            self._set_error(str(e))
            raise

        # a run may have started while the fetch was out
        self._ensure_idle("load a workflow")
        nodes, edges = hydrate(record.definition)
        try:
            self.store.replace_all(nodes, edges)
        except WorkflowValidationError as e:
            self._set_error(f"Stored workflow {workflow_id} is invalid: {e}")
            raise

        self.workflow_id = record.id
        self.workflow_name = record.name
        self.dismiss()
        logger.info("Loaded workflow %s (%s)", record.id, record.name)
        return record

    async def save(self, name: Optional[str] = None) -> SaveWorkflowRequest:
        """
        Upsert the current graph. A workflow that was never loaded or saved
        gets a fresh id; later saves reuse it.
        """
        workflow_id = self.workflow_id or new_id("wf-")
        name = name or self.workflow_name
        try:
            definition = canonicalize(self.store.snapshot(), workflow_id=workflow_id)
        except WorkflowValidationError as e:
            self._set_error(f"Invalid workflow: {e}")
            raise

        record = SaveWorkflowRequest(id=workflow_id, name=name, definition=definition)
        try:
            saved = await self.persistence.save(record)
        except PersistenceError as e:
            self._set_error(str(e))
            raise

        self.workflow_id = workflow_id
        self.workflow_name = name
        self.error = None
        self.notice = SAVE_SUCCEEDED
        return saved

    def new(self) -> None:
        """Start over from the starter graph with no saved identity."""
        self._ensure_idle("start a new workflow")
        self.store.reset()
        self.workflow_id = None
        self.workflow_name = DEFAULT_WORKFLOW_NAME
        self.dismiss()

    def _ensure_idle(self, action: str) -> None:
        if self._running:
            raise RunInProgressError(f"Cannot {action}: a workflow run is in progress")

    def _set_error(self, message: str) -> None:
        self.notice = None
        self.error = message

"""
Execution client.

Sends a canonical Workflow Document to the executor and turns the response
into an ExecutionOutcome:
- 2xx: JSON mapping node id -> result payload, returned verbatim
- non-2xx: plain-text diagnostic, optionally attributed to one vertex
- transport error: generic failure without status
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import httpx

from .config import settings
from .credentials import CredentialStore, SecretProvider, StaticSecretProvider, secrets_to_config
from .models.outcome import ExecutionFailure, ExecutionOutcome, ExecutionSuccess
from .models.workflow import WorkflowDocument

logger = logging.getLogger(__name__)

# "vertex <id> failed: <reason>"; the executor wire format, keep exact.
_VERTEX_FAILURE_RE = re.compile(r"vertex (\S+) failed: (.+)", re.DOTALL)


def attribute_failure(message: str) -> Tuple[Optional[str], str]:
    """
    Extract the failing vertex from an executor diagnostic.

    The first `vertex <id> failed: ` occurrence wins. The id token has no
    whitespace; the reason is the rest of the message (further colons
    included), minus the single line terminator the executor appends.

    Returns:
        (node_id, reason) when the message names a vertex,
        (None, message) otherwise
    """
    match = _VERTEX_FAILURE_RE.search(message)
    if not match:
        return None, message

    reason = match.group(2)
    if reason.endswith("\n"):
        reason = reason[:-1]
        if reason.endswith("\r"):
            reason = reason[:-1]
    if not reason:
        return None, message
    return match.group(1), reason


# --------------------------------------------------------------------------------------
# Module-level default client:
# - the live instance is kept in `_instance`
# - get_execution_client() creates it lazily from settings and always returns it
# - tests may delete `_instance` or monkeypatch the getter
# --------------------------------------------------------------------------------------
_instance: Optional["ExecutionClient"] = None


def get_execution_client() -> "ExecutionClient":
    """Return the shared ExecutionClient built from settings."""
    inst = globals().get("_instance", None)
    if not isinstance(inst, ExecutionClient):
        inst = ExecutionClient(secrets=CredentialStore(settings.credentials_path))
        globals()["_instance"] = inst
    return inst


class ExecutionClient:
    """
    Client for the executor's single execution endpoint.

    One call is one execution; there are no retries, batching or
    deduplication. Keeping a single run in flight is the caller's job
    (see EditorSession).
    """

    EXECUTE_PATH = "/api/execute"

    def __init__(
        self,
        base_url: Optional[str] = None,
        secrets: Optional[SecretProvider] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Executor root URL; defaults to settings.executor_url
            secrets: Credential source read at dispatch time
            timeout: Request timeout in seconds
            client: Shared AsyncClient (tests inject one with a mock transport)
        """
        self.base_url = (base_url or settings.executor_url).rstrip("/")
        self.secrets = secrets or StaticSecretProvider()
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._client = client

    def build_request_document(self, document: WorkflowDocument) -> WorkflowDocument:
        """
        Ephemeral copy of `document` with credentials merged into `config`.
        The caller's document is left untouched.
        """
        config = dict(document.config)
        config.update(secrets_to_config(self.secrets.get_secrets()))
        return document.model_copy(update={"config": config})

    async def execute(self, document: WorkflowDocument) -> ExecutionOutcome:
        """
        Dispatch `document` and wait for the executor's answer.

        Never raises for executor or transport failures; those come back as
        ExecutionFailure.
        """
        payload = self.build_request_document(document).to_wire()
        url = f"{self.base_url}{self.EXECUTE_PATH}"
        logger.info("Executing workflow %s (%d nodes)", document.id, len(document.nodes))

        try:
            response = await self._post(url, payload)
        except httpx.HTTPError as e:
            logger.warning("Executor unreachable at %s: %s", url, e)
            message = str(e) or type(e).__name__
            return ExecutionFailure(message=message, reason=message)

        return self.decode_response(response)

    def decode_response(self, response: httpx.Response) -> ExecutionOutcome:
        status = response.status_code
        if response.is_success:
            try:
                body = response.json()
            except ValueError:
                message = f"Executor returned a non-JSON body: {response.text[:200]}"
                logger.error(message)
                return ExecutionFailure(message=message, status_code=status, reason=message)
            if body is None:
                body = {}
            if not isinstance(body, dict):
                message = f"Executor returned {type(body).__name__}, expected an object"
                logger.error(message)
                return ExecutionFailure(message=message, status_code=status, reason=message)
            logger.info("Execution succeeded with %d node result(s)", len(body))
            return ExecutionSuccess(results=body)

        text = response.text
        node_id, reason = attribute_failure(text)
        if node_id is not None:
            logger.warning("Execution failed at vertex %s (%d): %s", node_id, status, reason)
        else:
            logger.warning("Execution failed (%d): %s", status, text.strip())
        return ExecutionFailure(message=text, status_code=status, node_id=node_id, reason=reason)

    async def _post(self, url: str, payload: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=payload)

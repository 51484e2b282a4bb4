"""Client for the workflow store (`/api/workflows`)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .config import settings
from .errors import PersistenceError
from .models.workflow import (
    SavedWorkflow,
    SavedWorkflowSummary,
    SaveWorkflowRequest,
)

logger = logging.getLogger(__name__)


class PersistenceClient:
    """
    List, fetch and upsert Saved Workflow Records.

    Every failure (transport or non-2xx) surfaces as PersistenceError; the
    client never touches editor state.
    """

    WORKFLOWS_PATH = "/api/workflows"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.store_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._client = client

    async def list(self) -> List[SavedWorkflowSummary]:
        """Summaries only (no definition), in the order the store returns them."""
        data = await self._request("GET", what="list workflows")
        try:
            return [SavedWorkflowSummary.model_validate(item) for item in (data or [])]
        except ValidationError as e:
            raise PersistenceError(f"Malformed workflow listing: {e}") from e

    async def load(self, workflow_id: str) -> SavedWorkflow:
        """Fetch one full record, definition included."""
        data = await self._request(
            "GET", params={"id": workflow_id}, what=f"load workflow {workflow_id}"
        )
        try:
            return SavedWorkflow.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Malformed workflow record {workflow_id}: {e}") from e

    async def save(self, record: SaveWorkflowRequest) -> SaveWorkflowRequest:
        """
        Upsert by id. The definition is stored without `config`, so
        credentials merged for an execution can never reach the store.

        Returns:
            The record exactly as it was sent
        """
        definition = record.definition.without_config()
        if definition.id != record.id:
            definition = definition.model_copy(update={"id": record.id})
        record = record.model_copy(update={"definition": definition})
        body = {"id": record.id, "name": record.name, "definition": definition.to_wire()}

        await self._request("POST", json=body, what=f"save workflow {record.id}")
        logger.info("Saved workflow %s (%s, %d nodes)", record.id, record.name, len(definition.nodes))
        return record

    async def _request(
        self,
        method: str,
        what: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{self.WORKFLOWS_PATH}"
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, params=params, json=json, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, params=params, json=json)
        except httpx.HTTPError as e:
            logger.warning("Workflow store unreachable at %s: %s", url, e)
            raise PersistenceError(f"Failed to {what}: {e}") from e

        if not response.is_success:
            detail = response.text.strip()
            logger.warning("Failed to %s (%d): %s", what, response.status_code, detail)
            raise PersistenceError(
                f"Failed to {what} ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise PersistenceError(f"Failed to {what}: response is not JSON") from e

"""
Repository Layer
Handles all database operations for saved workflows.
"""

import json
import logging
from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, select

from ..models.workflow import SavedWorkflow, SavedWorkflowSummary, SaveWorkflowRequest, WorkflowDocument
from .tables import WorkflowTable

logger = logging.getLogger(__name__)


class WorkflowRepository:
    """Repository for saved workflow upsert / list / fetch"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create_schema(self):
        """Create all database tables"""
        SQLModel.metadata.create_all(self.engine)

    def save_workflow(self, data: SaveWorkflowRequest) -> SavedWorkflowSummary:
        """
        Create the workflow, or update name and definition in place when the
        id already exists (created_at is kept, updated_at is bumped).
        """
        now = datetime.now(UTC).isoformat()
        # saved documents never carry run config (credentials live there)
        definition = data.definition.without_config()
        definition_json = json.dumps(definition.to_wire())

        with Session(self.engine) as session:
            record = session.get(WorkflowTable, data.id)
            if record is None:
                record = WorkflowTable(
                    id=data.id,
                    name=data.name,
                    definition=definition_json,
                    created_at=now,
                    updated_at=now,
                )
                logger.info("Creating workflow %s (%s)", data.id, data.name)
            else:
                record.name = data.name
                record.definition = definition_json
                record.updated_at = now
                logger.info("Updating workflow %s (%s)", data.id, data.name)

            session.add(record)
            session.commit()
            session.refresh(record)
            return self._summary(record)

    def list_workflows(self) -> List[SavedWorkflowSummary]:
        """List all workflows, most recently updated first"""
        with Session(self.engine) as session:
            records = session.exec(
                select(WorkflowTable).order_by(
                    WorkflowTable.updated_at.desc(), WorkflowTable.id
                )
            ).all()
            return [self._summary(r) for r in records]

    def get_workflow(self, workflow_id: str) -> Optional[SavedWorkflow]:
        """Get workflow by ID with its definition"""
        with Session(self.engine) as session:
            record = session.get(WorkflowTable, workflow_id)
            if not record:
                return None
            return SavedWorkflow(
                id=record.id,
                name=record.name,
                created_at=record.created_at,
                updated_at=record.updated_at,
                definition=WorkflowDocument.model_validate(json.loads(record.definition)),
            )

    @staticmethod
    def _summary(record: WorkflowTable) -> SavedWorkflowSummary:
        return SavedWorkflowSummary(
            id=record.id,
            name=record.name,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

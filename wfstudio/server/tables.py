"""
Database Models
Table backing the workflow store service.
"""

from sqlmodel import SQLModel, Field


class WorkflowTable(SQLModel, table=True):
    """
    One saved workflow per row, upserted by id.
    `definition` holds the canonical document as JSON (never any config).
    """
    __tablename__ = "workflows"

    id: str = Field(primary_key=True)
    name: str
    definition: str  # JSON, canonical Workflow Document
    created_at: str  # ISO timestamp
    updated_at: str = Field(index=True)  # ISO timestamp

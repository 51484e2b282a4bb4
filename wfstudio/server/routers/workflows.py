from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...models.workflow import SaveWorkflowRequest, SaveWorkflowResponse
from ..repository import WorkflowRepository

router = APIRouter()


def get_repo(request: Request) -> WorkflowRepository:
    return request.app.state.repo


@router.get("/workflows", status_code=status.HTTP_200_OK)
def list_or_get_workflow(id: Optional[str] = None, repo: WorkflowRepository = Depends(get_repo)):
    """Without `id`: summaries, newest first. With `id`: the full record."""
    if not id:
        return repo.list_workflows()
    workflow = repo.get_workflow(id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


@router.post("/workflows", response_model=SaveWorkflowResponse, status_code=status.HTTP_200_OK)
def save_workflow(body: SaveWorkflowRequest, repo: WorkflowRepository = Depends(get_repo)):
    """Upsert by id."""
    if not body.id.strip():
        raise HTTPException(status_code=400, detail="Missing workflow id")
    repo.save_workflow(body)
    return SaveWorkflowResponse(status="saved")

"""
Workflow Store Service
Persists Saved Workflow Records for the editor (`/api/workflows`).

Run with: uvicorn --factory wfstudio.server.main:create_app
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine
from sqlmodel import create_engine

from ..config import settings
from ..util.ids import new_id
from .repository import WorkflowRepository
from .routers import workflows

logger = logging.getLogger(__name__)


def build_engine(database_url: Optional[str] = None) -> Engine:
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, echo=False)


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """Build the service around `engine` (defaults to settings.database_url)."""
    app = FastAPI(title="Workflow Store API", version="0.1.0", openapi_url="/openapi.json")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    repo = WorkflowRepository(engine if engine is not None else build_engine())
    repo.create_schema()
    app.state.repo = repo

    app.include_router(workflows.router, prefix="/api", tags=["workflows"])

    @app.get("/api/healthz")
    def healthz():
        return {"status": "ok"}

    @app.middleware("http")
    async def add_request_id_header(request: Request, call_next):
        resp: Response = await call_next(request)
        resp.headers.setdefault("X-Request-Id", new_id("req_"))
        return resp

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "INVALID_BODY",
                    "message": "Invalid request body",
                    "details": [
                        {"path": ".".join(str(p) for p in err.get("loc", ())), "msg": err.get("msg", "")}
                        for err in exc.errors()
                    ],
                }
            },
        )

    @app.exception_handler(Exception)
    async def default_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL",
                    "message": "Unhandled error",
                    "details": [{"path": "", "msg": str(exc)}],
                }
            },
        )

    return app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(create_app(), host=settings.server_host, port=settings.server_port)

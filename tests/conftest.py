# tests/conftest.py
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from wfstudio.credentials import StaticSecretProvider
from wfstudio.execution_client import ExecutionClient
from wfstudio.graph_store import GraphStore, initial_graph
from wfstudio.persistence_client import PersistenceClient
from wfstudio.server.main import create_app

EXECUTOR_URL = "http://executor.test"
STORE_URL = "http://store.test"


@pytest.fixture()
def store():
    """Graph Store holding the starter graph: LLM "1" -> RESULT "2"."""
    return GraphStore(initial_graph())


@pytest.fixture()
def engine():
    # "sqlite://" + StaticPool keeps ONE in-memory connection alive,
    # shared with the TestClient / ASGI worker threads.
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture()
def app(engine):
    return create_app(engine)


@pytest.fixture()
def client(app):
    """Synchronous HTTP client against the workflow store service."""
    return TestClient(app)


@pytest.fixture()
def make_executor():
    """Build an ExecutionClient whose HTTP traffic goes to `handler`."""

    def factory(handler, secrets=None):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ExecutionClient(
            base_url=EXECUTOR_URL,
            secrets=StaticSecretProvider(secrets),
            timeout=5.0,
            client=http,
        )

    return factory


@pytest.fixture()
def make_persistence():
    """Build a PersistenceClient over an arbitrary httpx transport."""

    def factory(transport):
        http = httpx.AsyncClient(transport=transport)
        return PersistenceClient(base_url=STORE_URL, timeout=5.0, client=http)

    return factory


@pytest.fixture()
def persistence(app, make_persistence):
    """PersistenceClient wired to the in-process workflow store service."""
    return make_persistence(httpx.ASGITransport(app=app))

# tests/test_persistence_client.py
"""
PersistenceClient against the in-process workflow store service
(httpx.ASGITransport + in-memory SQLite).
"""
import asyncio
import json

import httpx
import pytest

from wfstudio.converters import canonicalize
from wfstudio.errors import PersistenceError
from wfstudio.models.workflow import SaveWorkflowRequest


def _record(store, wid="wf-1", name="Summarizer", config=None):
    return SaveWorkflowRequest(
        id=wid,
        name=name,
        definition=canonicalize(store.snapshot(), workflow_id=wid, config=config),
    )


def test_save_then_list_and_load(store, persistence):
    async def scenario():
        await persistence.save(_record(store))
        listing = await persistence.list()
        loaded = await persistence.load("wf-1")
        return listing, loaded

    listing, loaded = asyncio.run(scenario())

    assert [(s.id, s.name) for s in listing] == [("wf-1", "Summarizer")]
    assert not hasattr(listing[0], "definition")
    assert loaded.name == "Summarizer"
    assert loaded.definition.id == "wf-1"
    assert [n.id for n in loaded.definition.nodes] == ["1", "2"]
    assert loaded.definition.nodes[0].data["prompt"] == "Hello"


def test_save_same_id_updates_in_place(store, persistence):
    async def scenario():
        await persistence.save(_record(store, name="v1"))
        first = await persistence.load("wf-1")
        store.update_node_data("1", {"prompt": "Second"})
        await persistence.save(_record(store, name="v2"))
        second = await persistence.load("wf-1")
        listing = await persistence.list()
        return first, second, listing

    first, second, listing = asyncio.run(scenario())

    assert len(listing) == 1
    assert second.name == "v2"
    assert second.created_at == first.created_at
    assert second.updated_at >= first.updated_at
    assert second.definition.nodes[0].data["prompt"] == "Second"


def test_list_is_newest_first(store, persistence):
    async def scenario():
        await persistence.save(_record(store, wid="wf-a", name="a"))
        await persistence.save(_record(store, wid="wf-b", name="b"))
        await persistence.save(_record(store, wid="wf-a", name="a2"))
        return await persistence.list()

    listing = asyncio.run(scenario())
    assert [s.id for s in listing] == ["wf-a", "wf-b"]


def test_save_never_sends_config(store, make_persistence):
    sent = {}

    def handler(request):
        sent["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "saved"})

    persistence = make_persistence(httpx.MockTransport(handler))
    record = _record(store, config={"openai_api_key": "sk-secret"})
    returned = asyncio.run(persistence.save(record))

    assert set(sent["body"]) == {"id", "name", "definition"}
    assert "config" not in sent["body"]["definition"]
    assert "sk-secret" not in json.dumps(sent["body"])
    assert returned.definition.config == {}


def test_save_aligns_definition_id_with_record_id(store, make_persistence):
    sent = {}

    def handler(request):
        sent["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "saved"})

    record = SaveWorkflowRequest(
        id="wf-keep",
        name="n",
        definition=canonicalize(store.snapshot(), workflow_id="wf-other"),
    )
    asyncio.run(make_persistence(httpx.MockTransport(handler)).save(record))
    assert sent["body"]["definition"]["id"] == "wf-keep"


def test_load_unknown_id_raises(persistence):
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(persistence.load("wf-missing"))
    assert exc.value.status_code == 404


def test_transport_failure_raises(make_persistence):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    persistence = make_persistence(httpx.MockTransport(handler))
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(persistence.list())
    assert exc.value.status_code is None


def test_server_error_raises(store, make_persistence):
    def handler(request):
        return httpx.Response(500, text="Failed to save workflow\n")

    persistence = make_persistence(httpx.MockTransport(handler))
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(persistence.save(_record(store)))
    assert exc.value.status_code == 500
    assert "Failed to save workflow" in str(exc.value)

"""Tests for HttpxExecutor, run against httpx.MockTransport."""

import json

import httpx
import pytest

from heisenberg import (
    DEFAULT_CONFIG,
    ExecutorConfig,
    HttpError,
    HttpxExecutor,
    NotFoundError,
    Request,
    RequestDescriptor,
    Resource,
    SerializableObject,
    fields,
)


class Gadget(SerializableObject):
    root_key = "gadget"

    name = fields.string_field()
    weight = fields.number_field()


def make_executor(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return HttpxExecutor(client=client)


# ============================================================================
# Configuration
# ============================================================================


class TestExecutorConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.base_url == ""
        assert DEFAULT_CONFIG.timeout == 30.0
        assert DEFAULT_CONFIG.headers == {}

    def test_with_headers(self):
        base = ExecutorConfig(headers={"X-A": "1"})
        config = base.with_headers(**{"X-B": "2"})
        assert config.headers == {"X-A": "1", "X-B": "2"}
        assert base.headers == {"X-A": "1"}

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.timeout = 1

    @pytest.mark.asyncio
    async def test_client_is_built_from_config(self):
        config = ExecutorConfig(base_url="http://api.test", timeout=5.0, headers={"X-Token": "t"})
        async with HttpxExecutor(config) as executor:
            client = executor.client
            assert client is executor.client
            assert client.base_url == httpx.URL("http://api.test")
            assert client.headers["X-Token"] == "t"
            assert client.timeout == httpx.Timeout(5.0)
        assert executor._client is None


# ============================================================================
# Execution
# ============================================================================


class TestExecute:
    @pytest.mark.asyncio
    async def test_json_response(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["accept"] = request.headers["accept"]
            return httpx.Response(200, json={"a": 1})

        executor = make_executor(handler)
        assert await executor.execute("/things", RequestDescriptor()) == {"a": 1}
        assert seen == {"method": "GET", "url": "http://test/things", "accept": "application/json"}

    @pytest.mark.asyncio
    async def test_empty_response(self):
        executor = make_executor(lambda request: httpx.Response(204))
        assert await executor.execute("/things", RequestDescriptor()) is None

    @pytest.mark.asyncio
    async def test_text_response(self):
        executor = make_executor(lambda request: httpx.Response(200, text="a,b\n1,2\n"))
        descriptor = Request("GET").produces_csv().descriptor
        assert await executor.execute("/export", descriptor) == "a,b\n1,2\n"

    @pytest.mark.asyncio
    async def test_body(self):
        seen = {}

        def handler(request):
            seen["content"] = json.loads(request.content)
            seen["content_type"] = request.headers["content-type"]
            return httpx.Response(201, json={"ok": True})

        descriptor = Request("POST").body({"name": "g"}).descriptor
        assert await make_executor(handler).execute("/things", descriptor) == {"ok": True}
        assert seen == {"content": {"name": "g"}, "content_type": "application/json; charset=utf-8"}

    @pytest.mark.asyncio
    async def test_error_status(self):
        executor = make_executor(lambda request: httpx.Response(404, text="missing"))
        with pytest.raises(HttpError) as info:
            await executor.execute("/things/1", RequestDescriptor())
        assert info.value.status == 404
        assert info.value.status_text == "Not Found"
        assert info.value.response_text == "missing"
        assert str(info.value) == "Not Found (404)"

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(HttpError) as info:
            await make_executor(handler).execute("/things", RequestDescriptor())
        assert info.value.status == 0
        assert info.value.status_text == "ConnectError"
        assert isinstance(info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_aclose(self):
        executor = make_executor(lambda request: httpx.Response(204))
        client = executor.client
        await executor.aclose()
        assert client.is_closed
        assert executor._client is None


# ============================================================================
# End to end
# ============================================================================


class GadgetResource(Resource):
    @classmethod
    def find(cls, gadget_id, executor):
        request = cls.method("GET").url("/gadgets/{id}", {"id": gadget_id}).produces(Gadget)
        return cls.execute_request(request, executor)


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_found(self):
        def handler(request):
            assert request.url.path == "/gadgets/9"
            return httpx.Response(200, json={"gadget": {"name": "lamp", "weight": "1.5"}})

        gadget = await GadgetResource.find(9, make_executor(handler))
        assert gadget.name == "lamp"
        assert gadget.weight == 1.5
        assert json.loads(gadget.to_wrapped_json()) == {"gadget": {"name": "lamp", "weight": 1.5}}

    @pytest.mark.asyncio
    async def test_not_found(self):
        executor = make_executor(lambda request: httpx.Response(404, text="gone"))
        handle = GadgetResource.find(9, executor)
        with pytest.raises(NotFoundError) as info:
            await handle
        assert info.value.body == "gone"
        assert handle.value.object_state.is_error

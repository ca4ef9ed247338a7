from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from ecsmapper.client import EcsMappingClient
from ecsmapper.exceptions import BackendError, EndpointNotImplementedError
from ecsmapper.settings import Settings
from ecsmapper.typing.enums import DbStatus
from ecsmapper.typing.models import BatchInputItem, MappingUpdate


def _client_with(monkeypatch, handler: Callable[[httpx.Request], httpx.Response]) -> EcsMappingClient:
    monkeypatch.setenv("ECSMAPPER_API_BASE_URL", "http://mapper.local:8082/")
    settings = Settings()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(Settings, "select_async_httpx_client", lambda _self, _target_url: http_client)
    return EcsMappingClient(settings)


def test_map_batch_posts_items_with_query_params(monkeypatch, result_factory) -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"results": [result_factory("src_ip")]})

    client = _client_with(monkeypatch, handler)
    items = [BatchInputItem(sourcetype="pan_traffic", field="src_ip", description="sample value: 10.0.0.1")]

    results = asyncio.run(client.map_batch(items, limit=3, model="gpt-4o"))

    assert seen["method"] == "POST"
    url = seen["url"]
    assert isinstance(url, httpx.URL)
    assert url.path == "/map-batch"
    assert url.host == "mapper.local"
    assert url.params["limit"] == "3"
    assert url.params["model"] == "gpt-4o"
    assert seen["body"] == [{"sourcetype": "pan_traffic", "field": "src_ip", "description": "sample value: 10.0.0.1"}]
    assert len(results) == 1
    assert results[0].db_status == DbStatus.INSERTED


@pytest.mark.parametrize("body", [{}, {"results": None}, {"results": "nope"}, []])
def test_map_batch_without_results_list_is_empty(monkeypatch, body: object) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(200, json=body))

    assert asyncio.run(client.map_batch([], limit=5, model="gpt-4o-mini")) == []


def test_map_batch_prefers_backend_detail(monkeypatch) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(502, json={"detail": "LLM unavailable"}))

    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.map_batch([], limit=5, model="gpt-4o-mini"))

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "LLM unavailable"
    assert exc_info.value.user_message("fallback") == "LLM unavailable"


def test_map_batch_uses_message_field_then_nothing(monkeypatch) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(500, json={"message": "boom"}))
    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.map_batch([], limit=5, model="gpt-4o-mini"))
    assert exc_info.value.detail == "boom"

    client = _client_with(monkeypatch, lambda _request: httpx.Response(500, text="Internal Server Error"))
    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.map_batch([], limit=5, model="gpt-4o-mini"))
    assert exc_info.value.detail is None
    assert exc_info.value.user_message("fallback") == "fallback"


def test_map_batch_skips_malformed_results(monkeypatch, result_factory) -> None:
    odd = result_factory("dst_ip", confidence=1.5)
    odd["llm_decision"]["rationale"] = None
    body = {"results": [{"query": {}}, result_factory("src_ip"), odd]}
    client = _client_with(monkeypatch, lambda _request: httpx.Response(200, json=body))

    results = asyncio.run(client.map_batch([], limit=5, model="gpt-4o-mini"))

    assert [item.query.field for item in results] == ["src_ip", "dst_ip"]
    assert results[1].llm_decision.confidence == 1.5
    assert results[1].llm_decision.rationale is None


def test_list_mappings_skips_malformed_rows(monkeypatch, row_factory) -> None:
    body = {"items": [row_factory(1), row_factory(2, mapping_type="unknown"), {"id": 3}], "total": 3}
    client = _client_with(monkeypatch, lambda _request: httpx.Response(200, json=body))

    listing = asyncio.run(client.list_mappings(search="", page=1, page_size=20))

    assert [row.id for row in listing.items] == [1]
    assert listing.total == 3


def test_list_mappings_invalid_total_raises(monkeypatch) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(200, json={"items": [], "total": "many"}))

    with pytest.raises(BackendError, match="invalid total"):
        asyncio.run(client.list_mappings(search="", page=1, page_size=20))


def test_transport_failure_becomes_backend_error(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client_with(monkeypatch, handler)

    with pytest.raises(BackendError, match="connection refused"):
        asyncio.run(client.map_batch([], limit=5, model="gpt-4o-mini"))


def test_list_mappings_sends_paging_params(monkeypatch, row_factory) -> None:
    seen: dict[str, httpx.URL] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={"items": [row_factory(1), row_factory(2)], "total": 42})

    client = _client_with(monkeypatch, handler)

    listing = asyncio.run(client.list_mappings(search="ip", page=2, page_size=20))

    assert seen["url"].path == "/mappings"
    assert dict(seen["url"].params) == {"search": "ip", "page": "2", "pageSize": "20"}
    assert [row.id for row in listing.items] == [1, 2]
    assert listing.total == 42
    assert listing.items[0].human_verified is False


def test_list_mappings_tolerates_missing_keys(monkeypatch) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(200, json={"items": None}))

    listing = asyncio.run(client.list_mappings(search="", page=1, page_size=20))

    assert listing.items == []
    assert listing.total == 0


def test_list_mappings_404_is_not_implemented(monkeypatch) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(404, json={"detail": "Not Found"}))

    with pytest.raises(EndpointNotImplementedError):
        asyncio.run(client.list_mappings(search="", page=1, page_size=20))


def test_update_mapping_patches_row(monkeypatch) -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    client = _client_with(monkeypatch, handler)

    asyncio.run(client.update_mapping(7, MappingUpdate(human_verified=True, mapped_field_name="source.ip")))

    assert seen == {
        "method": "PATCH",
        "path": "/mappings/7",
        "body": {"human_verified": True, "mapped_field_name": "source.ip"},
    }


def test_update_mapping_404_is_plain_backend_error(monkeypatch) -> None:
    client = _client_with(monkeypatch, lambda _request: httpx.Response(404))

    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.update_mapping(7, MappingUpdate(human_verified=False, mapped_field_name="x")))

    assert not isinstance(exc_info.value, EndpointNotImplementedError)

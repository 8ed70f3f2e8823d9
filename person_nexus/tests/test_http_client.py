import json

import httpx
import pytest

from person_nexus.services.http import ApiError, HttpClient, with_query

BASE_URL = "http://api.local"


def mock_client(handler, **kwargs) -> HttpClient:
    return HttpClient(base_url=BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


def test_with_query_skips_none():
    assert with_query("/pessoas") == "/pessoas"
    assert with_query("/pessoas", {"search": None}) == "/pessoas"
    assert with_query("/pessoas", {"search": "ana", "page": 1, "limit": None}) == "/pessoas?search=ana&page=1"
    assert with_query("/pessoas", {"search": "josé silva"}) == "/pessoas?search=jos%C3%A9+silva"


@pytest.mark.asyncio
async def test_bearer_header_and_json_content_type():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, json={"ok": True})

    async with mock_client(handler, token_provider=lambda: "tok123") as client:
        data = await client.request("GET", "/ping")
    assert data == {"ok": True}
    assert seen["authorization"] == "Bearer tok123"
    assert seen["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_no_authorization_without_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, json=[])

    async with mock_client(handler, token_provider=lambda: None) as client:
        assert await client.request("GET", "/ping") == []
    assert "authorization" not in seen


@pytest.mark.asyncio
async def test_fetch_json_tuple_style():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/texto":
            return httpx.Response(500, text="falhou")
        return httpx.Response(404, json={"message": "Pessoa não encontrada"})

    async with mock_client(handler) as client:
        ok, data, status = await client.fetch_json("GET", "/pessoas/1")
        assert (ok, data, status) == (False, {"message": "Pessoa não encontrada"}, 404)
        ok, data, status = await client.fetch_json("GET", "/texto")
        assert (ok, data, status) == (False, {"raw": "falhou"}, 500)


@pytest.mark.asyncio
async def test_error_message_extraction():
    responses = {
        "/message": httpx.Response(409, json={"message": "CPF já cadastrado"}),
        "/detail": httpx.Response(400, json={"detail": "Missing fields"}),
        "/text": httpx.Response(502, text="Bad gateway upstream"),
        "/empty": httpx.Response(503),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return responses[request.url.path]

    async with mock_client(handler) as client:
        with pytest.raises(ApiError) as exc:
            await client.request("POST", "/message", json={})
        assert exc.value.message == "CPF já cadastrado"
        assert exc.value.status_code == 409

        with pytest.raises(ApiError) as exc:
            await client.request("GET", "/detail")
        # sem "message" o corpo JSON é repassado como texto
        assert json.loads(exc.value.message) == {"detail": "Missing fields"}

        with pytest.raises(ApiError) as exc:
            await client.request("GET", "/text")
        assert exc.value.message == "Bad gateway upstream"

        with pytest.raises(ApiError) as exc:
            await client.request("GET", "/empty")
        assert exc.value.message == "Erro 503 Service Unavailable"


@pytest.mark.asyncio
async def test_unauthorized_triggers_callback():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Token ausente ou inválido"})

    async with mock_client(handler, on_unauthorized=lambda: calls.append("logout")) as client:
        with pytest.raises(ApiError) as exc:
            await client.request("GET", "/pessoas")
    assert exc.value.status_code == 401
    assert calls == ["logout"]


@pytest.mark.asyncio
async def test_no_content_and_delete_ok_return_none():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(200, json={"deleted": True})
        return httpx.Response(204)

    async with mock_client(handler) as client:
        assert await client.request("DELETE", "/pessoas/1") is None
        assert await client.request("PATCH", "/pessoas/1", json={}) is None


@pytest.mark.asyncio
async def test_non_json_success_is_invalid_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html></html>", headers={"content-type": "text/html"})

    async with mock_client(handler) as client:
        with pytest.raises(ApiError) as exc:
            await client.request("GET", "/pessoas")
    assert exc.value.message == "Resposta inválida do servidor"


@pytest.mark.asyncio
async def test_transport_failure_becomes_status_zero():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("conexão recusada", request=request)

    async with mock_client(handler) as client:
        ok, data, status = await client.fetch_json("GET", "/pessoas")
        assert (ok, status) == (False, 0)
        assert "conexão recusada" in data["error"]
        with pytest.raises(ApiError) as exc:
            await client.request("GET", "/pessoas")
    assert exc.value.status_code == 0
    assert "conexão recusada" in exc.value.message


def test_timeout_defaults_to_config():
    client = HttpClient(base_url=BASE_URL)
    assert client.timeout == 15.0
    assert HttpClient(base_url=BASE_URL, timeout=2).timeout == 2

import httpx
import pytest

from person_nexus import config
from person_nexus.services.auth_service import AuthSession, login
from person_nexus.services.http import ApiError, HttpClient
from person_nexus.tests.conftest import AUTH


@pytest.mark.asyncio
async def test_login_stores_token(make_client, session):
    async with make_client() as client:
        await session.login(client, *AUTH)
    assert session.is_authenticated
    assert session.storage[config.TOKEN_STORAGE_KEY] == session.token


@pytest.mark.asyncio
async def test_wrong_password_is_rejected(make_client, session):
    async with make_client() as client:
        with pytest.raises(ApiError) as exc:
            await session.login(client, "admin", "errada")
    assert exc.value.status_code == 401
    assert exc.value.message == "Credenciais inválidas"
    assert not session.is_authenticated


@pytest.mark.asyncio
async def test_missing_token_in_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"user": "admin"})

    async with HttpClient(base_url="http://api.local", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiError) as exc:
            await login(client, *AUTH)
    assert exc.value.message == "Token não retornado pelo servidor"


@pytest.mark.asyncio
async def test_logout_clears_storage(make_client):
    storage = {"outra-chave": 1}
    session = AuthSession(storage)
    async with make_client(token_provider=lambda: session.token) as client:
        await session.login(client, *AUTH)
    session.logout()
    assert not session.is_authenticated
    assert storage == {"outra-chave": 1}
    # logout sem sessão ativa não falha
    session.logout()


def test_custom_storage_key():
    session = AuthSession({"meu-token": "abc"}, storage_key="meu-token")
    assert session.token == "abc"
    assert AuthSession({"meu-token": ""}, storage_key="meu-token").token is None

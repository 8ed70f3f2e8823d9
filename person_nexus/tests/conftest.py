import httpx
import pytest
import pytest_asyncio

from person_nexus.services.auth_service import AuthSession
from person_nexus.services.http import HttpClient
from person_nexus.services.person_service import PersonService
from person_nexus.services.query_cache import QueryCache
from person_nexus.stub_api.app import create_app

BASE_URL = "http://testserver"
AUTH = ("admin", "admin123")
VALID_CPF = "52998224725"
OTHER_VALID_CPF = "09702414458"


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "users.txt"
    path.write_text("# usuarios de teste\nadmin:admin123\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def stub_app(credentials_file):
    return create_app(credentials_file=credentials_file)


@pytest.fixture
def session():
    return AuthSession({})


@pytest.fixture
def make_client(stub_app, session):
    def _make(**kwargs) -> HttpClient:
        kwargs.setdefault("token_provider", lambda: session.token)
        kwargs.setdefault("on_unauthorized", session.logout)
        return HttpClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=stub_app), **kwargs)
    return _make


@pytest_asyncio.fixture
async def service(make_client, session):
    client = make_client()
    await session.login(client, *AUTH)
    yield PersonService(client, QueryCache())
    await client.aclose()

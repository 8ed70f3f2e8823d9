import pytest

from person_nexus import config
from person_nexus.models.person import PersonFormData
from person_nexus.services.http import ApiError
from person_nexus.services.person_service import PersonService
from person_nexus.tests.conftest import AUTH, OTHER_VALID_CPF, VALID_CPF


def make_form(**overrides) -> PersonFormData:
    data = {
        "nome": "Maria Souza",
        "cpf": VALID_CPF,
        "data_nascimento": "1990-01-01",
        "sexo": "feminino",
        "email": "maria@email.com",
    }
    data.update(overrides)
    return PersonFormData(**data)


@pytest.mark.asyncio
async def test_create_and_read_back(service):
    created = await service.create_person(make_form())
    assert created.id
    assert created.cpf == "529.982.247-25"
    # a API grava as chaves legadas dataDeNascimento e dataCriacao
    assert created.data_nascimento == "1990-01-01"
    assert created.data_cadastro
    assert created.data_atualizacao

    fetched = await service.get_person(created.id)
    assert fetched == created

    by_cpf = await service.get_person_by_cpf(VALID_CPF)
    assert by_cpf.id == created.id


@pytest.mark.asyncio
async def test_list_search_and_pagination(service):
    await service.create_person(make_form())
    await service.create_person(make_form(nome="Ana Lima", cpf=OTHER_VALID_CPF, email=None))

    page = await service.list_people()
    assert page.total_items == 2
    assert [p.nome for p in page.items] == ["Ana Lima", "Maria Souza"]

    found = await service.list_people(search="maria")
    assert [p.nome for p in found.items] == ["Maria Souza"]

    first = await service.list_people(page=1, limit=1)
    assert len(first.items) == 1
    assert (first.page, first.limit, first.total_pages) == (1, 1, 2)


@pytest.mark.asyncio
async def test_partial_update_sends_only_given_fields(service):
    created = await service.create_person(make_form())
    updated = await service.update_person(created.id, {"nome": "Maria Souza Lima"})
    assert updated.nome == "Maria Souza Lima"
    assert updated.cpf == created.cpf
    assert updated.email == "maria@email.com"
    assert updated.data_nascimento == "1990-01-01"


@pytest.mark.asyncio
async def test_update_birth_date_uses_api_key(service):
    created = await service.create_person(make_form())
    updated = await service.update_person(created.id, {"data_nascimento": "1985-06-15"})
    assert updated.data_nascimento == "1985-06-15"


@pytest.mark.asyncio
async def test_delete_then_not_found(service):
    created = await service.create_person(make_form())
    assert await service.delete_person(created.id) is None
    with pytest.raises(ApiError) as exc:
        await service.get_person(created.id)
    assert exc.value.status_code == 404
    assert exc.value.message == "Pessoa não encontrada"


@pytest.mark.asyncio
async def test_duplicate_cpf_conflict(service):
    await service.create_person(make_form())
    with pytest.raises(ApiError) as exc:
        await service.create_person(make_form(nome="Outra Pessoa", cpf="529.982.247-25"))
    assert exc.value.status_code == 409
    assert exc.value.message == "CPF já cadastrado"


@pytest.mark.asyncio
async def test_update_to_taken_cpf_conflicts(service):
    await service.create_person(make_form())
    other = await service.create_person(make_form(nome="Ana Lima", cpf=OTHER_VALID_CPF))
    with pytest.raises(ApiError) as exc:
        await service.update_person(other.id, {"cpf": VALID_CPF})
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_invalid_cpf_rejected_by_api(service):
    with pytest.raises(ApiError) as exc:
        await service.create_person(make_form(cpf="12345678900"))
    assert exc.value.status_code == 422
    assert exc.value.message == "CPF inválido"


@pytest.mark.asyncio
async def test_mutations_invalidate_cached_lists(service):
    key = ("people", "", 1, config.LIST_PAGE_LIMIT)
    empty = await service.list_people_cached()
    assert empty.total_items == 0
    assert service.cache.is_fresh(key)

    await service.create_person(make_form())
    assert service.cache.peek(key) is None

    refreshed = await service.list_people_cached()
    assert refreshed.total_items == 1


@pytest.mark.asyncio
async def test_cached_list_without_cache_hits_api(make_client, session):
    async with make_client() as client:
        await session.login(client, *AUTH)
        service = PersonService(client)
        page = await service.list_people_cached()
    assert page.items == []


@pytest.mark.asyncio
async def test_requests_without_login_are_unauthorized(make_client):
    async with make_client() as client:
        with pytest.raises(ApiError) as exc:
            await PersonService(client).list_people()
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_rejected_token_ends_session(make_client, session):
    async with make_client() as client:
        await session.login(client, *AUTH)
        session.storage[config.TOKEN_STORAGE_KEY] = "token-revogado"
        with pytest.raises(ApiError):
            await PersonService(client).list_people()
    assert not session.is_authenticated

"""
Serviço de pessoas: encapsula as chamadas REST e a normalização dos registros.
Mutações invalidam as listagens em cache.
"""
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

from person_nexus import config
from person_nexus.logger import get_logger
from person_nexus.models.person import Person, PersonFormData, PersonPage
from person_nexus.services.http import HttpClient, with_query
from person_nexus.services.normalizer import from_api_shape, to_api_shape, unwrap_list_response
from person_nexus.services.query_cache import QueryCache

PEOPLE_KEY = "people"


class PersonService:
    def __init__(self, client: HttpClient, cache: Optional[QueryCache] = None, api_prefix: str = config.API_PREFIX, logger=None):
        """
        Inicializa o serviço de pessoas.
        Parâmetros:
            client (HttpClient): cliente HTTP autenticado
            cache (QueryCache, opcional): cache das listagens
            api_prefix (str): prefixo das rotas (ex: /api/v1)
            logger (logging.Logger, opcional): logger para logs
        """
        self.client = client
        self.cache = cache
        self.base_path = f"{api_prefix.rstrip('/')}/pessoas"
        self.logger = logger or get_logger("person_service")

    def _path(self, *parts: Union[str, int]) -> str:
        suffix = "/".join(quote(str(p), safe="") for p in parts)
        return f"{self.base_path}/{suffix}" if suffix else self.base_path

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate((PEOPLE_KEY,))

    async def list_people(self, search: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None) -> PersonPage:
        path = with_query(self._path(), {"search": search or None, "page": page, "limit": limit})
        res = await self.client.request("GET", path)
        result = unwrap_list_response(res)
        self.logger.info(f"Listando pessoas: search={search!r} total={result.total_items} pagina={result.page}/{result.total_pages}")
        return result

    async def list_people_cached(self, search: Optional[str] = None, page: int = 1, limit: int = config.LIST_PAGE_LIMIT) -> PersonPage:
        """
        Listagem via cache: chave ('people', search, page, limit).
        Sem cache configurado, consulta diretamente a API.
        """
        if self.cache is None:
            return await self.list_people(search, page, limit)
        key = (PEOPLE_KEY, search or "", page, limit)
        return await self.cache.get_or_fetch(key, lambda: self.list_people(search, page, limit))

    async def get_person(self, person_id: Union[str, int]) -> Person:
        res = await self.client.request("GET", self._path(person_id))
        return from_api_shape(res)

    async def get_person_by_cpf(self, cpf: str) -> Person:
        res = await self.client.request("GET", self._path("cpf", cpf))
        return from_api_shape(res)

    async def create_person(self, form: PersonFormData) -> Person:
        """
        Cria uma pessoa.
        Parâmetros:
            form (PersonFormData): dados do formulário
        Retorno:
            Person: registro criado, normalizado
        """
        body = to_api_shape(form)
        res = await self.client.request("POST", self._path(), json=body)
        created = from_api_shape(res)
        self.logger.info(f"Pessoa criada: id={created.id}")
        self._invalidate()
        return created

    async def update_person(self, person_id: Union[str, int], data: Union[PersonFormData, Mapping[str, Any]]) -> Person:
        """
        Atualização parcial: apenas os campos presentes são enviados.
        """
        body = to_api_shape(data)
        res = await self.client.request("PATCH", self._path(person_id), json=body)
        updated = from_api_shape(res)
        self.logger.info(f"Pessoa atualizada: id={person_id} campos={sorted(body)}")
        self._invalidate()
        return updated

    async def delete_person(self, person_id: Union[str, int]) -> None:
        await self.client.request("DELETE", self._path(person_id))
        self.logger.info(f"Pessoa removida: id={person_id}")
        self._invalidate()

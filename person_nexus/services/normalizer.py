"""
Normalização entre o formato interno (Person / PersonFormData) e os
registros da API, que convivem com duas convenções de nomes de campo
(legada e atual). Funções puras, sem exceções para campos ausentes.
"""
import math
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from person_nexus.models.person import SEXO_OPTIONS, Person, PersonFormData, PersonPage

# Atributo interno -> campo enviado à API (somente convenção atual)
FORM_TO_API: Tuple[Tuple[str, str], ...] = (
    ("nome", "nome"),
    ("sexo", "sexo"),
    ("email", "email"),
    ("data_nascimento", "dataDeNascimento"),
    ("naturalidade", "naturalidade"),
    ("nacionalidade", "nacionalidade"),
    ("cpf", "cpf"),
    ("endereco", "endereco"),
)

# Atributo interno -> campos candidatos na resposta, em ordem de preferência
REQUIRED_SOURCES: Dict[str, Tuple[str, ...]] = {
    "id": ("id",),
    "nome": ("nome",),
    "cpf": ("cpf",),
    "data_nascimento": ("dataDeNascimento", "dataNascimento"),
    "data_cadastro": ("dataCriacao", "dataCadastro"),
    "data_atualizacao": ("dataAtualizacao",),
}
OPTIONAL_SOURCES: Dict[str, Tuple[str, ...]] = {
    "sexo": ("sexo",),
    "email": ("email",),
    "naturalidade": ("naturalidade",),
    "nacionalidade": ("nacionalidade",),
    "endereco": ("endereco",),
}

# Metadados de paginação -> campos candidatos no envelope da listagem
ITEMS_SOURCES = ("items", "data")
LIMIT_SOURCES = ("limit", "size")
TOTAL_SOURCES = ("totalItems", "total")
DEFAULT_LIMIT = 10

FormInput = Union[PersonFormData, Mapping[str, Any]]


def coalesce(record: Mapping[str, Any], candidates: Sequence[str]) -> Any:
    """Primeiro campo presente (não ausente e não nulo) entre os candidatos."""
    for key in candidates:
        value = record.get(key)
        if value is not None:
            return value
    return None


def to_api_shape(form: FormInput) -> Dict[str, Any]:
    """
    Converte dados do formulário (completos ou parciais) para o corpo da API.
    Campos ausentes ou None são omitidos.
    Parâmetros:
        form: PersonFormData ou dict com atributos internos
    Retorno:
        dict: corpo no formato da API
    """
    data = asdict(form) if is_dataclass(form) else dict(form)
    body: Dict[str, Any] = {}
    for attr, api_key in FORM_TO_API:
        value = data.get(attr)
        if value is not None:
            body[api_key] = value
    return body


def from_api_shape(api: Mapping[str, Any]) -> Person:
    """
    Converte um registro da API em Person.
    Obrigatórios ausentes viram "", opcionais ausentes viram None.
    """
    if not isinstance(api, Mapping):
        api = {}
    values: Dict[str, Any] = {}
    for attr, candidates in REQUIRED_SOURCES.items():
        value = coalesce(api, candidates)
        values[attr] = str(value) if value not in (None, "") else ""
    for attr, candidates in OPTIONAL_SOURCES.items():
        value = coalesce(api, candidates)
        values[attr] = str(value) if value else None
    if values["sexo"] not in SEXO_OPTIONS:
        values["sexo"] = None
    return Person(**values)


def _positive_int(value: Any) -> int:
    # Valores não numéricos ou zero caem no padrão de quem chama
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return 0
    return int(number)


def unwrap_list_response(payload: Any) -> PersonPage:
    """
    Normaliza a resposta de listagem.
    Lista pura: página única com todos os itens.
    Objeto: itens em 'items' ou 'data'; metadados com nomes alternativos;
    total_pages calculado quando não informado.
    """
    if isinstance(payload, list):
        items = [from_api_shape(item) for item in payload]
        return PersonPage(items=items, page=1, limit=len(items), total_items=len(items), total_pages=1)
    if not isinstance(payload, Mapping):
        return PersonPage(items=[], page=1, limit=DEFAULT_LIMIT, total_items=0, total_pages=0)

    raw_items = coalesce(payload, ITEMS_SOURCES)
    if not isinstance(raw_items, list):
        raw_items = []
    items = [from_api_shape(item) for item in raw_items]
    page = _positive_int(payload.get("page")) or 1
    limit = _positive_int(coalesce(payload, LIMIT_SOURCES)) or len(items) or DEFAULT_LIMIT
    total_items = _positive_int(coalesce(payload, TOTAL_SOURCES)) or len(items)
    total_pages = _positive_int(payload.get("totalPages")) or math.ceil(total_items / limit)
    return PersonPage(items=items, page=page, limit=limit, total_items=total_items, total_pages=total_pages)


def person_to_dict(person: Optional[Person]) -> Dict[str, Any]:
    return asdict(person) if person is not None else {}

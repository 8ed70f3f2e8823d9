from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from person_nexus.models.person import Person


@dataclass
class FilterOptions:
    sexo: Optional[str] = None
    naturalidade: Optional[str] = None
    nacionalidade: Optional[str] = None

    @property
    def active(self) -> bool:
        return any((self.sexo, self.naturalidade, self.nacionalidade))


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle.lower() in value.lower()


def matches_search(person: Person, search: str) -> bool:
    # CPF compara o texto digitado sem normalizar (pontuação precisa coincidir)
    if not search:
        return True
    return _contains(person.nome, search) or search in person.cpf or _contains(person.email, search)


def matches_filters(person: Person, filters: FilterOptions) -> bool:
    if filters.sexo and person.sexo != filters.sexo:
        return False
    if filters.naturalidade and not _contains(person.naturalidade, filters.naturalidade):
        return False
    if filters.nacionalidade and not _contains(person.nacionalidade, filters.nacionalidade):
        return False
    return True


def filter_people(people: Iterable[Person], search: str = "", filters: Optional[FilterOptions] = None) -> List[Person]:
    """
    Filtro local da listagem: busca por nome, CPF ou email e filtros por sexo,
    naturalidade e nacionalidade.
    """
    filters = filters or FilterOptions()
    return [p for p in people if matches_search(p, search) and matches_filters(p, filters)]


def count_registered_on(people: Iterable[Person], day: Optional[date] = None) -> int:
    prefix = (day or date.today()).isoformat()
    return sum(1 for p in people if p.data_cadastro and p.data_cadastro.startswith(prefix))

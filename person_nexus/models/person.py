"""
Modelos de domínio do cadastro de pessoas.
Os atributos seguem snake_case; os nomes de campo da API ficam no normalizador.
"""
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple

Sexo = Literal["masculino", "feminino", "outro"]
SEXO_OPTIONS: Tuple[str, ...] = ("masculino", "feminino", "outro")


@dataclass
class PersonFormData:
    nome: str = ""
    cpf: str = ""
    data_nascimento: str = ""
    sexo: Optional[Sexo] = None
    email: Optional[str] = None
    naturalidade: Optional[str] = None
    nacionalidade: Optional[str] = None
    endereco: Optional[str] = None


@dataclass
class Person:
    """
    Registro de pessoa como exibido pelo console.
    id, data_cadastro e data_atualizacao são atribuídos pelo backend.
    """
    id: str
    nome: str
    cpf: str
    data_nascimento: str
    data_cadastro: str = ""
    data_atualizacao: str = ""
    sexo: Optional[Sexo] = None
    email: Optional[str] = None
    naturalidade: Optional[str] = None
    nacionalidade: Optional[str] = None
    endereco: Optional[str] = None


@dataclass
class PersonPage:
    items: List[Person] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total_items: int = 0
    total_pages: int = 0

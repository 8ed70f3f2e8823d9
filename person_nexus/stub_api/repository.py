"""
Repositório em memória da API de desenvolvimento.
Os registros usam a convenção legada de nomes (dataDeNascimento, dataCriacao).
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import uuid

from person_nexus.utils.cpf_utils import CPFUtils

PERSON_FIELDS = ("nome", "sexo", "email", "dataDeNascimento", "naturalidade", "nacionalidade", "cpf", "endereco")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PessoaRepository:
    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}

    def find_by_id(self, pessoa_id: str) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(pessoa_id)
        return dict(doc) if doc else None

    def find_by_cpf(self, cpf: str) -> Optional[Dict[str, Any]]:
        digits = CPFUtils.normalize_cpf(cpf)
        for doc in self._docs.values():
            if CPFUtils.normalize_cpf(doc["cpf"]) == digits:
                return dict(doc)
        return None

    def search(self, term: Optional[str], page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        """
        Busca por nome, email ou dígitos do CPF, ordenada por nome.
        Retorno:
            tuple: (itens da página, total de itens encontrados)
        """
        docs = sorted(self._docs.values(), key=lambda d: d["nome"].lower())
        if term:
            needle = term.strip().lower()
            digits = CPFUtils.normalize_cpf(term)
            docs = [
                d for d in docs
                if needle in d["nome"].lower()
                or needle in (d.get("email") or "").lower()
                or (digits and digits in CPFUtils.normalize_cpf(d["cpf"]))
            ]
        start = (page - 1) * limit
        return [dict(d) for d in docs[start:start + limit]], len(docs)

    def insert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        doc = {key: data.get(key) for key in PERSON_FIELDS}
        doc["id"] = uuid.uuid4().hex
        doc["dataCriacao"] = now
        doc["dataAtualizacao"] = now
        self._docs[doc["id"]] = doc
        return dict(doc)

    def update(self, pessoa_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(pessoa_id)
        if doc is None:
            return None
        doc.update({key: value for key, value in changes.items() if key in PERSON_FIELDS})
        doc["dataAtualizacao"] = _now()
        return dict(doc)

    def delete(self, pessoa_id: str) -> bool:
        return self._docs.pop(pessoa_id, None) is not None

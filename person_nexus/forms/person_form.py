"""
Regras do formulário de pessoa: validação campo a campo e montagem do
payload parcial de edição.
"""
from dataclasses import asdict, fields
from typing import Any, Dict, Optional

from person_nexus.models.person import Person, PersonFormData
from person_nexus.utils.cpf_utils import validate_cpf
from person_nexus.utils.validations import (
    validate_address,
    validate_birth_date,
    validate_email,
    validate_name,
    validate_text,
)

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 100


def validate_person_form(form: PersonFormData) -> Dict[str, str]:
    """
    Valida o formulário completo.
    Parâmetros:
        form (PersonFormData): dados digitados
    Retorno:
        dict: campo -> mensagem de erro (vazio quando válido)
    """
    errors: Dict[str, str] = {}

    nome = form.nome or ""
    if not nome.strip():
        errors["nome"] = "Nome é obrigatório"
    elif not validate_name(nome):
        errors["nome"] = "Nome deve ter pelo menos 2 caracteres e conter apenas letras e espaços"
    elif len(nome.strip()) > NAME_MAX_LENGTH:
        errors["nome"] = "Nome não pode ter mais de 100 caracteres"

    cpf = form.cpf or ""
    if not cpf.strip():
        errors["cpf"] = "CPF é obrigatório"
    elif not validate_cpf(cpf):
        errors["cpf"] = "CPF inválido"

    if not form.data_nascimento:
        errors["data_nascimento"] = "Data de nascimento é obrigatória"
    elif not validate_birth_date(form.data_nascimento):
        errors["data_nascimento"] = "Data de nascimento inválida ou no futuro"

    if not form.sexo:
        errors["sexo"] = "Sexo é obrigatório"

    if form.email and form.email.strip():
        if not validate_email(form.email):
            errors["email"] = "Email inválido"
        elif len(form.email) > EMAIL_MAX_LENGTH:
            errors["email"] = "Email não pode ter mais de 100 caracteres"

    if form.naturalidade and not validate_text(form.naturalidade, 2, 50):
        errors["naturalidade"] = "Naturalidade deve ter entre 2 e 50 caracteres"

    if form.nacionalidade and not validate_text(form.nacionalidade, 2, 50):
        errors["nacionalidade"] = "Nacionalidade deve ter entre 2 e 50 caracteres"

    if form.endereco and not validate_address(form.endereco):
        errors["endereco"] = "Endereço deve ter entre 5 e 255 caracteres"

    return errors


def form_from_person(person: Optional[Person]) -> PersonFormData:
    if person is None:
        return PersonFormData()
    return PersonFormData(
        nome=person.nome,
        cpf=person.cpf,
        # o campo de data trabalha só com YYYY-MM-DD
        data_nascimento=(person.data_nascimento or "")[:10],
        sexo=person.sexo,
        email=person.email or "",
        naturalidade=person.naturalidade or "",
        nacionalidade=person.nacionalidade or "",
        endereco=person.endereco or "",
    )


def changed_fields(person: Person, form: PersonFormData) -> Dict[str, Any]:
    """
    Campos do formulário que diferem do registro salvo (None e "" são equivalentes).
    Retorno:
        dict: payload parcial para PATCH, com atributos internos
    """
    current = asdict(form_from_person(person))
    changes: Dict[str, Any] = {}
    for f in fields(PersonFormData):
        new_value = getattr(form, f.name)
        if (new_value or "") != (current.get(f.name) or ""):
            changes[f.name] = new_value if new_value is not None else ""
    return changes

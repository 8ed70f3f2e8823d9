"""
Validadores de campos do formulário de pessoa.
Nenhum deles lança exceção: entrada inválida ou ilegível retorna False.
"""
import re
from datetime import date, datetime
from typing import Optional, Union

MIN_BIRTH_DATE = date(1900, 1, 1)

_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
_NAME_RE = re.compile(r'^[a-zA-ZÀ-ÿ\s]{2,}$')


def validate_email(email: str) -> bool:
    if not isinstance(email, str):
        return False
    return _EMAIL_RE.fullmatch(email) is not None


def _parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def validate_birth_date(value: Union[str, date, datetime, None], today: Optional[date] = None) -> bool:
    """
    Valida data de nascimento.
    Parâmetros:
        value: data ISO (YYYY-MM-DD ou datetime ISO) ou objeto date
        today (date, opcional): data de referência, padrão hoje
    Retorno:
        bool: True se legível e entre 1900-01-01 e hoje (inclusive)
    """
    birth = _parse_date(value)
    if birth is None:
        return False
    limit = today or date.today()
    return MIN_BIRTH_DATE <= birth <= limit


def validate_name(name: str) -> bool:
    if not isinstance(name, str) or len(name.strip()) < 2:
        return False
    return _NAME_RE.fullmatch(name.strip()) is not None


def validate_text(text: Optional[str], min_length: int = 2, max_length: int = 100) -> bool:
    """Campo opcional: vazio é válido; caso contrário o tamanho aparado deve estar no intervalo."""
    if not text:
        return True
    if not isinstance(text, str):
        return False
    trimmed = text.strip()
    return min_length <= len(trimmed) <= max_length


def validate_address(address: Optional[str]) -> bool:
    return validate_text(address, 5, 255)

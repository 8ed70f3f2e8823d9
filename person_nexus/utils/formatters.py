import re
from datetime import date, datetime
from typing import Optional

_PLAIN_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def format_date(value: Optional[str]) -> str:
    """
    Formata data ISO para dd/mm/yyyy.
    Datas simples (YYYY-MM-DD) são tratadas como data de calendário, sem fuso.
    Retorno: 'N/A' se vazio, 'Data inválida' se ilegível.
    """
    if not value:
        return "N/A"
    try:
        if _PLAIN_DATE.match(value):
            parsed = date.fromisoformat(value)
        else:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except (TypeError, ValueError):
        return "Data inválida"
    return parsed.strftime("%d/%m/%Y")


def format_sexo(value: Optional[str]) -> str:
    if not value:
        return ""
    return value[0].upper() + value[1:]

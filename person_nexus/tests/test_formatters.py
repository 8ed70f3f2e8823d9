from person_nexus.utils.formatters import format_date, format_sexo


def test_format_date():
    assert format_date("1990-01-01") == "01/01/1990"
    assert format_date("2024-05-01T10:00:00Z") == "01/05/2024"
    assert format_date("2024-05-01T10:00:00+00:00") == "01/05/2024"


def test_format_date_missing_or_invalid():
    assert format_date(None) == "N/A"
    assert format_date("") == "N/A"
    assert format_date("01/05/2024") == "Data inválida"
    assert format_date("2024-02-30") == "Data inválida"


def test_format_sexo():
    assert format_sexo("masculino") == "Masculino"
    assert format_sexo("outro") == "Outro"
    assert format_sexo(None) == ""

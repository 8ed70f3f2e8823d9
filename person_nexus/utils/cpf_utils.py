"""
Módulo utilitário para validação e formatação de CPF.
Funções puras: nunca lançam exceção, só retornam bool ou str.
"""
import re

CPF_LENGTH = 11
_NON_DIGITS = re.compile(r'\D', re.ASCII)
_CPF_GROUPS = re.compile(r'(\d{3})(\d{3})(\d{3})(\d{2})', re.ASCII)


class CPFUtils:
    @staticmethod
    def normalize_cpf(cpf: str) -> str:
        """
        Remove caracteres não numéricos do CPF.
        Parâmetros:
            cpf (str): CPF em qualquer formato
        Retorno:
            str: CPF apenas com dígitos
        Exemplo: '529.982.247-25' -> '52998224725'
        """
        if not isinstance(cpf, str):
            return ""
        return _NON_DIGITS.sub('', cpf)

    @staticmethod
    def _check_digit(digits: str, length: int) -> int:
        # pesos decrescentes a partir de length + 1
        soma = sum(int(digits[i]) * ((length + 1) - i) for i in range(length))
        resto = soma % 11
        return 0 if resto < 2 else 11 - resto

    @staticmethod
    def is_valid_cpf(cpf: str) -> bool:
        """
        Valida CPF pelo algoritmo dos dígitos verificadores.
        Parâmetros:
            cpf (str): CPF com ou sem pontuação
        Retorno:
            bool: True se válido, False caso contrário
        """
        digits = CPFUtils.normalize_cpf(cpf)
        if len(digits) != CPF_LENGTH or digits == digits[0] * CPF_LENGTH:
            return False
        # Posição 9 usa os 9 primeiros dígitos; posição 10 usa os 10 primeiros
        for i in (9, 10):
            if int(digits[i]) != CPFUtils._check_digit(digits, i):
                return False
        return True

    @staticmethod
    def format_cpf(cpf: str) -> str:
        """
        Formata o CPF no padrão 000.000.000-00.
        Com menos de 11 dígitos devolve os dígitos sem pontuação
        (formatação progressiva durante a digitação).
        Parâmetros:
            cpf (str): CPF em qualquer formato
        Retorno:
            str: CPF formatado ou dígitos parciais
        """
        digits = CPFUtils.normalize_cpf(cpf)
        return _CPF_GROUPS.sub(r'\1.\2.\3-\4', digits, count=1)


validate_cpf = CPFUtils.is_valid_cpf
format_cpf = CPFUtils.format_cpf
normalize_cpf = CPFUtils.normalize_cpf

"""
Adapter: CPF Rules — validação de CPF e sanitização de nomes de arquivo.

Funções puras, sem efeitos colaterais.
"""

import re

_NON_DIGIT = re.compile(r"[^0-9]")
_UNSAFE_FILE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def normalize_cpf(value: str | None) -> str:
    """Mantém apenas os dígitos."""
    return _NON_DIGIT.sub("", value or "")


def _check_digit(base: str) -> int:
    """Dígito verificador mod 11 — pesos (len+1)..2."""
    weight = len(base) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(base))
    mod = (total * 10) % 11
    return 0 if mod == 10 else mod


def is_valid_cpf(value: str | None) -> bool:
    """
    CPF com dígitos verificadores válidos.

    - exatamente 11 dígitos após remover a formatação
    - rejeita dígitos todos iguais (ex: 111.111.111-11)
    - 1º dígito: pesos 10..2 sobre os 9 primeiros
    - 2º dígito: pesos 11..2 sobre os 10 primeiros
    """
    digits = normalize_cpf(value)
    if len(digits) != 11:
        return False

    if digits == digits[0] * 11:
        return False

    d1 = _check_digit(digits[:9])
    d2 = _check_digit(digits[:10])
    return d1 == int(digits[9]) and d2 == int(digits[10])


def sanitize_file_name(file_name: str, max_length: int = 255) -> str:
    """
    Remove tudo fora de [A-Za-z0-9._-], colapsa '..' e limita o tamanho.

    Impede path traversal: o resultado nunca contém '/', '\\' ou '..'.
    """
    cleaned = _UNSAFE_FILE_CHARS.sub("_", file_name or "")
    cleaned = cleaned.replace("..", "_")
    return cleaned[:max_length]

"""
Arredondamento comercial e medidas de cobrança
Projeto: GutterWorks (Calhas e Dobras)

Regra de arredondamento da largura (sempre múltiplo de 5):
  - valor INTEIRO   → múltiplo de 5 mais próximo (metade para cima)
  - valor com DECIMAL → sempre sobe para o próximo múltiplo de 5
  - valor <= 0      → largura mínima de 5 cm

Tabela de referência:
  21    → 20      21.01 → 25
  23    → 25      26.01 → 30
  26    → 25      36.75 → 40
  36    → 35      11.05 → 15

A área cobrada usa sempre a largura arredondada, nunca a bruta.
"""

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from gutterworks.core.config import settings
from gutterworks.core.exceptions import InvalidInputError

MIN_BILLABLE_WIDTH_CM = 5

AREA_QUANT = Decimal("0.0001")
LENGTH_QUANT = Decimal("0.0001")
MONEY_QUANT = Decimal("0.01")

_FIVE = Decimal("5")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Converte para Decimal passando por str, para 0.1 não virar 0.1000000000000000055.

    Raises:
        InvalidOperation: Se o valor não for numérico
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    return Decimal(str(value))


def round_to_multiple_of_5(value: Number) -> int:
    """
    Largura comercial (cm) a partir da soma bruta dos riscos.

    Args:
        value: Largura bruta em cm

    Returns:
        Largura arredondada, múltiplo de 5 e nunca menor que 5
    """
    width = to_decimal(value)
    if width <= 0:
        return MIN_BILLABLE_WIDTH_CM

    if width == width.to_integral_value():
        steps = (width / _FIVE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    else:
        steps = (width / _FIVE).to_integral_value(rounding=ROUND_CEILING)

    return int(steps * _FIVE) or MIN_BILLABLE_WIDTH_CM


def parse_length(
    value: Optional[Number], max_length_m: Optional[Decimal] = None
) -> Optional[Decimal]:
    """
    Interpreta uma entrada de metros corridos.

    Returns:
        O valor em metros se for um número positivo; None para entradas
        vazias, ilegíveis, não finitas ou não positivas

    Raises:
        InvalidInputError: Comprimento acima do máximo configurado
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        length = to_decimal(value)
    except (InvalidOperation, ValueError):
        return None
    if not length.is_finite() or length <= 0:
        return None

    limit = settings.max_bend_length_m if max_length_m is None else max_length_m
    if length > limit:
        raise InvalidInputError(
            f"Comprimento de {length} m acima do máximo de {limit} m",
            extra={"max_length_m": str(limit)},
        )
    return length


def total_length(lengths: Iterable[Optional[Number]]) -> Decimal:
    """Soma das entradas positivas de metros corridos."""
    total = Decimal("0")
    for value in lengths:
        length = parse_length(value)
        if length is not None:
            total += length
    return total


def has_positive_length(lengths: Iterable[Optional[Number]]) -> bool:
    """Uma dobra só entra nos totais com pelo menos um comprimento positivo."""
    return any(parse_length(v) is not None for v in lengths)


def bend_area(rounded_width_cm: Number, length_m: Number) -> Decimal:
    """
    Área cobrada de uma dobra: largura arredondada / 100 * metros corridos.

    Returns:
        Área em m² com 4 casas decimais
    """
    area = to_decimal(rounded_width_cm) / Decimal("100") * to_decimal(length_m)
    return area.quantize(AREA_QUANT, rounding=ROUND_HALF_UP)


def quantize_money(value: Decimal) -> Decimal:
    """Valor monetário com 2 casas decimais."""
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def quantize_area(value: Decimal) -> Decimal:
    """Área com 4 casas decimais."""
    return value.quantize(AREA_QUANT, rounding=ROUND_HALF_UP)

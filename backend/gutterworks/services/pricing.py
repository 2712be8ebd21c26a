"""
Totais e desconto de um orçamento
Projeto: GutterWorks (Calhas e Dobras)

Exemplo:
    área 2.4500 m² x R$ 50,00 = R$ 122,50
    desconto R$ 22,50 → valor final R$ 100,00
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from gutterworks.core.exceptions import BusinessValidationError, InvalidInputError
from gutterworks.services.measurement import Number, quantize_area, quantize_money, to_decimal


class QuoteTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_area_m2: Decimal
    price_per_m2: Decimal
    total_value: Decimal


def compute_quote_totals(areas: Iterable[Decimal], price_per_m2: Number) -> QuoteTotals:
    """
    Soma as áreas das dobras e aplica o preço por m².

    Cada área já vem arredondada em 4 casas; o valor total é
    arredondado em 2 casas só no fim.
    """
    price = quantize_money(to_decimal(price_per_m2))
    total_area = quantize_area(sum(areas, Decimal("0")))
    return QuoteTotals(
        total_area_m2=total_area,
        price_per_m2=price,
        total_value=quantize_money(total_area * price),
    )


def final_value(total_value: Decimal, discount_value: Optional[Decimal]) -> Decimal:
    """Valor final = total - desconto, nunca negativo."""
    discount = discount_value or Decimal("0")
    return max(quantize_money(total_value - discount), Decimal("0.00"))


def validate_discount(total_value: Decimal, amount: Number, reason: Optional[str]) -> Decimal:
    """
    Valida um desconto antes de aplicá-lo.

    Returns:
        O valor do desconto com 2 casas

    Raises:
        InvalidInputError: Valor ilegível ou não positivo
        BusinessValidationError: Desconto maior que o total ou sem motivo
    """
    try:
        discount = quantize_money(to_decimal(amount))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Desconto inválido: {amount!r}")
    # Valores abaixo de R$ 0,005 viram zero no arredondamento
    if discount.is_nan() or discount <= 0:
        raise InvalidInputError("O desconto deve ser maior que zero")

    if discount > total_value:
        raise BusinessValidationError(
            f"Desconto de R$ {discount} maior que o total de R$ {total_value}",
            error_code="DISCOUNT_EXCEEDS_TOTAL",
        )
    if not reason or not reason.strip():
        raise BusinessValidationError(
            "Informe o motivo do desconto",
            error_code="DISCOUNT_REASON_REQUIRED",
        )
    return discount

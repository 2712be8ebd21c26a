"""
Schemas Pydantic para Registros Financeiros
Projeto: GutterWorks (Calhas e Dobras)
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FinancialRecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    quote_id: uuid.UUID
    client_name: Optional[str]
    gross_value: Decimal
    discount_value: Decimal
    net_value: Decimal
    payment_method: str
    paid_at: datetime.datetime
    confirmed_by: Optional[uuid.UUID]


class FinancialSummary(BaseModel):
    """
    Resumo de recebimentos.

    Attributes:
        total: Soma de todos os registros
        total_count: Número de registros
        today: Soma dos pagamentos de hoje
        today_count: Número de pagamentos de hoje
        month: Soma dos pagamentos do mês corrente
        month_count: Número de pagamentos do mês
        average_ticket: total / total_count (0 sem registros)
    """
    total: Decimal
    total_count: int
    today: Decimal
    today_count: int
    month: Decimal
    month_count: int
    average_ticket: Decimal


__all__ = ["FinancialRecordRead", "FinancialSummary"]

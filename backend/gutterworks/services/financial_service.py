"""
Serviço de Registros Financeiros
Projeto: GutterWorks (Calhas e Dobras)

Um registro por orçamento pago: criado na confirmação do pagamento,
removido no cancelamento ou na reabertura.
"""

import datetime
import logging
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.models.financial import FinancialRecord
from gutterworks.models.quote import Quote
from gutterworks.schemas.financial import FinancialSummary
from gutterworks.services.measurement import quantize_money, to_decimal

logger = logging.getLogger(__name__)


class FinancialService:
    """Serviço de entradas de caixa dos orçamentos."""

    async def get_by_quote(self, db: AsyncSession, quote_id: uuid.UUID) -> Optional[FinancialRecord]:
        result = await db.execute(
            select(FinancialRecord).where(FinancialRecord.quote_id == quote_id)
        )
        return result.scalar_one_or_none()

    async def create_for_quote(
        self,
        db: AsyncSession,
        quote: Quote,
        paid_at: datetime.datetime,
        confirmed_by: Optional[uuid.UUID] = None,
        payment_method: str = "pix",
    ) -> FinancialRecord:
        """
        Cria o registro do pagamento de um orçamento.

        Se já houver um (orçamento lançado já pago e depois reaberto fora
        do fluxo), ele é atualizado em vez de duplicado.
        """
        record = await self.get_by_quote(db, quote.id)
        if record is None:
            record = FinancialRecord(quote_id=quote.id)
            db.add(record)

        record.client_name = quote.client_name
        record.gross_value = quote.total_value
        record.discount_value = quote.discount_value
        record.net_value = quote.final_value
        record.payment_method = payment_method
        record.paid_at = paid_at
        record.confirmed_by = confirmed_by

        await db.flush()
        logger.info("Registro financeiro do orçamento %s: R$ %s", quote.id, record.net_value)
        return record

    async def remove_for_quote(self, db: AsyncSession, quote_id: uuid.UUID) -> bool:
        """
        Remove o registro do orçamento.

        Returns:
            True se havia um registro
        """
        record = await self.get_by_quote(db, quote_id)
        if record is None:
            logger.debug("Nenhum registro financeiro para o orçamento %s", quote_id)
            return False

        await db.delete(record)
        await db.flush()
        logger.info("Registro financeiro removido do orçamento %s", quote_id)
        return True

    async def get_all(
        self,
        db: AsyncSession,
        date_from: Optional[datetime.datetime] = None,
        date_to: Optional[datetime.datetime] = None,
    ) -> list[FinancialRecord]:
        """Registros mais recentes primeiro, filtrados por data de pagamento."""
        query = select(FinancialRecord)
        if date_from is not None:
            query = query.where(FinancialRecord.paid_at >= date_from)
        if date_to is not None:
            query = query.where(FinancialRecord.paid_at <= date_to)
        query = query.order_by(FinancialRecord.paid_at.desc())

        result = await db.execute(query)
        return list(result.scalars().all())

    async def _sum_since(
        self,
        db: AsyncSession,
        since: Optional[datetime.datetime] = None,
    ) -> tuple[Decimal, int]:
        query = select(
            func.coalesce(func.sum(FinancialRecord.net_value), 0),
            func.count(FinancialRecord.id),
        )
        if since is not None:
            query = query.where(FinancialRecord.paid_at >= since)
        total, count = (await db.execute(query)).one()
        return quantize_money(to_decimal(total)), int(count)

    async def get_summary(
        self,
        db: AsyncSession,
        now: Optional[datetime.datetime] = None,
    ) -> FinancialSummary:
        """
        Totais geral, do dia e do mês, com ticket médio.

        Args:
            now: Momento de referência (padrão: agora, UTC)
        """
        now = now or datetime.datetime.now(datetime.timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_month = start_of_day.replace(day=1)

        total, total_count = await self._sum_since(db)
        today, today_count = await self._sum_since(db, start_of_day)
        month, month_count = await self._sum_since(db, start_of_month)

        average = quantize_money(total / total_count) if total_count else Decimal("0.00")

        return FinancialSummary(
            total=total,
            total_count=total_count,
            today=today,
            today_count=today_count,
            month=month,
            month_count=month_count,
            average_ticket=average,
        )


# Instância singleton do serviço
financial_service = FinancialService()

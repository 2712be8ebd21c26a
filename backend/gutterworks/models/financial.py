"""
Modelo SQLAlchemy para Registros Financeiros
Projeto: GutterWorks (Calhas e Dobras)
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gutterworks.models import Base
from gutterworks.models.mixins import TimestampMixin, UUIDMixin


class FinancialRecord(Base, UUIDMixin, TimestampMixin):
    """
    Entrada de caixa de um orçamento pago.

    Existe no máximo uma por orçamento: é criada quando o pagamento é
    confirmado e removida quando o orçamento é cancelado ou reaberto.
    """

    __tablename__ = "financial_records"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    gross_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    net_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Valor recebido (valor final do orçamento no pagamento)",
    )

    payment_method: Mapped[str] = mapped_column(String(30), nullable=False, default="pix")

    paid_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confirmed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    __table_args__ = (
        Index("ix_financial_records_paid_at", "paid_at"),
        CheckConstraint("net_value >= 0", name="ck_financial_records_net_positive"),
    )

    def __repr__(self) -> str:
        return f"<FinancialRecord(quote_id={self.quote_id}, net={self.net_value})>"

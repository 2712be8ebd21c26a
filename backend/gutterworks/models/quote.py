"""
Modelos SQLAlchemy para Orçamentos
Projeto: GutterWorks (Calhas e Dobras)

Contém:
- Quote: Orçamento (totais, preço congelado, status)
- QuoteBend: Dobras do orçamento, na ordem de produção
- DiscountAudit: Histórico de descontos aplicados
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gutterworks.models import Base
from gutterworks.models.mixins import TimestampMixin, UUIDMixin


class Quote(Base, UUIDMixin, TimestampMixin):
    """
    Orçamento de calhas.

    Os totais são calculados no servidor a partir das dobras; só o
    lançamento manual (administrativo) pode informar o valor sem dobras.
    O preço por m² é gravado no envio e não acompanha mudanças
    posteriores da configuração.

    Attributes:
        id: UUID primary key
        client_id: UUID do cliente dono do orçamento (nulo em lançamento manual avulso)
        client_name: Nome exibido do cliente
        notes: Observações
        status: draft, pending, paid, in_production, finished, cancelled
        total_area_m2: Soma das áreas das dobras (4 casas)
        price_per_m2: Preço por m² congelado no envio
        total_value: total_area_m2 * price_per_m2 (2 casas)
        discount_value: Desconto aplicado (>= 0, <= total_value)
        discount_reason: Motivo do desconto
        final_value: total_value - discount_value, nunca negativo
        payment_proof_ref: Referência opaca ao comprovante de pagamento
        admin_created: True se lançado manualmente por um administrador
        paid_at: Data/hora da confirmação do pagamento
        paid_by: UUID de quem confirmou o pagamento
        created_by: UUID de quem criou o orçamento

    Relationships:
        bends: Dobras ordenadas por bend_order
    """

    __tablename__ = "quotes"

    # ------------------------------------------------------------
    # Colunas Cliente
    # ------------------------------------------------------------
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        doc="UUID do cliente (identidade do provedor de autenticação)",
    )

    client_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        doc="Nome do cliente",
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Observações do orçamento",
    )

    # ------------------------------------------------------------
    # Colunas Status
    # ------------------------------------------------------------
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        doc="Status atual do orçamento",
    )

    admin_created: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Lançado manualmente pelo administrativo",
    )

    # ------------------------------------------------------------
    # Colunas Valores
    # ------------------------------------------------------------
    total_area_m2: Mapped[Decimal] = mapped_column(
        Numeric(12, 4),
        nullable=False,
        default=Decimal("0.0000"),
        doc="Área total cobrada em m²",
    )

    price_per_m2: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Preço por m² congelado no envio",
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Valor bruto",
    )

    discount_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Desconto aplicado",
    )

    discount_reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Motivo do último desconto",
    )

    final_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Valor final (bruto - desconto)",
    )

    # ------------------------------------------------------------
    # Colunas Pagamento
    # ------------------------------------------------------------
    payment_proof_ref: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        doc="Referência ao comprovante enviado",
    )

    paid_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Confirmação do pagamento",
    )

    paid_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        doc="Quem confirmou o pagamento",
    )

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        doc="Quem criou o orçamento",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    bends: Mapped[List["QuoteBend"]] = relationship(
        "QuoteBend",
        back_populates="quote",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="QuoteBend.bend_order",
        doc="Dobras do orçamento",
    )

    # ------------------------------------------------------------
    # Índices e Restrições
    # ------------------------------------------------------------
    __table_args__ = (
        Index("ix_quotes_status", "status"),
        Index("ix_quotes_client_id", "client_id"),
        Index("ix_quotes_status_created", "status", "created_at"),
        CheckConstraint(
            "status IN ('draft', 'pending', 'paid', 'in_production', 'finished', 'cancelled')",
            name="ck_quotes_status",
        ),
        CheckConstraint("total_area_m2 >= 0", name="ck_quotes_area_positive"),
        CheckConstraint("total_value >= 0", name="ck_quotes_total_positive"),
        CheckConstraint("discount_value >= 0", name="ck_quotes_discount_positive"),
        CheckConstraint("discount_value <= total_value", name="ck_quotes_discount_le_total"),
        CheckConstraint("final_value >= 0", name="ck_quotes_final_positive"),
    )

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, status={self.status}, final={self.final_value})>"


class QuoteBend(Base, UUIDMixin, TimestampMixin):
    """
    Dobra de um orçamento.

    Riscos e metros corridos são guardados como JSON, já validados.
    Larguras e área são gravadas como calculadas no envio.
    """

    __tablename__ = "quote_bends"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    bend_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Posição da dobra no orçamento (começa em 1)",
    )

    segments: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        doc="Riscos: [{direction, size_cm}]",
    )

    lengths: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        doc="Metros corridos positivos, como texto decimal",
    )

    total_width_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    rounded_width_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    total_length_m: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    area_m2: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)

    diagram_ref: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        doc="Referência ao desenho renderizado",
    )

    quote: Mapped["Quote"] = relationship("Quote", back_populates="bends")

    __table_args__ = (
        CheckConstraint("rounded_width_cm >= 5", name="ck_quote_bends_rounded_min"),
        CheckConstraint("rounded_width_cm % 5 = 0", name="ck_quote_bends_rounded_multiple"),
        CheckConstraint("area_m2 >= 0", name="ck_quote_bends_area_positive"),
    )

    def __repr__(self) -> str:
        return f"<QuoteBend(quote_id={self.quote_id}, order={self.bend_order}, area={self.area_m2})>"


class DiscountAudit(Base, UUIDMixin, TimestampMixin):
    """Registro de cada desconto aplicado (quem, quando, por quê)."""

    __tablename__ = "discount_audits"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    original_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    final_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    applied_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    applied_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<DiscountAudit(quote_id={self.quote_id}, discount={self.discount_value})>"

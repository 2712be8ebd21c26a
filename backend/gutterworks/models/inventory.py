"""
Modelos SQLAlchemy para o Estoque de Bobinas
Projeto: GutterWorks (Calhas e Dobras)

Contém:
- InventoryBatch: Bobina/rolo de chapa com área disponível
- InventoryMovement: Movimento do razão (entrada, consumo, estorno)

available_m2 só muda junto com um movimento gravado.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gutterworks.models import Base
from gutterworks.models.mixins import SoftDeleteMixin, TimestampMixin, UUIDMixin, utcnow

MOVEMENT_ENTRY = "entry"
MOVEMENT_CONSUMPTION = "consumption"
MOVEMENT_RESTORATION = "restoration"


class InventoryBatch(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Bobina de chapa.

    Attributes:
        id: UUID primary key
        description: Descrição (material, cor)
        notes: Observações
        width_m: Largura da bobina em metros
        length_m: Comprimento da bobina em metros
        cost_per_unit: Custo de compra da bobina
        purchased_at: Data/hora da compra (ordem FIFO de consumo)
        available_m2: Área disponível, 0 <= available_m2 <= width_m * length_m
        low_stock_threshold_m2: Limite para alerta de estoque baixo desta bobina
        is_active: False = excluída (exclusão lógica)
    """

    __tablename__ = "inventory_batches"

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    width_m: Mapped[Decimal] = mapped_column(
        Numeric(10, 4),
        nullable=False,
        doc="Largura em metros",
    )

    length_m: Mapped[Decimal] = mapped_column(
        Numeric(10, 4),
        nullable=False,
        doc="Comprimento em metros",
    )

    cost_per_unit: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Custo da bobina",
    )

    purchased_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        doc="Data da compra",
    )

    available_m2: Mapped[Decimal] = mapped_column(
        Numeric(12, 4),
        nullable=False,
        doc="Área disponível em m²",
    )

    low_stock_threshold_m2: Mapped[Decimal] = mapped_column(
        Numeric(12, 4),
        nullable=False,
        default=Decimal("5.0000"),
        doc="Alerta de estoque baixo da bobina",
    )

    movements: Mapped[List["InventoryMovement"]] = relationship(
        "InventoryMovement",
        back_populates="batch",
        lazy="noload",
    )

    @property
    def capacity_m2(self) -> Decimal:
        """Área total da bobina nova."""
        return (self.width_m * self.length_m).quantize(Decimal("0.0001"))

    @property
    def is_low(self) -> bool:
        return self.available_m2 <= self.low_stock_threshold_m2

    __table_args__ = (
        Index("ix_inventory_batches_fifo", "is_active", "purchased_at"),
        CheckConstraint("width_m > 0", name="ck_inventory_batches_width_positive"),
        CheckConstraint("length_m > 0", name="ck_inventory_batches_length_positive"),
        CheckConstraint("available_m2 >= 0", name="ck_inventory_batches_available_positive"),
        CheckConstraint("cost_per_unit >= 0", name="ck_inventory_batches_cost_positive"),
    )

    def __repr__(self) -> str:
        return f"<InventoryBatch(id={self.id}, available={self.available_m2})>"


class InventoryMovement(Base, UUIDMixin, TimestampMixin):
    """
    Movimento do razão de estoque.

    Um estorno (restoration) aponta para o consumo que desfaz em
    reversed_movement_id; o consumo pendente de um orçamento é a soma
    dos consumos menos os estornos que apontam para eles.
    """

    __tablename__ = "inventory_movements"

    batch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("inventory_batches.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    quote_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    movement_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="entry, consumption, restoration",
    )

    m2_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 4),
        nullable=False,
        doc="Área movimentada (sempre positiva; o tipo define o sentido)",
    )

    reversed_movement_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("inventory_movements.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    batch: Mapped["InventoryBatch"] = relationship(
        "InventoryBatch",
        back_populates="movements",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_inventory_movements_type_created", "movement_type", "created_at"),
        CheckConstraint(
            "movement_type IN ('entry', 'consumption', 'restoration')",
            name="ck_inventory_movements_type",
        ),
        CheckConstraint("m2_amount > 0", name="ck_inventory_movements_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<InventoryMovement(type={self.movement_type}, m2={self.m2_amount}, batch={self.batch_id})>"

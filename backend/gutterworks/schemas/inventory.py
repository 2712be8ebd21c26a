"""
Schemas Pydantic para o Estoque de Bobinas
Projeto: GutterWorks (Calhas e Dobras)
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class MovementType(str, Enum):
    """Tipos de movimento do razão de estoque."""
    ENTRY = "entry"
    CONSUMPTION = "consumption"
    RESTORATION = "restoration"


# -------------------------------------------------------------------
# Bobinas
# -------------------------------------------------------------------

class InventoryBatchCreate(BaseModel):
    """
    Entrada de bobinas.

    quantity cria várias bobinas iguais de uma vez, cada uma com seu
    movimento de entrada. Largura e comprimento ausentes usam os
    padrões da configuração.
    """
    description: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    width_m: Optional[Decimal] = Field(None, gt=0, description="Largura em metros")
    length_m: Optional[Decimal] = Field(None, gt=0, description="Comprimento em metros")
    cost_per_unit: Decimal = Field(Decimal("0.00"), ge=0, description="Custo de cada bobina")
    quantity: int = Field(1, ge=1, le=100, description="Número de bobinas iguais")
    purchased_at: Optional[datetime.datetime] = Field(None, description="Data da compra")
    low_stock_threshold_m2: Optional[Decimal] = Field(None, ge=0)


class InventoryBatchUpdate(BaseModel):
    """
    Alteração cadastral de uma bobina.

    A área disponível não pode ser alterada aqui: ela só muda por movimentos.
    """
    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    low_stock_threshold_m2: Optional[Decimal] = Field(None, ge=0)


class InventoryBatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    description: Optional[str]
    notes: Optional[str]
    width_m: Decimal
    length_m: Decimal
    cost_per_unit: Decimal
    purchased_at: datetime.datetime
    available_m2: Decimal
    low_stock_threshold_m2: Decimal
    is_active: bool
    created_at: datetime.datetime

    @computed_field
    @property
    def capacity_m2(self) -> Decimal:
        return (self.width_m * self.length_m).quantize(Decimal("0.0001"))

    @computed_field
    @property
    def used_percent(self) -> Decimal:
        """Percentual já consumido da bobina."""
        capacity = self.capacity_m2
        if capacity <= 0:
            return Decimal("0.00")
        used = (capacity - self.available_m2) / capacity * 100
        return used.quantize(Decimal("0.01"))

    @computed_field
    @property
    def is_low(self) -> bool:
        return self.available_m2 <= self.low_stock_threshold_m2


class InventorySummary(BaseModel):
    total_available_m2: Decimal
    active_batches: int
    low_batches: int
    low_stock_alert_m2: Decimal
    is_low: bool


# -------------------------------------------------------------------
# Movimentos
# -------------------------------------------------------------------

class InventoryMovementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    batch_id: uuid.UUID
    quote_id: Optional[uuid.UUID]
    movement_type: MovementType
    m2_amount: Decimal
    reversed_movement_id: Optional[uuid.UUID]
    notes: Optional[str]
    created_by: Optional[uuid.UUID]
    created_at: datetime.datetime


class InventoryMovementList(BaseModel):
    """Resposta paginada do razão de estoque."""
    items: list[InventoryMovementRead]
    total: int
    page: int
    per_page: int
    total_pages: int = 0

    @model_validator(mode="after")
    def compute_total_pages(self) -> "InventoryMovementList":
        if self.per_page > 0:
            self.total_pages = (self.total + self.per_page - 1) // self.per_page
        return self


__all__ = [
    "MovementType",
    "InventoryBatchCreate",
    "InventoryBatchUpdate",
    "InventoryBatchRead",
    "InventorySummary",
    "InventoryMovementRead",
    "InventoryMovementList",
]

"""
Schemas Pydantic para o Registro de Atividades
Projeto: GutterWorks (Calhas e Dobras)
"""

import datetime
import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class ActivityAction(str, Enum):
    """Ações que entram na trilha de auditoria."""
    QUOTE_STATUS_CHANGE = "quote_status_change"
    DISCOUNT_APPLIED = "discount_applied"
    INVENTORY_ADD = "inventory_add"
    INVENTORY_DELETE = "inventory_delete"


class ActivityEntity(str, Enum):
    QUOTE = "quote"
    INVENTORY_BATCH = "inventory_batch"


class ActivityLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action: ActivityAction
    entity_type: ActivityEntity
    entity_id: Optional[uuid.UUID]
    actor_id: Optional[uuid.UUID]
    actor_name: Optional[str]
    details: Optional[dict[str, Any]]
    created_at: datetime.datetime


class ActivityLogList(BaseModel):
    """Resposta paginada do registro de atividades."""
    items: list[ActivityLogRead]
    total: int
    page: int
    per_page: int
    total_pages: int = 0

    @model_validator(mode="after")
    def compute_total_pages(self) -> "ActivityLogList":
        if self.per_page > 0:
            self.total_pages = (self.total + self.per_page - 1) // self.per_page
        return self


__all__ = [
    "ActivityAction",
    "ActivityEntity",
    "ActivityLogRead",
    "ActivityLogList",
]

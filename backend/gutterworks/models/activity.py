"""
Modelo SQLAlchemy para o Registro de Atividades
Projeto: GutterWorks (Calhas e Dobras)

Trilha de auditoria das ações administrativas: quem fez, quando e
sobre qual registro. Os detalhes ficam em JSON.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import JSON, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gutterworks.models import Base
from gutterworks.models.mixins import TimestampMixin, UUIDMixin


class ActivityLog(Base, UUIDMixin, TimestampMixin):
    """Uma ação registrada (mudança de status, entrada ou exclusão de bobina)."""

    __tablename__ = "activity_logs"

    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(30), nullable=False)
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    actor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # 'metadata' é reservado no SQLAlchemy; a coluna mantém o nome no banco
    details: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", JSON, nullable=True
    )

    __table_args__ = (
        Index("ix_activity_logs_entity", "entity_type", "entity_id"),
        Index("ix_activity_logs_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog(action={self.action}, entity_id={self.entity_id})>"

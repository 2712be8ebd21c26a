"""
Serviço do Registro de Atividades
Projeto: GutterWorks (Calhas e Dobras)

Grava e consulta a trilha de auditoria. As gravações entram na mesma
sessão da ação registrada: se a ação for desfeita, o registro também é.
"""

import datetime
import logging
import uuid
from typing import Any, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.models.activity import ActivityLog
from gutterworks.schemas.activity import ActivityAction, ActivityEntity

logger = logging.getLogger(__name__)


class ActivityService:
    """Serviço da trilha de auditoria."""

    async def record(
        self,
        db: AsyncSession,
        action: ActivityAction,
        entity_type: ActivityEntity,
        entity_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
        actor_name: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> ActivityLog:
        """
        Registra uma ação.

        Args:
            details: Dados livres da ação; precisam ser serializáveis em JSON
        """
        entry = ActivityLog(
            action=action.value,
            entity_type=entity_type.value,
            entity_id=entity_id,
            actor_id=actor_id,
            actor_name=actor_name or None,
            details=details,
        )
        db.add(entry)
        await db.flush()

        logger.debug("Atividade %s em %s %s por %s", action.value, entity_type.value, entity_id, actor_id)
        return entry

    async def get_all(
        self,
        db: AsyncSession,
        action: Optional[ActivityAction] = None,
        entity_type: Optional[ActivityEntity] = None,
        entity_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
        date_from: Optional[datetime.datetime] = None,
        date_to: Optional[datetime.datetime] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[list[ActivityLog], int]:
        """
        Atividades com filtros e paginação, mais recentes primeiro.

        Returns:
            Tupla (atividades, total)
        """
        query = select(ActivityLog)
        count_query = select(func.count(ActivityLog.id))

        filters = []
        if action is not None:
            filters.append(ActivityLog.action == action.value)
        if entity_type is not None:
            filters.append(ActivityLog.entity_type == entity_type.value)
        if entity_id is not None:
            filters.append(ActivityLog.entity_id == entity_id)
        if actor_id is not None:
            filters.append(ActivityLog.actor_id == actor_id)
        if date_from is not None:
            filters.append(ActivityLog.created_at >= date_from)
        if date_to is not None:
            filters.append(ActivityLog.created_at <= date_to)

        if filters:
            query = query.where(*filters)
            count_query = count_query.where(*filters)

        query = query.order_by(ActivityLog.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await db.execute(query)
        items = list(result.scalars().all())

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        return items, total


# Instância singleton do serviço
activity_service = ActivityService()

"""
Router FastAPI para o Registro de Atividades
Projeto: GutterWorks (Calhas e Dobras)
"""

import datetime
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.core.database import get_db
from gutterworks.core.deps import AdminActor
from gutterworks.schemas.activity import (
    ActivityAction,
    ActivityEntity,
    ActivityLogList,
    ActivityLogRead,
)
from gutterworks.services.activity_service import activity_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/activity",
    tags=["Atividades"],
)


@router.get(
    "/",
    name="atividades_lista",
    summary="Registro de atividades",
    description="Mudanças de status, descontos e movimentações de bobinas, mais recentes primeiro.",
    response_model=ActivityLogList,
)
async def get_activity(
    actor: AdminActor,
    action: Optional[ActivityAction] = Query(None, description="Filtro por ação"),
    entity_type: Optional[ActivityEntity] = Query(None, description="Filtro por tipo de registro"),
    entity_id: Optional[uuid.UUID] = Query(None, description="Filtro por registro"),
    actor_id: Optional[uuid.UUID] = Query(None, description="Filtro por autor"),
    date_from: Optional[datetime.datetime] = Query(None, description="A partir de"),
    date_to: Optional[datetime.datetime] = Query(None, description="Até"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> ActivityLogList:
    entries, total = await activity_service.get_all(
        db,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        per_page=per_page,
    )
    return ActivityLogList(
        items=[ActivityLogRead.model_validate(e) for e in entries],
        total=total,
        page=page,
        per_page=per_page,
    )

"""
Router FastAPI para o Estoque de Bobinas
Projeto: GutterWorks (Calhas e Dobras)

Cadastro de bobinas e consulta do razão de movimentos.
Todas as rotas são do administrativo.
"""

import datetime
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.core.database import get_db
from gutterworks.core.deps import AdminActor
from gutterworks.schemas.inventory import (
    InventoryBatchCreate,
    InventoryBatchRead,
    InventoryBatchUpdate,
    InventoryMovementList,
    InventoryMovementRead,
    InventorySummary,
    MovementType,
)
from gutterworks.services.inventory_service import inventory_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/inventory",
    tags=["Estoque"],
)


@router.get(
    "/",
    name="estoque_lista",
    summary="Lista bobinas",
    description="Bobinas na ordem de consumo (mais antigas primeiro).",
    response_model=list[InventoryBatchRead],
)
async def get_batches(
    actor: AdminActor,
    include_inactive: bool = Query(False, description="Inclui bobinas excluídas"),
    only_low: bool = Query(False, description="Somente bobinas com estoque baixo"),
    db: AsyncSession = Depends(get_db),
) -> list[InventoryBatchRead]:
    batches = await inventory_service.get_all(
        db, include_inactive=include_inactive, only_low=only_low
    )
    return [InventoryBatchRead.model_validate(b) for b in batches]


@router.get(
    "/summary",
    name="estoque_resumo",
    summary="Resumo do estoque",
    description="Área disponível total e alerta de estoque baixo.",
    response_model=InventorySummary,
)
async def get_summary(
    actor: AdminActor,
    db: AsyncSession = Depends(get_db),
) -> InventorySummary:
    return await inventory_service.get_summary(db)


@router.get(
    "/movements",
    name="estoque_movimentos",
    summary="Razão de movimentos",
    description="Movimentos de entrada, consumo e estorno, mais recentes primeiro.",
    response_model=InventoryMovementList,
)
async def get_movements(
    actor: AdminActor,
    batch_id: Optional[uuid.UUID] = Query(None, description="Filtro por bobina"),
    quote_id: Optional[uuid.UUID] = Query(None, description="Filtro por orçamento"),
    movement_type: Optional[MovementType] = Query(None, description="Filtro por tipo"),
    date_from: Optional[datetime.datetime] = Query(None, description="A partir de"),
    date_to: Optional[datetime.datetime] = Query(None, description="Até"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> InventoryMovementList:
    movements, total = await inventory_service.get_movements(
        db,
        batch_id=batch_id,
        quote_id=quote_id,
        movement_type=movement_type,
        date_from=date_from,
        date_to=date_to,
        page=page,
        per_page=per_page,
    )
    return InventoryMovementList(
        items=[InventoryMovementRead.model_validate(m) for m in movements],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/{batch_id}",
    name="estoque_detalhe",
    summary="Detalhe da bobina",
    response_model=InventoryBatchRead,
)
async def get_batch(
    actor: AdminActor,
    batch_id: uuid.UUID = Path(..., description="UUID da bobina"),
    db: AsyncSession = Depends(get_db),
) -> InventoryBatchRead:
    batch = await inventory_service.get_by_id(db, batch_id)
    return InventoryBatchRead.model_validate(batch)


@router.post(
    "/",
    name="estoque_entrada",
    summary="Entrada de bobinas",
    description="Cadastra uma ou mais bobinas iguais, cheias.",
    response_model=list[InventoryBatchRead],
    status_code=status.HTTP_201_CREATED,
)
async def add_batches(
    data: InventoryBatchCreate,
    actor: AdminActor,
    db: AsyncSession = Depends(get_db),
) -> list[InventoryBatchRead]:
    batches = await inventory_service.add_batches(db, data, actor_id=actor.id)
    await db.commit()
    return [InventoryBatchRead.model_validate(b) for b in batches]


@router.put(
    "/{batch_id}",
    name="estoque_atualiza",
    summary="Atualiza bobina",
    description="Altera descrição, observações e limite de alerta. "
               "A área disponível só muda por movimentos.",
    response_model=InventoryBatchRead,
)
async def update_batch(
    data: InventoryBatchUpdate,
    actor: AdminActor,
    batch_id: uuid.UUID = Path(..., description="UUID da bobina"),
    db: AsyncSession = Depends(get_db),
) -> InventoryBatchRead:
    batch = await inventory_service.update(db, batch_id, data)
    await db.commit()
    return InventoryBatchRead.model_validate(batch)


@router.delete(
    "/{batch_id}",
    name="estoque_exclui",
    summary="Exclui bobina",
    description="Exclusão lógica: a bobina deixa de ser consumida, o histórico é mantido.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_batch(
    actor: AdminActor,
    batch_id: uuid.UUID = Path(..., description="UUID da bobina"),
    db: AsyncSession = Depends(get_db),
) -> None:
    await inventory_service.delete(db, batch_id, actor_id=actor.id)
    await db.commit()

"""
Router FastAPI para o Financeiro
Projeto: GutterWorks (Calhas e Dobras)
"""

import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.core.database import get_db
from gutterworks.core.deps import AdminActor
from gutterworks.schemas.financial import FinancialRecordRead, FinancialSummary
from gutterworks.services.financial_service import financial_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/financial",
    tags=["Financeiro"],
)


@router.get(
    "/",
    name="financeiro_lista",
    summary="Registros financeiros",
    description="Pagamentos confirmados, mais recentes primeiro.",
    response_model=list[FinancialRecordRead],
)
async def get_records(
    actor: AdminActor,
    date_from: Optional[datetime.datetime] = Query(None, description="A partir de"),
    date_to: Optional[datetime.datetime] = Query(None, description="Até"),
    db: AsyncSession = Depends(get_db),
) -> list[FinancialRecordRead]:
    records = await financial_service.get_all(db, date_from=date_from, date_to=date_to)
    return [FinancialRecordRead.model_validate(r) for r in records]


@router.get(
    "/summary",
    name="financeiro_resumo",
    summary="Resumo financeiro",
    description="Totais geral, do dia e do mês, com ticket médio.",
    response_model=FinancialSummary,
)
async def get_summary(
    actor: AdminActor,
    db: AsyncSession = Depends(get_db),
) -> FinancialSummary:
    return await financial_service.get_summary(db)

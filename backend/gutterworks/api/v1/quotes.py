"""
Router FastAPI para Orçamentos
Projeto: GutterWorks (Calhas e Dobras)

Define os endpoints de envio, lançamento manual, mudança de status,
desconto e comprovante de pagamento.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.core.database import get_db
from gutterworks.core.deps import AdminActor, CurrentActor
from gutterworks.schemas.quote import (
    DiscountApply,
    DiscountAuditRead,
    ManualQuoteCreate,
    PaymentProofUpdate,
    PendingCount,
    QuoteBendRead,
    QuoteList,
    QuoteRead,
    QuoteStatus,
    QuoteStatusUpdate,
    QuoteSubmit,
)
from gutterworks.services.quote_service import quote_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/quotes",
    tags=["Orçamentos"],
)


# -------------------------------------------------------------------
# Leitura
# -------------------------------------------------------------------

@router.get(
    "/",
    name="orcamentos_lista",
    summary="Lista orçamentos",
    description="Lista paginada de orçamentos. Clientes veem apenas os próprios.",
    response_model=QuoteList,
    status_code=status.HTTP_200_OK,
)
async def get_quotes(
    actor: CurrentActor,
    page: int = Query(1, ge=1, description="Número da página"),
    per_page: int = Query(20, ge=1, le=100, description="Itens por página"),
    status_filter: Optional[QuoteStatus] = Query(None, description="Filtro por status"),
    client_id: Optional[uuid.UUID] = Query(None, description="Filtro por cliente (administrador)"),
    db: AsyncSession = Depends(get_db),
) -> QuoteList:
    quotes, total = await quote_service.get_all(
        db=db,
        actor=actor,
        status=status_filter,
        client_id=client_id,
        page=page,
        per_page=per_page,
    )

    return QuoteList(
        items=[QuoteRead.model_validate(q) for q in quotes],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/pending-count",
    name="orcamentos_pendentes",
    summary="Orçamentos pendentes",
    description="Número de orçamentos aguardando pagamento.",
    response_model=PendingCount,
)
async def get_pending_count(
    actor: AdminActor,
    db: AsyncSession = Depends(get_db),
) -> PendingCount:
    return PendingCount(pending=await quote_service.get_pending_count(db))


@router.get(
    "/{quote_id}",
    name="orcamento_detalhe",
    summary="Detalhe do orçamento",
    response_model=QuoteRead,
)
async def get_quote(
    actor: CurrentActor,
    quote_id: uuid.UUID = Path(..., description="UUID do orçamento"),
    db: AsyncSession = Depends(get_db),
) -> QuoteRead:
    """
    Raises:
        NotFoundError: Orçamento inexistente
        AuthorizationError: Orçamento de outro cliente
    """
    quote = await quote_service.get_by_id(db, quote_id, actor)
    return QuoteRead.model_validate(quote)


@router.get(
    "/{quote_id}/bends",
    name="orcamento_dobras",
    summary="Dobras do orçamento",
    response_model=list[QuoteBendRead],
)
async def get_quote_bends(
    actor: CurrentActor,
    quote_id: uuid.UUID = Path(..., description="UUID do orçamento"),
    db: AsyncSession = Depends(get_db),
) -> list[QuoteBendRead]:
    quote = await quote_service.get_by_id(db, quote_id, actor)
    return [QuoteBendRead.model_validate(b) for b in quote.bends]


@router.get(
    "/{quote_id}/discounts",
    name="orcamento_descontos",
    summary="Histórico de descontos",
    response_model=list[DiscountAuditRead],
)
async def get_discount_history(
    actor: CurrentActor,
    quote_id: uuid.UUID = Path(..., description="UUID do orçamento"),
    db: AsyncSession = Depends(get_db),
) -> list[DiscountAuditRead]:
    audits = await quote_service.get_discount_history(db, quote_id, actor)
    return [DiscountAuditRead.model_validate(a) for a in audits]


# -------------------------------------------------------------------
# Criação
# -------------------------------------------------------------------

@router.post(
    "/",
    name="orcamento_envia",
    summary="Envia orçamento",
    description="Envia as dobras confirmadas. Os totais são recalculados no servidor "
               "e o orçamento nasce em 'pending'.",
    response_model=QuoteRead,
    status_code=status.HTTP_201_CREATED,
)
async def submit_quote(
    data: QuoteSubmit,
    actor: CurrentActor,
    db: AsyncSession = Depends(get_db),
) -> QuoteRead:
    """
    Raises:
        InvalidInputError, ReversalNotAllowedError, WidthExceededError, EmptyBendError
    """
    quote = await quote_service.submit(db, data, actor)
    await db.commit()
    return QuoteRead.model_validate(quote)


@router.post(
    "/manual",
    name="orcamento_lancamento_manual",
    summary="Lançamento manual",
    description="Lança um orçamento com status inicial escolhido (draft, pending, paid, "
               "in_production). Sem dobras, o valor total é obrigatório.",
    response_model=QuoteRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_manual_quote(
    data: ManualQuoteCreate,
    actor: AdminActor,
    db: AsyncSession = Depends(get_db),
) -> QuoteRead:
    quote = await quote_service.create_manual(db, data, actor)
    await db.commit()
    return QuoteRead.model_validate(quote)


# -------------------------------------------------------------------
# Status, desconto e comprovante
# -------------------------------------------------------------------

@router.patch(
    "/{quote_id}/status",
    name="orcamento_muda_status",
    summary="Muda status do orçamento",
    description="Aplica uma transição da máquina de status. Reabrir um orçamento pago "
               "exige confirm_reopen=true; confirmar pagamento sem comprovante exige "
               "override_proof=true.",
    response_model=QuoteRead,
)
async def change_quote_status(
    data: QuoteStatusUpdate,
    actor: CurrentActor,
    quote_id: uuid.UUID = Path(..., description="UUID do orçamento"),
    db: AsyncSession = Depends(get_db),
) -> QuoteRead:
    """
    Raises:
        InvalidTransitionError: Transição não permitida ou sem confirmação
        AuthorizationError: Ator sem permissão
        InsufficientStockError: Estoque insuficiente ao confirmar o pagamento
    """
    quote = await quote_service.change_status(db, quote_id, data, actor)
    await db.commit()
    return QuoteRead.model_validate(quote)


@router.post(
    "/{quote_id}/discount",
    name="orcamento_desconto",
    summary="Aplica desconto",
    response_model=QuoteRead,
)
async def apply_discount(
    data: DiscountApply,
    actor: AdminActor,
    quote_id: uuid.UUID = Path(..., description="UUID do orçamento"),
    db: AsyncSession = Depends(get_db),
) -> QuoteRead:
    quote = await quote_service.apply_discount(db, quote_id, data, actor)
    await db.commit()
    return QuoteRead.model_validate(quote)


@router.post(
    "/{quote_id}/proof",
    name="orcamento_comprovante",
    summary="Registra comprovante de pagamento",
    response_model=QuoteRead,
)
async def set_payment_proof(
    data: PaymentProofUpdate,
    actor: CurrentActor,
    quote_id: uuid.UUID = Path(..., description="UUID do orçamento"),
    db: AsyncSession = Depends(get_db),
) -> QuoteRead:
    quote = await quote_service.set_payment_proof(db, quote_id, data, actor)
    await db.commit()
    return QuoteRead.model_validate(quote)

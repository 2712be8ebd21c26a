"""
Serviço de Orçamentos
Projeto: GutterWorks (Calhas e Dobras)

Contém a lógica de negócio para:
- Envio de orçamento pelo cliente (dobras refeitas e totais recalculados)
- Lançamento manual pelo administrativo
- Máquina de status com efeitos colaterais (estoque e financeiro)
- Desconto com histórico e comprovante de pagamento

Efeitos das transições:
  pending → paid                 consome estoque, cria registro financeiro
  pago* → cancelled / pending    remove registro financeiro, estorna estoque
  demais transições              só mudam o status
  (* paid, in_production, finished)
"""

import datetime
import logging
import uuid
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.core.config import settings
from gutterworks.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from gutterworks.models.quote import DiscountAudit, Quote, QuoteBend
from gutterworks.schemas.activity import ActivityAction, ActivityEntity
from gutterworks.schemas.bend import BendInput
from gutterworks.schemas.quote import (
    DISCOUNTABLE_STATES,
    PAID_STATES,
    DiscountApply,
    ManualQuoteCreate,
    PaymentProofUpdate,
    QuoteStatus,
    QuoteStatusUpdate,
    QuoteSubmit,
    is_reopen,
    is_valid_transition,
)
from gutterworks.schemas.token import Actor
from gutterworks.services.activity_service import activity_service
from gutterworks.services.bend_builder import ConfirmedBend, replay_bend
from gutterworks.services.financial_service import financial_service
from gutterworks.services.inventory_service import inventory_service
from gutterworks.services.measurement import quantize_money
from gutterworks.services.pricing import compute_quote_totals, final_value, validate_discount

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class QuoteService:
    """
    Serviço de orçamentos.

    Nenhum método faz commit: os routers fazem commit depois da chamada
    e a sessão é desfeita em caso de erro.
    """

    # ------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        actor: Actor,
        status: Optional[QuoteStatus] = None,
        client_id: Optional[uuid.UUID] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[list[Quote], int]:
        """
        Lista orçamentos, mais recentes primeiro.

        Clientes só enxergam os próprios orçamentos; client_id só é
        respeitado para administradores.

        Returns:
            Tupla (orçamentos, total)
        """
        query = select(Quote)
        count_query = select(func.count(Quote.id))

        filters = []
        if not actor.is_admin:
            filters.append(Quote.client_id == actor.id)
        elif client_id is not None:
            filters.append(Quote.client_id == client_id)
        if status is not None:
            filters.append(Quote.status == status.value)

        if filters:
            query = query.where(*filters)
            count_query = count_query.where(*filters)

        query = query.order_by(Quote.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await db.execute(query)
        items = list(result.scalars().all())

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        logger.debug("Listados %s orçamentos de %s", len(items), total)
        return items, total

    async def get_by_id(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        actor: Optional[Actor] = None,
        for_update: bool = False,
    ) -> Quote:
        """
        Busca um orçamento com as dobras.

        Args:
            actor: Se informado e não for administrador, precisa ser o dono
            for_update: Bloqueia a linha até o fim da transação

        Raises:
            NotFoundError: Se o orçamento não existir
            AuthorizationError: Se um cliente tentar ver orçamento de outro
        """
        query = select(Quote).where(Quote.id == quote_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await db.execute(query)
        quote = result.scalar_one_or_none()

        if not quote:
            logger.warning("Orçamento não encontrado: %s", quote_id)
            raise NotFoundError(f"Orçamento não encontrado: {quote_id}")

        if actor is not None and not actor.is_admin and quote.client_id != actor.id:
            logger.warning("Ator %s tentou acessar o orçamento %s", actor.id, quote_id)
            raise AuthorizationError("Orçamento pertence a outro cliente")

        return quote

    async def get_pending_count(self, db: AsyncSession) -> int:
        """Orçamentos aguardando pagamento."""
        result = await db.execute(
            select(func.count(Quote.id)).where(Quote.status == QuoteStatus.PENDING.value)
        )
        return result.scalar() or 0

    async def get_discount_history(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        actor: Actor,
    ) -> list[DiscountAudit]:
        await self.get_by_id(db, quote_id, actor)
        result = await db.execute(
            select(DiscountAudit)
            .where(DiscountAudit.quote_id == quote_id)
            .order_by(DiscountAudit.created_at.asc())
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------
    # Criação
    # ------------------------------------------------------------

    def _replay_bends(self, bend_inputs: list[BendInput]) -> list[ConfirmedBend]:
        """
        Refaz cada dobra enviada aplicando todas as validações.

        Raises:
            InvalidInputError: Dobra sem metros corridos positivos
            ReversalNotAllowedError, WidthExceededError, EmptyBendError
        """
        bends = []
        for position, bend_input in enumerate(bend_inputs, start=1):
            bend = replay_bend(
                [(s.direction, s.size_cm) for s in bend_input.segments],
                bend_input.lengths,
                diagram_ref=bend_input.diagram_ref,
            )
            if not bend.is_billable:
                raise InvalidInputError(f"Dobra {position}: informe os metros corridos")
            bends.append(bend)
        return bends

    def _to_rows(self, bends: list[ConfirmedBend]) -> list[QuoteBend]:
        return [
            QuoteBend(
                bend_order=position,
                segments=[s.model_dump(mode="json") for s in bend.segments],
                lengths=[str(v) for v in bend.positive_lengths],
                total_width_cm=bend.total_width_cm,
                rounded_width_cm=bend.rounded_width_cm,
                total_length_m=bend.total_length_m,
                area_m2=bend.area_m2,
                diagram_ref=bend.diagram_ref,
            )
            for position, bend in enumerate(bends, start=1)
        ]

    async def submit(self, db: AsyncSession, data: QuoteSubmit, actor: Actor) -> Quote:
        """
        Envio de orçamento pelo cliente.

        Os totais são recalculados a partir das dobras e o preço por m²
        atual é gravado no orçamento. O orçamento nasce em pending.

        Raises:
            InvalidInputError: Nenhuma dobra ou dobra sem metros corridos
            ReversalNotAllowedError, WidthExceededError, EmptyBendError
        """
        if not data.bends:
            raise InvalidInputError("Adicione pelo menos 1 dobra ao orçamento")

        bends = self._replay_bends(data.bends)
        totals = compute_quote_totals([b.area_m2 for b in bends], settings.price_per_m2)

        quote = Quote(
            client_id=actor.id,
            client_name=actor.name or None,
            notes=data.notes,
            status=QuoteStatus.PENDING.value,
            admin_created=False,
            total_area_m2=totals.total_area_m2,
            price_per_m2=totals.price_per_m2,
            total_value=totals.total_value,
            discount_value=Decimal("0.00"),
            final_value=totals.total_value,
            created_by=actor.id,
            bends=self._to_rows(bends),
        )
        db.add(quote)
        await db.flush()

        logger.info(
            "Orçamento %s enviado por %s: %s dobra(s), %s m², R$ %s",
            quote.id, actor.id, len(bends), quote.total_area_m2, quote.total_value,
        )
        return await self.get_by_id(db, quote.id)

    async def create_manual(self, db: AsyncSession, data: ManualQuoteCreate, actor: Actor) -> Quote:
        """
        Lançamento manual pelo administrativo.

        Com dobras, os totais vêm delas; sem dobras, vale o total
        informado e a área fica zerada. Lançado já pago (ou em
        produção), o orçamento passa pelos efeitos do pagamento.

        Raises:
            AuthorizationError: Ator não administrador
            InsufficientStockError: Estoque insuficiente para um lançamento já pago
        """
        if not actor.is_admin:
            raise AuthorizationError("Apenas administradores podem lançar orçamentos manualmente")

        if data.bends:
            bends = self._replay_bends(data.bends)
            totals = compute_quote_totals([b.area_m2 for b in bends], settings.price_per_m2)
            total_area, total_value = totals.total_area_m2, totals.total_value
            price = totals.price_per_m2
        else:
            if data.total_value is None:
                raise InvalidInputError("Informe o valor total do orçamento sem dobras")
            bends = []
            total_area = Decimal("0.0000")
            total_value = quantize_money(data.total_value)
            price = quantize_money(settings.price_per_m2)

        quote = Quote(
            client_id=data.client_id,
            client_name=data.client_name,
            notes=data.notes,
            status=data.status.value,
            admin_created=True,
            total_area_m2=total_area,
            price_per_m2=price,
            total_value=total_value,
            discount_value=Decimal("0.00"),
            final_value=total_value,
            payment_proof_ref=data.payment_proof_ref,
            created_by=actor.id,
            bends=self._to_rows(bends),
        )
        db.add(quote)
        await db.flush()

        if data.status in PAID_STATES:
            await self._enter_paid(db, quote, actor)

        logger.info(
            "Orçamento manual %s lançado por %s em %s: R$ %s",
            quote.id, actor.id, quote.status, quote.total_value,
        )
        return await self.get_by_id(db, quote.id)

    # ------------------------------------------------------------
    # Máquina de status
    # ------------------------------------------------------------

    async def _enter_paid(self, db: AsyncSession, quote: Quote, actor: Actor) -> None:
        """Consome o estoque e cria o registro financeiro."""
        await inventory_service.consume(db, quote.id, quote.total_area_m2, actor_id=actor.id)
        paid_at = _utcnow()
        await financial_service.create_for_quote(db, quote, paid_at, confirmed_by=actor.id)
        quote.paid_at = paid_at
        quote.paid_by = actor.id

    async def _leave_paid(self, db: AsyncSession, quote: Quote, actor: Actor) -> None:
        """Remove o registro financeiro e estorna o consumo pendente."""
        await financial_service.remove_for_quote(db, quote.id)
        await inventory_service.restore(db, quote.id, actor_id=actor.id)

    def _check_permission(self, quote: Quote, new_status: QuoteStatus, actor: Actor) -> None:
        """
        Clientes só podem cancelar o próprio orçamento ainda pendente.

        Raises:
            AuthorizationError
        """
        if actor.is_admin:
            return
        current = QuoteStatus(quote.status)
        if (
            current == QuoteStatus.PENDING
            and new_status == QuoteStatus.CANCELLED
            and quote.client_id == actor.id
        ):
            return
        logger.warning(
            "Ator %s (%s) sem permissão para %s → %s no orçamento %s",
            actor.id, actor.role.value, current.value, new_status.value, quote.id,
        )
        raise AuthorizationError("Clientes só podem cancelar o próprio orçamento pendente")

    async def change_status(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        data: QuoteStatusUpdate,
        actor: Actor,
    ) -> Quote:
        """
        Aplica uma transição de status com os efeitos colaterais.

        Os efeitos rodam antes da troca de status; se algum falhar, a
        exceção sobe e a sessão é desfeita sem alterar nada.

        Raises:
            NotFoundError: Orçamento inexistente
            InvalidTransitionError: Transição fora da matriz, reabertura
                sem confirmação ou pagamento sem comprovante
            AuthorizationError: Ator sem permissão para a transição
            InsufficientStockError: Estoque insuficiente ao confirmar o pagamento
        """
        quote = await self.get_by_id(db, quote_id, for_update=True)
        current = QuoteStatus(quote.status)
        new_status = data.status

        if not is_valid_transition(current, new_status):
            logger.warning(
                "Transição inválida no orçamento %s: %s → %s",
                quote.id, current.value, new_status.value,
            )
            raise InvalidTransitionError(
                f"Transição de '{current.value}' para '{new_status.value}' não permitida",
                extra={"from": current.value, "to": new_status.value},
            )

        self._check_permission(quote, new_status, actor)

        if is_reopen(current, new_status) and not data.confirm_reopen:
            raise InvalidTransitionError(
                "Reabrir um orçamento pago remove o registro financeiro e estorna o estoque. "
                "Confirme a reabertura.",
                error_code="REOPEN_CONFIRMATION_REQUIRED",
                extra={"from": current.value, "to": new_status.value},
            )

        if current == QuoteStatus.PENDING and new_status == QuoteStatus.PAID:
            if not quote.payment_proof_ref and not data.override_proof:
                raise InvalidTransitionError(
                    "Orçamento sem comprovante de pagamento",
                    error_code="PAYMENT_PROOF_REQUIRED",
                )
            await self._enter_paid(db, quote, actor)

        elif current in PAID_STATES and new_status in (QuoteStatus.CANCELLED, QuoteStatus.PENDING):
            await self._leave_paid(db, quote, actor)
            if new_status == QuoteStatus.PENDING:
                quote.paid_at = None
                quote.paid_by = None

        quote.status = new_status.value
        await activity_service.record(
            db,
            ActivityAction.QUOTE_STATUS_CHANGE,
            ActivityEntity.QUOTE,
            entity_id=quote.id,
            actor_id=actor.id,
            actor_name=actor.name,
            details={"from": current.value, "to": new_status.value},
        )

        logger.info(
            "Orçamento %s: %s → %s por %s",
            quote.id, current.value, new_status.value, actor.id,
        )
        return quote

    # ------------------------------------------------------------
    # Desconto e comprovante
    # ------------------------------------------------------------

    async def apply_discount(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        data: DiscountApply,
        actor: Actor,
    ) -> Quote:
        """
        Aplica um desconto e registra no histórico.

        Um novo desconto substitui o anterior; o valor final é sempre
        total - desconto. Só vale antes do pagamento (draft ou pending).

        Raises:
            AuthorizationError: Ator não administrador
            ConflictError: Orçamento já pago ou cancelado
            InvalidInputError, BusinessValidationError: Valor ou motivo inválidos
        """
        if not actor.is_admin:
            raise AuthorizationError("Apenas administradores podem aplicar desconto")

        quote = await self.get_by_id(db, quote_id, for_update=True)
        if QuoteStatus(quote.status) not in DISCOUNTABLE_STATES:
            logger.warning("Desconto recusado no orçamento %s em %s", quote.id, quote.status)
            raise ConflictError(
                f"Desconto não permitido com o orçamento em '{quote.status}'",
                error_code="DISCOUNT_NOT_ALLOWED",
            )

        discount = validate_discount(quote.total_value, data.amount, data.reason)
        reason = data.reason.strip()
        new_final = final_value(quote.total_value, discount)

        db.add(DiscountAudit(
            quote_id=quote.id,
            original_value=quote.total_value,
            discount_value=discount,
            final_value=new_final,
            reason=reason,
            applied_by=actor.id,
            applied_by_name=actor.name or None,
        ))

        quote.discount_value = discount
        quote.discount_reason = reason
        quote.final_value = new_final
        await activity_service.record(
            db,
            ActivityAction.DISCOUNT_APPLIED,
            ActivityEntity.QUOTE,
            entity_id=quote.id,
            actor_id=actor.id,
            actor_name=actor.name,
            details={"discount_value": str(discount), "final_value": str(new_final), "reason": reason},
        )

        logger.info(
            "Desconto de R$ %s no orçamento %s por %s: final R$ %s",
            discount, quote.id, actor.id, new_final,
        )
        return quote

    async def set_payment_proof(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        data: PaymentProofUpdate,
        actor: Actor,
    ) -> Quote:
        """
        Associa o comprovante de pagamento ao orçamento.

        Raises:
            AuthorizationError: Cliente que não é o dono
            ConflictError: Orçamento cancelado
        """
        quote = await self.get_by_id(db, quote_id, actor)
        if quote.status == QuoteStatus.CANCELLED.value:
            raise ConflictError("Orçamento cancelado não aceita comprovante")

        quote.payment_proof_ref = data.payment_proof_ref.strip()
        await db.flush()

        logger.info("Comprovante registrado no orçamento %s por %s", quote.id, actor.id)
        return quote


# Instância singleton do serviço
quote_service = QuoteService()

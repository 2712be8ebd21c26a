"""
Serviço do Estoque de Bobinas
Projeto: GutterWorks (Calhas e Dobras)

Contém a lógica de negócio para:
- Cadastro de bobinas (entrada, alteração, exclusão lógica)
- Consumo de área (FIFO por data de compra)
- Estorno de consumo de um orçamento (LIFO, limitado à capacidade da bobina)
- Razão de movimentos e resumo de estoque

Consumo e estorno bloqueiam as linhas das bobinas (SELECT ... FOR UPDATE)
e não fazem commit: a transação é do chamador.
"""

import datetime
import logging
import uuid
from collections import defaultdict
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gutterworks.core.config import settings
from gutterworks.core.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from gutterworks.models.inventory import (
    MOVEMENT_CONSUMPTION,
    MOVEMENT_ENTRY,
    MOVEMENT_RESTORATION,
    InventoryBatch,
    InventoryMovement,
)
from gutterworks.schemas.activity import ActivityAction, ActivityEntity
from gutterworks.schemas.inventory import (
    InventoryBatchCreate,
    InventoryBatchUpdate,
    InventorySummary,
    MovementType,
)
from gutterworks.services.activity_service import activity_service
from gutterworks.services.measurement import Number, quantize_area, to_decimal

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class InventoryService:
    """
    Serviço do razão de estoque.

    Métodos async sem dependência do FastAPI.
    """

    # ------------------------------------------------------------
    # Bobinas
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        include_inactive: bool = False,
        only_low: bool = False,
    ) -> list[InventoryBatch]:
        """
        Lista as bobinas na ordem de consumo (mais antigas primeiro).

        Args:
            db: Sessão do banco
            include_inactive: Inclui bobinas excluídas
            only_low: Somente bobinas abaixo do próprio limite de alerta
        """
        query = select(InventoryBatch)
        if not include_inactive:
            query = query.where(InventoryBatch.is_active.is_(True))
        if only_low:
            query = query.where(InventoryBatch.available_m2 <= InventoryBatch.low_stock_threshold_m2)
        query = query.order_by(
            InventoryBatch.purchased_at.asc(),
            InventoryBatch.created_at.asc(),
            InventoryBatch.id.asc(),
        )

        result = await db.execute(query)
        items = list(result.scalars().all())
        logger.debug("Listadas %s bobinas", len(items))
        return items

    async def get_by_id(self, db: AsyncSession, batch_id: uuid.UUID) -> InventoryBatch:
        """
        Raises:
            NotFoundError: Se a bobina não existir
        """
        result = await db.execute(select(InventoryBatch).where(InventoryBatch.id == batch_id))
        batch = result.scalar_one_or_none()

        if not batch:
            logger.warning("Bobina não encontrada: %s", batch_id)
            raise NotFoundError(f"Bobina não encontrada: {batch_id}")

        return batch

    async def add_batches(
        self,
        db: AsyncSession,
        data: InventoryBatchCreate,
        actor_id: Optional[uuid.UUID] = None,
    ) -> list[InventoryBatch]:
        """
        Cadastra data.quantity bobinas iguais, cada uma cheia e com seu
        movimento de entrada.

        Returns:
            As bobinas criadas
        """
        width = data.width_m if data.width_m is not None else settings.default_batch_width_m
        length = data.length_m if data.length_m is not None else settings.default_batch_length_m
        threshold = (
            data.low_stock_threshold_m2
            if data.low_stock_threshold_m2 is not None
            else settings.default_batch_low_stock_m2
        )
        purchased_at = data.purchased_at or datetime.datetime.now(datetime.timezone.utc)
        capacity = quantize_area(width * length)

        batches = []
        for _ in range(data.quantity):
            batch = InventoryBatch(
                description=data.description,
                notes=data.notes,
                width_m=width,
                length_m=length,
                cost_per_unit=data.cost_per_unit,
                purchased_at=purchased_at,
                available_m2=capacity,
                low_stock_threshold_m2=threshold,
                is_active=True,
            )
            db.add(batch)
            await db.flush()

            db.add(InventoryMovement(
                batch_id=batch.id,
                movement_type=MOVEMENT_ENTRY,
                m2_amount=capacity,
                notes="Entrada de bobina",
                created_by=actor_id,
            ))
            await activity_service.record(
                db,
                ActivityAction.INVENTORY_ADD,
                ActivityEntity.INVENTORY_BATCH,
                entity_id=batch.id,
                actor_id=actor_id,
                details={"width_m": str(width), "length_m": str(length), "capacity_m2": str(capacity)},
            )
            batches.append(batch)

        await db.flush()

        logger.info(
            "Cadastradas %s bobinas de %s m x %s m (%s m² cada)",
            data.quantity, width, length, capacity,
        )
        return batches

    async def update(
        self,
        db: AsyncSession,
        batch_id: uuid.UUID,
        data: InventoryBatchUpdate,
    ) -> InventoryBatch:
        """Altera somente dados cadastrais; a área disponível não é tocada."""
        batch = await self.get_by_id(db, batch_id)

        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(batch, field, value)

        await db.flush()
        await db.refresh(batch)

        logger.info("Bobina atualizada: %s", batch.id)
        return batch

    async def delete(
        self,
        db: AsyncSession,
        batch_id: uuid.UUID,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        """
        Exclusão lógica.

        A bobina deixa de ser consumida e de contar no estoque; os
        movimentos continuam no razão.
        """
        batch = await self.get_by_id(db, batch_id)
        batch.is_active = False
        await activity_service.record(
            db,
            ActivityAction.INVENTORY_DELETE,
            ActivityEntity.INVENTORY_BATCH,
            entity_id=batch.id,
            actor_id=actor_id,
            details={"available_m2": str(batch.available_m2)},
        )
        logger.info("Bobina excluída (lógica): %s, %s m² restantes", batch.id, batch.available_m2)

    async def get_summary(self, db: AsyncSession) -> InventorySummary:
        """Área disponível total e alertas de estoque baixo."""
        batches = await self.get_all(db)
        total = quantize_area(sum((b.available_m2 for b in batches), _ZERO))
        low_batches = sum(1 for b in batches if b.is_low)
        alert = settings.low_stock_alert_m2

        return InventorySummary(
            total_available_m2=total,
            active_batches=len(batches),
            low_batches=low_batches,
            low_stock_alert_m2=alert,
            is_low=total <= alert,
        )

    # ------------------------------------------------------------
    # Consumo e estorno
    # ------------------------------------------------------------

    async def consume(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        m2_amount: Number,
        actor_id: Optional[uuid.UUID] = None,
    ) -> list[InventoryMovement]:
        """
        Consome área das bobinas ativas, das mais antigas para as mais novas.

        O total disponível é verificado antes de qualquer alteração: ou
        toda a área é consumida, ou nada muda.

        Args:
            db: Sessão do banco
            quote_id: Orçamento que consome
            m2_amount: Área a consumir (0 não gera movimento)
            actor_id: Quem disparou o consumo

        Returns:
            Um movimento de consumo por bobina utilizada

        Raises:
            InvalidInputError: Área negativa
            InsufficientStockError: Área disponível menor que a pedida
        """
        amount = quantize_area(to_decimal(m2_amount))
        if amount < 0:
            raise InvalidInputError("Área a consumir não pode ser negativa")
        if amount == 0:
            return []

        result = await db.execute(
            select(InventoryBatch)
            .where(InventoryBatch.is_active.is_(True), InventoryBatch.available_m2 > 0)
            .order_by(
                InventoryBatch.purchased_at.asc(),
                InventoryBatch.created_at.asc(),
                InventoryBatch.id.asc(),
            )
            .with_for_update()
        )
        batches = list(result.scalars().all())

        available = quantize_area(sum((b.available_m2 for b in batches), _ZERO))
        if available < amount:
            logger.warning(
                "Estoque insuficiente para o orçamento %s: pedido %s m², disponível %s m²",
                quote_id, amount, available,
            )
            raise InsufficientStockError(requested_m2=amount, available_m2=available)

        movements = []
        remaining = amount
        for batch in batches:
            if remaining <= 0:
                break
            taken = min(batch.available_m2, remaining)
            batch.available_m2 = quantize_area(batch.available_m2 - taken)
            remaining -= taken

            movement = InventoryMovement(
                batch_id=batch.id,
                quote_id=quote_id,
                movement_type=MOVEMENT_CONSUMPTION,
                m2_amount=taken,
                created_by=actor_id,
            )
            db.add(movement)
            movements.append(movement)

        await db.flush()

        logger.info(
            "Consumidos %s m² para o orçamento %s em %s bobina(s)",
            amount, quote_id, len(movements),
        )
        return movements

    async def get_outstanding_consumption(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
    ) -> list[Tuple[InventoryMovement, Decimal]]:
        """
        Consumos do orçamento ainda não estornados.

        Returns:
            Pares (movimento de consumo, área pendente), do mais recente
            para o mais antigo
        """
        # Ordem inversa do consumo: mais recente primeiro, e dentro do mesmo
        # consumo a bobina mais nova primeiro
        result = await db.execute(
            select(InventoryMovement)
            .join(InventoryBatch, InventoryBatch.id == InventoryMovement.batch_id)
            .where(
                InventoryMovement.quote_id == quote_id,
                InventoryMovement.movement_type == MOVEMENT_CONSUMPTION,
            )
            .order_by(
                InventoryMovement.created_at.desc(),
                InventoryBatch.purchased_at.desc(),
                InventoryBatch.created_at.desc(),
            )
        )
        consumptions = list(result.scalars().all())
        if not consumptions:
            return []

        restored_result = await db.execute(
            select(
                InventoryMovement.reversed_movement_id,
                func.sum(InventoryMovement.m2_amount),
            )
            .where(
                InventoryMovement.movement_type == MOVEMENT_RESTORATION,
                InventoryMovement.reversed_movement_id.in_([c.id for c in consumptions]),
            )
            .group_by(InventoryMovement.reversed_movement_id)
        )
        restored: dict[uuid.UUID, Decimal] = defaultdict(lambda: _ZERO)
        for movement_id, total in restored_result.all():
            restored[movement_id] = to_decimal(total or 0)

        outstanding = []
        for consumption in consumptions:
            pending = quantize_area(consumption.m2_amount - restored[consumption.id])
            if pending > 0:
                outstanding.append((consumption, pending))
        return outstanding

    async def restore(
        self,
        db: AsyncSession,
        quote_id: uuid.UUID,
        m2_amount: Optional[Number] = None,
        actor_id: Optional[uuid.UUID] = None,
    ) -> list[InventoryMovement]:
        """
        Devolve às bobinas a área consumida por um orçamento.

        Cada estorno aponta para o consumo que desfaz. Uma bobina nunca
        passa da própria capacidade: o excedente é descartado com aviso.

        Args:
            db: Sessão do banco
            quote_id: Orçamento cujo consumo é estornado
            m2_amount: Área a devolver (padrão: todo o consumo pendente)
            actor_id: Quem disparou o estorno

        Returns:
            Os movimentos de estorno criados
        """
        outstanding = await self.get_outstanding_consumption(db, quote_id)
        if not outstanding:
            logger.debug("Nenhum consumo pendente para o orçamento %s", quote_id)
            return []

        if m2_amount is None:
            remaining = sum((pending for _, pending in outstanding), _ZERO)
        else:
            remaining = quantize_area(to_decimal(m2_amount))
            if remaining < 0:
                raise InvalidInputError("Área a estornar não pode ser negativa")

        movements = []
        for consumption, pending in outstanding:
            if remaining <= 0:
                break
            wanted = min(pending, remaining)
            remaining -= wanted

            batch_result = await db.execute(
                select(InventoryBatch)
                .where(InventoryBatch.id == consumption.batch_id)
                .with_for_update()
            )
            batch = batch_result.scalar_one()

            room = quantize_area(batch.capacity_m2 - batch.available_m2)
            credited = min(wanted, max(room, _ZERO))
            if credited < wanted:
                logger.warning(
                    "Estorno limitado à capacidade da bobina %s: %s de %s m²",
                    batch.id, credited, wanted,
                )
            if credited <= 0:
                continue

            batch.available_m2 = quantize_area(batch.available_m2 + credited)
            movement = InventoryMovement(
                batch_id=batch.id,
                quote_id=quote_id,
                movement_type=MOVEMENT_RESTORATION,
                m2_amount=credited,
                reversed_movement_id=consumption.id,
                created_by=actor_id,
            )
            db.add(movement)
            movements.append(movement)

        await db.flush()

        logger.info(
            "Estornados %s m² do orçamento %s em %s bobina(s)",
            sum((m.m2_amount for m in movements), _ZERO), quote_id, len(movements),
        )
        return movements

    # ------------------------------------------------------------
    # Razão de movimentos
    # ------------------------------------------------------------

    async def get_movements(
        self,
        db: AsyncSession,
        batch_id: Optional[uuid.UUID] = None,
        quote_id: Optional[uuid.UUID] = None,
        movement_type: Optional[MovementType] = None,
        date_from: Optional[datetime.datetime] = None,
        date_to: Optional[datetime.datetime] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[list[InventoryMovement], int]:
        """
        Razão de movimentos com filtros e paginação, mais recentes primeiro.

        Returns:
            Tupla (movimentos, total)
        """
        query = select(InventoryMovement)
        count_query = select(func.count(InventoryMovement.id))

        filters = []
        if batch_id is not None:
            filters.append(InventoryMovement.batch_id == batch_id)
        if quote_id is not None:
            filters.append(InventoryMovement.quote_id == quote_id)
        if movement_type is not None:
            filters.append(InventoryMovement.movement_type == movement_type.value)
        if date_from is not None:
            filters.append(InventoryMovement.created_at >= date_from)
        if date_to is not None:
            filters.append(InventoryMovement.created_at <= date_to)

        if filters:
            query = query.where(*filters)
            count_query = count_query.where(*filters)

        query = query.order_by(InventoryMovement.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await db.execute(query)
        items = list(result.scalars().all())

        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        return items, total


# Instância singleton do serviço
inventory_service = InventoryService()

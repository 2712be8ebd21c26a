"""
Tests for the inventory ledger: batches, FIFO consumption and restoration.
"""

import datetime
import uuid
from decimal import Decimal

import pytest

from gutterworks.core.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from gutterworks.models.inventory import (
    MOVEMENT_CONSUMPTION,
    MOVEMENT_ENTRY,
    MOVEMENT_RESTORATION,
)
from gutterworks.schemas.inventory import InventoryBatchCreate, InventoryBatchUpdate, MovementType
from gutterworks.services.inventory_service import inventory_service

UTC = datetime.timezone.utc


def day(n: int) -> datetime.datetime:
    return datetime.datetime(2026, 1, n, tzinfo=UTC)


# ============================================================
# Batches
# ============================================================


class TestBatches:
    """Tests for batch registration and maintenance."""

    async def test_add_batches_creates_entry_movements(self, db, admin):
        """Cada bobina nasce cheia e com um movimento de entrada."""
        data = InventoryBatchCreate(
            description="Galvalume 0.43",
            width_m=Decimal("1.20"),
            length_m=Decimal("33"),
            cost_per_unit=Decimal("950.00"),
            quantity=3,
        )
        batches = await inventory_service.add_batches(db, data, actor_id=admin.id)

        assert len(batches) == 3
        for batch in batches:
            assert batch.available_m2 == Decimal("39.6000")
            assert batch.capacity_m2 == Decimal("39.6000")

        movements, total = await inventory_service.get_movements(
            db, movement_type=MovementType.ENTRY
        )
        assert total == 3
        assert {m.batch_id for m in movements} == {b.id for b in batches}
        assert all(m.m2_amount == Decimal("39.6000") for m in movements)
        assert all(m.created_by == admin.id for m in movements)

    async def test_add_batches_uses_configured_defaults(self, db):
        """Sem medidas, vale a bobina padrão (1.20 m x 33 m)."""
        batches = await inventory_service.add_batches(db, InventoryBatchCreate())
        assert len(batches) == 1
        assert batches[0].width_m == Decimal("1.20")
        assert batches[0].length_m == Decimal("33")
        assert batches[0].low_stock_threshold_m2 == Decimal("5")

    async def test_get_by_id_not_found(self, db):
        with pytest.raises(NotFoundError):
            await inventory_service.get_by_id(db, uuid.uuid4())

    async def test_update_does_not_touch_available_area(self, db, make_batch):
        batch = await make_batch(available_m2=Decimal("4"))
        updated = await inventory_service.update(
            db, batch.id, InventoryBatchUpdate(description="Bobina lateral")
        )
        assert updated.description == "Bobina lateral"
        assert updated.available_m2 == Decimal("4")

    async def test_deleted_batch_is_not_listed_or_consumed(self, db, make_batch):
        """Bobina excluída some da lista e do consumo."""
        deleted = await make_batch(purchased_at=day(1))
        kept = await make_batch(purchased_at=day(2))
        await inventory_service.delete(db, deleted.id)

        batches = await inventory_service.get_all(db)
        assert [b.id for b in batches] == [kept.id]

        movements = await inventory_service.consume(db, uuid.uuid4(), Decimal("1"))
        assert [m.batch_id for m in movements] == [kept.id]
        assert deleted.available_m2 == Decimal("10")

        everything = await inventory_service.get_all(db, include_inactive=True)
        assert len(everything) == 2

    async def test_summary(self, db, make_batch):
        """Soma das bobinas ativas e contagem das que estão baixas."""
        await make_batch(available_m2=Decimal("6"))
        await make_batch(available_m2=Decimal("0.5"), low_stock_threshold_m2=Decimal("1"))

        summary = await inventory_service.get_summary(db)

        assert summary.total_available_m2 == Decimal("6.5000")
        assert summary.active_batches == 2
        assert summary.low_batches == 1
        assert summary.low_stock_alert_m2 == Decimal("10")
        assert summary.is_low is True

    async def test_only_low_filter(self, db, make_batch):
        await make_batch(available_m2=Decimal("6"))
        low = await make_batch(available_m2=Decimal("0.5"))
        batches = await inventory_service.get_all(db, only_low=True)
        assert [b.id for b in batches] == [low.id]


# ============================================================
# Consumption
# ============================================================


class TestConsume:
    """Tests for FIFO consumption."""

    async def test_oldest_batch_first(self, db, make_batch):
        """O consumo começa pela bobina comprada primeiro."""
        newer = await make_batch(purchased_at=day(10))
        older = await make_batch(purchased_at=day(1))

        movements = await inventory_service.consume(db, uuid.uuid4(), Decimal("3"))

        assert len(movements) == 1
        assert movements[0].batch_id == older.id
        assert older.available_m2 == Decimal("7")
        assert newer.available_m2 == Decimal("10")

    async def test_spills_over_to_next_batch(self, db, make_batch):
        """Quando a primeira acaba, o restante sai da próxima."""
        older = await make_batch(available_m2=Decimal("2"), purchased_at=day(1))
        newer = await make_batch(purchased_at=day(2))
        quote_id = uuid.uuid4()

        movements = await inventory_service.consume(db, quote_id, Decimal("2.45"))

        assert [(m.batch_id, m.m2_amount) for m in movements] == [
            (older.id, Decimal("2")),
            (newer.id, Decimal("0.45")),
        ]
        assert all(m.movement_type == MOVEMENT_CONSUMPTION for m in movements)
        assert all(m.quote_id == quote_id for m in movements)
        assert older.available_m2 == Decimal("0")
        assert newer.available_m2 == Decimal("9.55")

    async def test_empty_batches_are_skipped(self, db, make_batch):
        await make_batch(available_m2=Decimal("0"), purchased_at=day(1))
        full = await make_batch(purchased_at=day(2))
        movements = await inventory_service.consume(db, uuid.uuid4(), Decimal("1"))
        assert [m.batch_id for m in movements] == [full.id]

    async def test_insufficient_stock_changes_nothing(self, db, make_batch):
        """Área insuficiente: erro e nenhuma bobina alterada."""
        first = await make_batch(available_m2=Decimal("1.5"), purchased_at=day(1))
        second = await make_batch(available_m2=Decimal("0.5"), purchased_at=day(2))

        with pytest.raises(InsufficientStockError) as exc_info:
            await inventory_service.consume(db, uuid.uuid4(), Decimal("2.45"))

        assert exc_info.value.requested_m2 == Decimal("2.4500")
        assert exc_info.value.available_m2 == Decimal("2.0000")
        assert exc_info.value.extra["shortfall_m2"] == "0.4500"
        assert first.available_m2 == Decimal("1.5")
        assert second.available_m2 == Decimal("0.5")

        _, total = await inventory_service.get_movements(db, movement_type=MovementType.CONSUMPTION)
        assert total == 0

    async def test_zero_area_creates_no_movement(self, db, make_batch):
        await make_batch()
        assert await inventory_service.consume(db, uuid.uuid4(), Decimal("0")) == []

    async def test_negative_area(self, db, make_batch):
        await make_batch()
        with pytest.raises(InvalidInputError):
            await inventory_service.consume(db, uuid.uuid4(), Decimal("-1"))

    async def test_exact_available_area(self, db, make_batch):
        batch = await make_batch(available_m2=Decimal("2.45"))
        await inventory_service.consume(db, uuid.uuid4(), Decimal("2.45"))
        assert batch.available_m2 == Decimal("0")


# ============================================================
# Restoration
# ============================================================


class TestRestore:
    """Tests for reversing the consumption of a quote."""

    async def test_consume_then_restore_returns_to_initial_state(self, db, make_batch):
        """Consumo seguido de estorno volta ao saldo inicial."""
        older = await make_batch(available_m2=Decimal("2"), purchased_at=day(1))
        newer = await make_batch(available_m2=Decimal("5"), purchased_at=day(2))
        quote_id = uuid.uuid4()

        consumed = await inventory_service.consume(db, quote_id, Decimal("4"))
        restored = await inventory_service.restore(db, quote_id)

        assert older.available_m2 == Decimal("2")
        assert newer.available_m2 == Decimal("5")
        assert sum(m.m2_amount for m in restored) == sum(m.m2_amount for m in consumed)
        assert all(m.movement_type == MOVEMENT_RESTORATION for m in restored)
        assert {m.reversed_movement_id for m in restored} == {m.id for m in consumed}

    async def test_restore_keeps_ledger_history(self, db, make_batch):
        """O estorno é um movimento novo; o consumo continua no razão."""
        await make_batch()
        quote_id = uuid.uuid4()
        await inventory_service.consume(db, quote_id, Decimal("1"))
        await inventory_service.restore(db, quote_id)

        movements, total = await inventory_service.get_movements(db, quote_id=quote_id)
        assert total == 2
        assert sorted(m.movement_type for m in movements) == [
            MOVEMENT_CONSUMPTION,
            MOVEMENT_RESTORATION,
        ]

    async def test_partial_restore_starts_with_latest_consumption(self, db, make_batch):
        """Estorno parcial devolve primeiro à bobina consumida por último."""
        older = await make_batch(available_m2=Decimal("2"), purchased_at=day(1))
        newer = await make_batch(purchased_at=day(2))
        quote_id = uuid.uuid4()

        await inventory_service.consume(db, quote_id, Decimal("3"))
        restored = await inventory_service.restore(db, quote_id, Decimal("0.5"))

        assert [(m.batch_id, m.m2_amount) for m in restored] == [(newer.id, Decimal("0.5"))]
        assert newer.available_m2 == Decimal("9.5")
        assert older.available_m2 == Decimal("0")

    async def test_repeated_restore_only_returns_outstanding(self, db, make_batch):
        """Um segundo estorno não devolve o que já foi devolvido."""
        batch = await make_batch()
        quote_id = uuid.uuid4()
        await inventory_service.consume(db, quote_id, Decimal("3"))

        await inventory_service.restore(db, quote_id, Decimal("1"))
        await inventory_service.restore(db, quote_id)
        again = await inventory_service.restore(db, quote_id)

        assert again == []
        assert batch.available_m2 == Decimal("10")

    async def test_restore_is_capped_at_capacity(self, db, make_batch):
        """A bobina nunca passa da capacidade; o movimento registra o que entrou."""
        batch = await make_batch()
        quote_id = uuid.uuid4()
        await inventory_service.consume(db, quote_id, Decimal("3"))

        # Ajuste externo enche a bobina antes do estorno
        batch.available_m2 = Decimal("9")
        await db.flush()

        restored = await inventory_service.restore(db, quote_id)

        assert batch.available_m2 == Decimal("10")
        assert [m.m2_amount for m in restored] == [Decimal("1")]

    async def test_restore_without_consumption(self, db, make_batch):
        await make_batch()
        assert await inventory_service.restore(db, uuid.uuid4()) == []

    async def test_movement_balance_matches_available_area(self, db, make_batch):
        """entradas - consumos + estornos = área disponível."""
        batch = await make_batch()
        quote_a, quote_b = uuid.uuid4(), uuid.uuid4()
        await inventory_service.consume(db, quote_a, Decimal("2.45"))
        await inventory_service.consume(db, quote_b, Decimal("1.3"))
        await inventory_service.restore(db, quote_a)

        movements, _ = await inventory_service.get_movements(db, batch_id=batch.id)
        sign = {MOVEMENT_ENTRY: 1, MOVEMENT_CONSUMPTION: -1, MOVEMENT_RESTORATION: 1}
        balance = sum(sign[m.movement_type] * m.m2_amount for m in movements)

        assert balance == batch.available_m2 == Decimal("8.7")

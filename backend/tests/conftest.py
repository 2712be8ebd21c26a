"""
Pytest configuration and fixtures.

Service and API tests run against an in-memory SQLite database (aiosqlite)
built from the real models; the engine tests need no database at all.
"""

import os

os.environ.setdefault("APP_ENV", "testing")

import datetime
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gutterworks.core.database import get_db
from gutterworks.core.security import create_access_token
from gutterworks.models import Base
from gutterworks.models.inventory import MOVEMENT_ENTRY, InventoryBatch, InventoryMovement
from gutterworks.schemas.bend import BendInput, SegmentInput
from gutterworks.schemas.token import Actor, ActorRole


# ============================================================
# Database
# ============================================================


@pytest_asyncio.fixture
async def engine():
    """Engine SQLite em memória compartilhado por todas as sessões do teste."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Sessão de teste."""
    async with session_factory() as session:
        yield session


# ============================================================
# Actors
# ============================================================


@pytest.fixture
def customer() -> Actor:
    return Actor(id=uuid.uuid4(), role=ActorRole.CUSTOMER, name="João Cliente")


@pytest.fixture
def other_customer() -> Actor:
    return Actor(id=uuid.uuid4(), role=ActorRole.CUSTOMER, name="Maria Vizinha")


@pytest.fixture
def admin() -> Actor:
    return Actor(id=uuid.uuid4(), role=ActorRole.ADMIN, name="Admin Loja")


@pytest.fixture
def master() -> Actor:
    return Actor(id=uuid.uuid4(), role=ActorRole.MASTER, name="Dono")


# ============================================================
# Helpers
# ============================================================


@pytest.fixture
def make_batch(db):
    """
    Cria uma bobina com área disponível escolhida.

    Por padrão a bobina tem 1 m x 10 m (10 m²) e começa cheia.
    """
    async def _make(
        available_m2: Optional[Decimal] = None,
        width_m: Decimal = Decimal("1"),
        length_m: Decimal = Decimal("10"),
        purchased_at: Optional[datetime.datetime] = None,
        low_stock_threshold_m2: Decimal = Decimal("1"),
    ) -> InventoryBatch:
        capacity = width_m * length_m
        batch = InventoryBatch(
            width_m=width_m,
            length_m=length_m,
            cost_per_unit=Decimal("100.00"),
            purchased_at=purchased_at or datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc),
            available_m2=available_m2 if available_m2 is not None else capacity,
            low_stock_threshold_m2=low_stock_threshold_m2,
            is_active=True,
        )
        db.add(batch)
        await db.flush()
        db.add(InventoryMovement(
            batch_id=batch.id,
            movement_type=MOVEMENT_ENTRY,
            m2_amount=capacity,
        ))
        await db.flush()
        return batch

    return _make


def make_bend(
    segments: list[tuple[str, str]],
    lengths: Optional[list] = None,
) -> BendInput:
    """BendInput a partir de pares (direção, tamanho)."""
    return BendInput(
        segments=[SegmentInput(direction=d, size_cm=s) for d, s in segments],
        lengths=lengths if lengths is not None else ["1"],
    )


# ============================================================
# HTTP client
# ============================================================


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP da aplicação, com get_db apontando para o SQLite de teste."""
    from gutterworks.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(actor: Actor) -> dict[str, str]:
    token = create_access_token(str(actor.id), actor.role, actor.name)
    return {"Authorization": f"Bearer {token}"}

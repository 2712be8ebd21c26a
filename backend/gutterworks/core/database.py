"""
Configuração do Banco de Dados - SQLAlchemy 2.0 Async
Projeto: GutterWorks (Calhas e Dobras)

Define engine, session factory e injeção de dependência para o FastAPI.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gutterworks.core.config import settings

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Engine Async SQLAlchemy 2.0
# ------------------------------------------------------------
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)


# ------------------------------------------------------------
# Session Factory
# ------------------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependência do FastAPI que abre uma sessão por requisição.

    Qualquer exceção faz rollback da sessão inteira: uma transição de
    status ou um consumo de estoque que falhe não deixa registros parciais.

    Yields:
        AsyncSession: Sessão async do banco
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """
    Testa a conexão com o banco no startup.
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Conexão com o banco de dados estabelecida")
    except Exception as e:
        logger.error("Erro de conexão com o banco de dados: %s", e)
        raise


async def close_db() -> None:
    """Fecha as conexões do pool no shutdown."""
    await engine.dispose()
    logger.info("Conexões com o banco de dados encerradas")

import asyncio
import sys
import os

# Adiciona backend/ ao PYTHONPATH para importar gutterworks.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from gutterworks.core.database import AsyncSessionLocal, engine
from gutterworks.models import Base
from gutterworks.schemas.inventory import InventoryBatchCreate
from gutterworks.services.inventory_service import inventory_service


async def seed_inventory(session):
    """Cadastra uma bobina padrão (largura e comprimento da configuração)."""
    batches = await inventory_service.add_batches(
        session, InventoryBatchCreate(description="Bobina inicial")
    )
    await session.commit()
    return batches


async def reset(seed: bool = False):
    print("Conectando ao banco de dados, removendo tabelas...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        print("Tabelas removidas. Criando novas tabelas...")
        await conn.run_sync(Base.metadata.create_all)
    print("Banco de dados recriado com sucesso!")

    if seed:
        async with AsyncSessionLocal() as session:
            batches = await seed_inventory(session)
        print(f"Bobina padrão cadastrada: {batches[0].capacity_m2} m²")


if __name__ == "__main__":
    asyncio.run(reset(seed="--seed" in sys.argv[1:]))

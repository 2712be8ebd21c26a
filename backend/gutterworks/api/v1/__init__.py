"""
API v1 Routes
Projeto: GutterWorks (Calhas e Dobras)

Router da versão 1 da API.
"""

from fastapi import APIRouter

from gutterworks.api.v1 import activity, bends, financial, inventory, quotes

# Router agregado da v1
api_v1_router = APIRouter(prefix="/api/v1")

api_v1_router.include_router(bends.router)
api_v1_router.include_router(quotes.router)
api_v1_router.include_router(inventory.router)
api_v1_router.include_router(financial.router)
api_v1_router.include_router(activity.router)

__all__ = ["api_v1_router"]

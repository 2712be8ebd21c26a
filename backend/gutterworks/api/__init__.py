"""
API Routes
Projeto: GutterWorks (Calhas e Dobras)

Agregação dos routers versionados.
"""

from gutterworks.api.v1 import api_v1_router

__all__ = ["api_v1_router"]

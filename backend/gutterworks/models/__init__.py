"""
Modelos de Banco de Dados SQLAlchemy
Projeto: GutterWorks (Calhas e Dobras)

Import centralizado de todos os modelos, para create_all e uso geral.
"""

# Base declarativa SQLAlchemy 2.0
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Classe base de todos os modelos SQLAlchemy."""
    pass


from gutterworks.models.quote import DiscountAudit, Quote, QuoteBend
from gutterworks.models.inventory import InventoryBatch, InventoryMovement
from gutterworks.models.financial import FinancialRecord
from gutterworks.models.activity import ActivityLog

__all__ = [
    "Base",
    "Quote",
    "QuoteBend",
    "DiscountAudit",
    "InventoryBatch",
    "InventoryMovement",
    "FinancialRecord",
    "ActivityLog",
]

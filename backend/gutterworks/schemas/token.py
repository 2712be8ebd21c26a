"""
Schemas Pydantic para tokens JWT e atores
Projeto: GutterWorks (Calhas e Dobras)

A autenticação (login, sessão) é externa: este backend só lê o token
assinado e extrai dele quem está agindo e com qual papel.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActorRole(str, Enum):
    """Papéis reconhecidos pelo motor de orçamentos."""
    CUSTOMER = "customer"
    ADMIN = "admin"
    MASTER = "master"


# Papéis com poderes administrativos (status, desconto, estoque)
ADMIN_ROLES: frozenset[ActorRole] = frozenset({ActorRole.ADMIN, ActorRole.MASTER})


class TokenPayload(BaseModel):
    """
    Payload contido no token JWT.

    Attributes:
        sub: Subject - UUID do ator como string
        role: Papel do ator
        name: Nome de exibição do ator
        exp: Data/hora de expiração
        type: Tipo do token ("access")
    """

    sub: str = Field(..., description="ID do ator")
    role: ActorRole = Field(..., description="Papel do ator")
    name: str = Field(default="", description="Nome de exibição")
    exp: datetime = Field(..., description="Data/hora de expiração")
    type: str = Field(..., description="Tipo do token")


class Actor(BaseModel):
    """Quem executa uma operação: identidade e papel."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    role: ActorRole
    name: str = ""

    @property
    def is_admin(self) -> bool:
        """True para admin e master."""
        return self.role in ADMIN_ROLES


__all__ = [
    "ActorRole",
    "ADMIN_ROLES",
    "TokenPayload",
    "Actor",
]

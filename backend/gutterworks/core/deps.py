"""
Injeção de dependência para identificação do ator
Projeto: GutterWorks (Calhas e Dobras)

Extrai o ator do token bearer e restringe endpoints por papel.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from gutterworks.core.security import decode_token
from gutterworks.schemas.token import Actor, ActorRole

# O endpoint de login pertence ao provedor de autenticação externo
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/login",
    auto_error=False,
)


async def get_current_actor(
    token: Optional[str] = Depends(oauth2_scheme),
) -> Actor:
    """
    Dependência que devolve o ator do token JWT.

    Raises:
        HTTPException 401: Token ausente, inválido ou de tipo errado
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de autenticação não informado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = decode_token(token)

    if token_data.type != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Tipo de token inválido para esta operação",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        actor_id = UUID(token_data.sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="ID de ator inválido no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Actor(id=actor_id, role=token_data.role, name=token_data.name)


def require_role(*allowed_roles: ActorRole):
    """
    Fábrica de dependências que verifica o papel do ator.

    Example:
        @router.post("/admin-only")
        async def admin_endpoint(actor: Actor = Depends(require_role(ActorRole.ADMIN))):
            ...
    """
    async def role_checker(
        current_actor: Annotated[Actor, Depends(get_current_actor)]
    ) -> Actor:
        if current_actor.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Acesso negado. Papel exigido: {', '.join(r.value for r in allowed_roles)}",
            )
        return current_actor

    return role_checker


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
AdminActor = Annotated[Actor, Depends(require_role(ActorRole.ADMIN, ActorRole.MASTER))]


__all__ = [
    "get_current_actor",
    "require_role",
    "oauth2_scheme",
    "CurrentActor",
    "AdminActor",
]

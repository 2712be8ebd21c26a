"""
Módulo de segurança para tokens JWT
Projeto: GutterWorks (Calhas e Dobras)

Emissão e leitura de tokens de acesso. O login e a sessão ficam fora
deste backend; quem emite o token em produção é o provedor de autenticação.
"""

from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import JWTError, jwt

from gutterworks.core.config import settings
from gutterworks.schemas.token import ActorRole, TokenPayload


def create_access_token(user_id: str, role: ActorRole | str, name: str = "") -> str:
    """
    Cria um token de acesso JWT.

    Args:
        user_id: ID do ator
        role: Papel do ator
        name: Nome de exibição

    Returns:
        Token JWT codificado
    """
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )

    payload = {
        "sub": user_id,
        "role": ActorRole(role).value,
        "name": name,
        "exp": expire,
        "type": "access",
    }

    return jwt.encode(
        payload,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> TokenPayload:
    """
    Decodifica e valida um token JWT.

    Args:
        token: Token JWT

    Returns:
        TokenPayload com os dados do token

    Raises:
        HTTPException 401: Se o token for inválido ou estiver expirado
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token inválido ou expirado: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido: subject ausente",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return TokenPayload(
            sub=payload["sub"],
            role=payload.get("role"),
            name=payload.get("name") or "",
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            type=payload.get("type"),
        )
    except (KeyError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token inválido: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


__all__ = [
    "create_access_token",
    "decode_token",
]

"""
Exceções customizadas da aplicação.
Projeto: GutterWorks (Calhas e Dobras)

Define as exceções de domínio para um tratamento de erros centralizado.

NOTA: BusinessValidationError é distinta de pydantic.ValidationError.
- pydantic.ValidationError: erros de formato/tipo no payload (tratados pelo FastAPI → 422)
- BusinessValidationError: violações de regra de negócio (tratadas pelo nosso handler → 422)
"""

from decimal import Decimal
from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "BusinessValidationError",
    "ValidationError",
    "ConflictError",
    "AuthorizationError",
    "InvalidInputError",
    "ReversalNotAllowedError",
    "WidthExceededError",
    "EmptyBendError",
    "InvalidTransitionError",
    "InsufficientStockError",
]


class AppException(Exception):
    """
    Exceção base da aplicação.

    Attributes:
        status_code: HTTP status code devolvido ao cliente
        error_code: Identificador único do erro para o frontend
        detail: Mensagem legível para o usuário
        extra: Dados adicionais para o frontend
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)


class NotFoundError(AppException):
    """Recurso (orçamento, bobina, registro) inexistente."""

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Recurso não encontrado",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Violação de regra de negócio.

    Herda de ValueError para poder ser levantada dentro de validadores Pydantic.

    Exemplos:
        - "Tamanho do risco deve ser maior que zero"
        - "Soma excede 120 cm"
        - "Adicione pelo menos 1 risco"
    """

    status_code: int = 422
    error_code: str = "BUSINESS_VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validação de dados falhou",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chama AppException.__init__ diretamente para não passar por ValueError
        AppException.__init__(self, detail, error_code, extra)


ValidationError = BusinessValidationError


class ConflictError(AppException):
    """Operação incompatível com o estado atual do recurso."""

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"

    def __init__(
        self,
        detail: str = "Conflito de estado",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class AuthorizationError(AppException):
    """
    Ação restrita tentada por um ator sem permissão.

    Exemplos:
        - "Usuários comuns só podem cancelar"
        - "Apenas administradores podem aplicar desconto"
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"

    def __init__(
        self,
        detail: str = "Acesso não autorizado",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


# ------------------------------------------------------------
# Erros do motor de orçamentos
# ------------------------------------------------------------

class InvalidInputError(BusinessValidationError):
    """Entrada numérica malformada ou não positiva."""

    error_code: str = "INVALID_INPUT"


class ReversalNotAllowedError(BusinessValidationError):
    """Risco que desfaz exatamente o risco anterior (ida e volta)."""

    error_code: str = "REVERSAL_NOT_ALLOWED"

    def __init__(self, detail: str = "Risco anula o risco anterior") -> None:
        super().__init__(detail)


class WidthExceededError(BusinessValidationError):
    """A soma dos riscos ultrapassaria a largura máxima da chapa."""

    error_code: str = "WIDTH_EXCEEDED"

    def __init__(self, max_width_cm: Decimal, remaining_cm: Decimal) -> None:
        super().__init__(
            f"Soma excede {max_width_cm} cm. Disponível: {remaining_cm} cm",
            extra={
                "max_width_cm": str(max_width_cm),
                "remaining_cm": str(remaining_cm),
            },
        )
        self.max_width_cm = max_width_cm
        self.remaining_cm = remaining_cm


class EmptyBendError(BusinessValidationError):
    """Confirmação de dobra sem nenhum risco."""

    error_code: str = "EMPTY_BEND_NOT_ALLOWED"

    def __init__(self, detail: str = "Adicione pelo menos 1 risco") -> None:
        super().__init__(detail)


class InvalidTransitionError(ConflictError):
    """Transição de status fora da matriz permitida."""

    error_code: str = "INVALID_TRANSITION"


class InsufficientStockError(ConflictError):
    """Material disponível nas bobinas menor que a área pedida."""

    error_code: str = "INSUFFICIENT_STOCK"

    def __init__(self, requested_m2: Decimal, available_m2: Decimal) -> None:
        shortfall = requested_m2 - available_m2
        super().__init__(
            f"Estoque insuficiente. Necessário: {requested_m2} m², "
            f"disponível: {available_m2} m², faltam {shortfall} m²",
            extra={
                "requested_m2": str(requested_m2),
                "available_m2": str(available_m2),
                "shortfall_m2": str(shortfall),
            },
        )
        self.requested_m2 = requested_m2
        self.available_m2 = available_m2
        self.shortfall_m2 = shortfall

"""
Schemas Pydantic para Orçamentos
Projeto: GutterWorks (Calhas e Dobras)

Define status, matriz de transições e os schemas de entrada/saída da API.
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from gutterworks.schemas.bend import BendInput, Segment

# Maior valor que cabe nas colunas monetárias Numeric(12, 2)
MAX_MONEY_VALUE = Decimal("9999999999.99")


# -------------------------------------------------------------------
# Status do orçamento
# -------------------------------------------------------------------

class QuoteStatus(str, Enum):
    """Status possíveis de um orçamento."""
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    IN_PRODUCTION = "in_production"
    FINISHED = "finished"
    CANCELLED = "cancelled"


# Status em que o pagamento foi confirmado (registro financeiro e consumo de estoque ativos)
PAID_STATES: frozenset[QuoteStatus] = frozenset({
    QuoteStatus.PAID,
    QuoteStatus.IN_PRODUCTION,
    QuoteStatus.FINISHED,
})

# Status aceitos no lançamento manual
MANUAL_INITIAL_STATUSES: frozenset[QuoteStatus] = frozenset({
    QuoteStatus.DRAFT,
    QuoteStatus.PENDING,
    QuoteStatus.PAID,
    QuoteStatus.IN_PRODUCTION,
})

# Status em que o desconto ainda pode ser aplicado
DISCOUNTABLE_STATES: frozenset[QuoteStatus] = frozenset({
    QuoteStatus.DRAFT,
    QuoteStatus.PENDING,
})


# Matriz de transições válidas
VALID_TRANSITIONS: dict[QuoteStatus, list[QuoteStatus]] = {
    QuoteStatus.DRAFT: [QuoteStatus.PENDING, QuoteStatus.CANCELLED],
    QuoteStatus.PENDING: [QuoteStatus.PAID, QuoteStatus.CANCELLED],
    QuoteStatus.PAID: [
        QuoteStatus.IN_PRODUCTION,
        QuoteStatus.FINISHED,
        QuoteStatus.CANCELLED,
        QuoteStatus.PENDING,
    ],
    QuoteStatus.IN_PRODUCTION: [
        QuoteStatus.FINISHED,
        QuoteStatus.CANCELLED,
        QuoteStatus.PENDING,
    ],
    QuoteStatus.FINISHED: [
        QuoteStatus.IN_PRODUCTION,
        QuoteStatus.CANCELLED,
        QuoteStatus.PENDING,
    ],
    QuoteStatus.CANCELLED: [],  # Status final
}


def is_valid_transition(current: QuoteStatus, new: QuoteStatus) -> bool:
    return new in VALID_TRANSITIONS.get(current, [])


def is_reopen(current: QuoteStatus, new: QuoteStatus) -> bool:
    """Volta de um status pago para pending."""
    return current in PAID_STATES and new == QuoteStatus.PENDING


# -------------------------------------------------------------------
# Entrada
# -------------------------------------------------------------------

class QuoteSubmit(BaseModel):
    """
    Envio de orçamento pelo cliente.

    Só as dobras e as observações são aceitas; totais e preço são
    calculados no servidor.
    """
    bends: list[BendInput] = Field(..., max_length=200, description="Dobras confirmadas, na ordem")
    notes: Optional[str] = Field(None, max_length=2000, description="Observações")


class ManualQuoteCreate(BaseModel):
    """
    Lançamento manual pelo administrativo.

    Sem dobras, o valor total é obrigatório e a área fica zerada.
    """
    client_id: Optional[uuid.UUID] = Field(None, description="UUID do cliente, se cadastrado")
    client_name: str = Field(..., min_length=1, max_length=255, description="Nome do cliente")
    notes: Optional[str] = Field(None, max_length=2000)
    status: QuoteStatus = Field(QuoteStatus.PENDING, description="Status inicial")
    bends: list[BendInput] = Field(default_factory=list, max_length=200)
    total_value: Optional[Decimal] = Field(
        None,
        ge=0,
        le=MAX_MONEY_VALUE,
        description="Valor total quando o orçamento não tem dobras",
    )
    payment_proof_ref: Optional[str] = Field(None, max_length=500)

    @field_validator("client_name")
    @classmethod
    def strip_client_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nome do cliente não pode ser vazio")
        return v

    @model_validator(mode="after")
    def check_status_and_value(self) -> "ManualQuoteCreate":
        if self.status not in MANUAL_INITIAL_STATUSES:
            raise ValueError(f"Status inicial não permitido: {self.status.value}")
        if not self.bends and self.total_value is None:
            raise ValueError("Informe o valor total ou pelo menos uma dobra")
        return self


class QuoteStatusUpdate(BaseModel):
    """
    Mudança de status.

    confirm_reopen precisa ser True para voltar um orçamento pago a
    pending; override_proof permite confirmar pagamento sem comprovante.
    """
    status: QuoteStatus = Field(..., description="Novo status")
    confirm_reopen: bool = Field(False, description="Confirma a reabertura de um orçamento pago")
    override_proof: bool = Field(False, description="Confirma o pagamento sem comprovante")


class DiscountApply(BaseModel):
    amount: Decimal = Field(..., description="Valor do desconto em R$")
    reason: str = Field(..., max_length=1000, description="Motivo do desconto")


class PaymentProofUpdate(BaseModel):
    payment_proof_ref: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Referência ao comprovante já enviado ao armazenamento",
    )


# -------------------------------------------------------------------
# Saída
# -------------------------------------------------------------------

class QuoteBendRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    bend_order: int
    segments: list[Segment]
    lengths: list[Decimal]
    total_width_cm: Decimal
    rounded_width_cm: int
    total_length_m: Decimal
    area_m2: Decimal
    diagram_ref: Optional[str] = None


class QuoteRead(BaseModel):
    """
    Leitura de um orçamento com as dobras.
    """
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    client_id: Optional[uuid.UUID]
    client_name: Optional[str]
    notes: Optional[str]
    status: QuoteStatus
    admin_created: bool
    total_area_m2: Decimal
    price_per_m2: Decimal
    total_value: Decimal
    discount_value: Decimal
    discount_reason: Optional[str]
    final_value: Decimal
    payment_proof_ref: Optional[str]
    paid_at: Optional[datetime.datetime]
    paid_by: Optional[uuid.UUID]
    created_by: Optional[uuid.UUID]
    created_at: datetime.datetime
    updated_at: datetime.datetime
    bends: list[QuoteBendRead] = Field(default_factory=list)

    @computed_field
    @property
    def bend_count(self) -> int:
        return len(self.bends)

    @computed_field
    @property
    def allowed_transitions(self) -> list[QuoteStatus]:
        """Próximos status possíveis a partir do atual."""
        return list(VALID_TRANSITIONS.get(self.status, []))


class QuoteList(BaseModel):
    """
    Resposta paginada de orçamentos.

    Attributes:
        items: Orçamentos da página
        total: Total de registros
        page: Página atual
        per_page: Registros por página
        total_pages: Total de páginas (calculado)
    """
    items: list[QuoteRead]
    total: int
    page: int
    per_page: int
    total_pages: int = 0

    @model_validator(mode="after")
    def compute_total_pages(self) -> "QuoteList":
        """Calcula o total de páginas."""
        if self.per_page > 0:
            self.total_pages = (self.total + self.per_page - 1) // self.per_page
        return self


class PendingCount(BaseModel):
    pending: int


class DiscountAuditRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    quote_id: uuid.UUID
    original_value: Decimal
    discount_value: Decimal
    final_value: Decimal
    reason: str
    applied_by: Optional[uuid.UUID]
    applied_by_name: Optional[str]
    created_at: datetime.datetime


__all__ = [
    "QuoteStatus",
    "PAID_STATES",
    "MANUAL_INITIAL_STATUSES",
    "DISCOUNTABLE_STATES",
    "VALID_TRANSITIONS",
    "is_valid_transition",
    "is_reopen",
    "QuoteSubmit",
    "ManualQuoteCreate",
    "QuoteStatusUpdate",
    "DiscountApply",
    "PaymentProofUpdate",
    "QuoteBendRead",
    "QuoteRead",
    "QuoteList",
    "PendingCount",
    "DiscountAuditRead",
]

"""
Schemas Pydantic do projeto GutterWorks

Schemas de validação e serialização usados pela API.
"""

# ex.: from gutterworks.schemas import QuoteRead, InventoryBatchRead

from gutterworks.schemas.token import Actor, ActorRole, TokenPayload
from gutterworks.schemas.bend import (
    BendInput,
    BendMeasurementRead,
    BendPreviewRead,
    Direction,
    Segment,
    SegmentInput,
)
from gutterworks.schemas.quote import (
    DiscountApply,
    DiscountAuditRead,
    ManualQuoteCreate,
    PaymentProofUpdate,
    PendingCount,
    QuoteBendRead,
    QuoteList,
    QuoteRead,
    QuoteStatus,
    QuoteStatusUpdate,
    QuoteSubmit,
)
from gutterworks.schemas.inventory import (
    InventoryBatchCreate,
    InventoryBatchRead,
    InventoryBatchUpdate,
    InventoryMovementList,
    InventoryMovementRead,
    InventorySummary,
    MovementType,
)
from gutterworks.schemas.financial import FinancialRecordRead, FinancialSummary
from gutterworks.schemas.activity import (
    ActivityAction,
    ActivityEntity,
    ActivityLogList,
    ActivityLogRead,
)

__all__ = [
    "Actor",
    "ActorRole",
    "TokenPayload",
    "BendInput",
    "BendMeasurementRead",
    "BendPreviewRead",
    "Direction",
    "Segment",
    "SegmentInput",
    "DiscountApply",
    "DiscountAuditRead",
    "ManualQuoteCreate",
    "PaymentProofUpdate",
    "PendingCount",
    "QuoteBendRead",
    "QuoteList",
    "QuoteRead",
    "QuoteStatus",
    "QuoteStatusUpdate",
    "QuoteSubmit",
    "InventoryBatchCreate",
    "InventoryBatchRead",
    "InventoryBatchUpdate",
    "InventoryMovementList",
    "InventoryMovementRead",
    "InventorySummary",
    "MovementType",
    "FinancialRecordRead",
    "FinancialSummary",
    "ActivityAction",
    "ActivityEntity",
    "ActivityLogList",
    "ActivityLogRead",
]

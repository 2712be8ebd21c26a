"""
Router FastAPI para Dobras
Projeto: GutterWorks (Calhas e Dobras)

Pré-visualização de uma dobra: o servidor refaz os riscos e devolve
as medidas de cobrança ou o erro de validação tipado.
"""

import logging

from fastapi import APIRouter, status

from gutterworks.core.deps import CurrentActor
from gutterworks.schemas.bend import BendInput, BendPreviewRead
from gutterworks.services import geometry
from gutterworks.services.bend_builder import replay_bend

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bends",
    tags=["Dobras"],
)


@router.post(
    "/preview",
    name="dobra_preview",
    summary="Pré-visualiza uma dobra",
    description="Valida os riscos de uma dobra e calcula largura, arredondamento e área.",
    response_model=BendPreviewRead,
    status_code=status.HTTP_200_OK,
)
async def preview_bend(data: BendInput, actor: CurrentActor) -> BendPreviewRead:
    """
    Raises:
        InvalidInputError, ReversalNotAllowedError, WidthExceededError, EmptyBendError
    """
    bend = replay_bend(
        [(s.direction, s.size_cm) for s in data.segments],
        data.lengths,
        diagram_ref=data.diagram_ref,
    )
    measurement = bend.measurement()
    return BendPreviewRead(
        **measurement.model_dump(),
        turn_angles=geometry.turn_angles(bend.segments),
        path_points=geometry.path_points(bend.segments),
        max_width_cm=bend.max_width_cm,
        remaining_width_cm=bend.max_width_cm - bend.total_width_cm,
    )

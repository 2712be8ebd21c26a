"""
Schemas Pydantic para Dobras e Riscos
Projeto: GutterWorks (Calhas e Dobras)

Define as direções dos riscos, o risco confirmado e os payloads
usados para enviar uma dobra ao servidor.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# -------------------------------------------------------------------
# Direções
# -------------------------------------------------------------------

class Direction(str, Enum):
    """As 8 direções possíveis de um risco."""
    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"


# Direção oposta de cada direção (usada pela regra anti-reversão)
OPPOSITE_DIRECTION: dict[Direction, Direction] = {
    Direction.N: Direction.S,
    Direction.S: Direction.N,
    Direction.E: Direction.W,
    Direction.W: Direction.E,
    Direction.NE: Direction.SW,
    Direction.SW: Direction.NE,
    Direction.NW: Direction.SE,
    Direction.SE: Direction.NW,
}


# -------------------------------------------------------------------
# Risco
# -------------------------------------------------------------------

class Segment(BaseModel):
    """
    Um risco confirmado: direção e tamanho em centímetros.

    Imutável. A validação de tamanho fica no BendBuilder, que devolve
    os erros tipados do motor em vez de erros de schema.
    """
    model_config = ConfigDict(frozen=True)

    direction: Direction
    size_cm: Decimal


class SegmentInput(BaseModel):
    """Risco vindo do cliente, ainda não validado."""
    direction: Direction = Field(..., description="Direção do risco")
    size_cm: Union[Decimal, str] = Field(..., description="Tamanho do risco em cm")


# Entrada de metros corridos: número, texto digitado ou vazio
LengthInput = Optional[Union[Decimal, str]]


class BendInput(BaseModel):
    """
    Dobra enviada pelo cliente.

    Os totais nunca vêm do cliente: o servidor refaz a dobra risco
    a risco e recalcula largura, arredondamento e área.
    """
    segments: list[SegmentInput] = Field(..., max_length=100, description="Riscos, na ordem")
    lengths: list[LengthInput] = Field(
        default_factory=lambda: [None],
        max_length=50,
        description="Metros corridos; entradas vazias ou inválidas são ignoradas",
    )
    diagram_ref: Optional[str] = Field(
        None,
        max_length=500,
        description="Referência opaca ao desenho renderizado da dobra",
    )


class BendMeasurementRead(BaseModel):
    """Medidas calculadas de uma dobra."""
    segments: list[Segment]
    total_width_cm: Decimal
    rounded_width_cm: int
    lengths: list[Decimal]
    total_length_m: Decimal
    area_m2: Decimal
    is_billable: bool


class BendPreviewRead(BendMeasurementRead):
    """Medidas mais os dados de desenho do perfil."""
    turn_angles: list[int]
    path_points: list[tuple[float, float]]
    max_width_cm: Decimal
    remaining_width_cm: Decimal


__all__ = [
    "Direction",
    "OPPOSITE_DIRECTION",
    "Segment",
    "SegmentInput",
    "LengthInput",
    "BendInput",
    "BendMeasurementRead",
    "BendPreviewRead",
]

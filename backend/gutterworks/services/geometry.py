"""
Geometria do perfil de uma dobra
Projeto: GutterWorks (Calhas e Dobras)

O perfil é um caminho de riscos encadeados. Aqui só existe o necessário
para somar larguras, detectar uma ida e volta e entregar os vértices
ao renderizador externo; não é uma simulação física da chapa.
"""

import math
from decimal import Decimal
from typing import Iterable, Sequence

from gutterworks.schemas.bend import OPPOSITE_DIRECTION, Direction, Segment

# Rumo absoluto de cada direção, em graus, no sistema de tela (y para baixo)
DIRECTION_HEADINGS: dict[Direction, int] = {
    Direction.E: 0,
    Direction.SE: 45,
    Direction.S: 90,
    Direction.SW: 135,
    Direction.W: 180,
    Direction.NW: 225,
    Direction.N: 270,
    Direction.NE: 315,
}


def opposite(direction: Direction) -> Direction:
    """Direção geometricamente oposta."""
    return OPPOSITE_DIRECTION[direction]


def is_reversal(previous: Segment, candidate: Segment) -> bool:
    """True se candidate desfaz exatamente previous (mesmo tamanho, sentido oposto)."""
    return (
        candidate.direction == opposite(previous.direction)
        and candidate.size_cm == previous.size_cm
    )


def total_width(segments: Iterable[Segment]) -> Decimal:
    """Soma exata dos tamanhos dos riscos, sem arredondamento."""
    return sum((s.size_cm for s in segments), Decimal("0"))


def turn_angles(segments: Sequence[Segment]) -> list[int]:
    """
    Variação de rumo entre riscos consecutivos, em graus.

    Cada valor está em (-180, 180]: 0 é reto, positivo vira para a
    direita (sentido horário na tela), negativo para a esquerda.
    """
    angles = []
    for previous, current in zip(segments, segments[1:]):
        delta = (DIRECTION_HEADINGS[current.direction] - DIRECTION_HEADINGS[previous.direction]) % 360
        if delta > 180:
            delta -= 360
        angles.append(delta)
    return angles


def path_points(segments: Iterable[Segment]) -> list[tuple[float, float]]:
    """
    Vértices do perfil em cm, começando na origem.

    Usado apenas para desenho; por isso trabalha em float.
    """
    points = [(0.0, 0.0)]
    for segment in segments:
        x, y = points[-1]
        radians = math.radians(DIRECTION_HEADINGS[segment.direction])
        size = float(segment.size_cm)
        points.append((
            round(x + math.cos(radians) * size, 6),
            round(y + math.sin(radians) * size, 6),
        ))
    return points

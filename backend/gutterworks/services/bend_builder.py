"""
Montagem e validação de dobras
Projeto: GutterWorks (Calhas e Dobras)

Contém:
- validate_candidate: regras aplicadas a cada risco adicionado ou editado
- BendBuilder: perfil em construção (riscos editáveis)
- ConfirmedBend: dobra confirmada (forma congelada, metros corridos editáveis)
- QuoteDraft: lista ordenada de dobras confirmadas antes do envio
- replay_bend: reconstrução de uma dobra vinda do cliente

Regras de validação:
1. Tamanho positivo (InvalidInputError)
2. Anti-reversão: risco oposto ao anterior e de mesmo tamanho (ReversalNotAllowedError)
3. Teto de largura: soma dos riscos <= largura máxima da chapa (WidthExceededError)
4. Uma falha nunca altera a lista de riscos
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Sequence

from gutterworks.core.config import settings
from gutterworks.core.exceptions import (
    EmptyBendError,
    InvalidInputError,
    ReversalNotAllowedError,
    WidthExceededError,
)
from gutterworks.schemas.bend import BendMeasurementRead, Direction, LengthInput, Segment
from gutterworks.services import geometry
from gutterworks.services.measurement import (
    Number,
    bend_area,
    has_positive_length,
    parse_length,
    round_to_multiple_of_5,
    to_decimal,
    total_length,
)
from gutterworks.services.pricing import QuoteTotals, compute_quote_totals

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Validação
# -------------------------------------------------------------------

def parse_size(value: Number) -> Decimal:
    """
    Converte o tamanho digitado de um risco.

    Raises:
        InvalidInputError: Se não for um número finito maior que zero
    """
    try:
        size = to_decimal(value)
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Tamanho inválido: {value!r}")
    if not size.is_finite() or size <= 0:
        raise InvalidInputError("Informe um tamanho maior que zero")
    return size


def parse_direction(value: Direction | str) -> Direction:
    """
    Raises:
        InvalidInputError: Se a direção não for uma das 8 conhecidas
    """
    try:
        return Direction(value)
    except ValueError:
        raise InvalidInputError(f"Direção inválida: {value!r}")


def check_width(current_width: Decimal, added: Decimal, max_width_cm: Decimal) -> None:
    """
    Raises:
        WidthExceededError: Se current_width + added passar de max_width_cm
    """
    if current_width + added > max_width_cm:
        remaining = max(max_width_cm - current_width, Decimal("0"))
        raise WidthExceededError(max_width_cm=max_width_cm, remaining_cm=remaining)


def validate_candidate(
    segments: Sequence[Segment],
    candidate: Segment,
    max_width_cm: Decimal,
) -> None:
    """
    Valida o acréscimo de candidate ao final de segments.

    Raises:
        ReversalNotAllowedError: Se candidate desfaz o último risco
        WidthExceededError: Se a soma ultrapassar a largura máxima
    """
    if segments and geometry.is_reversal(segments[-1], candidate):
        raise ReversalNotAllowedError(
            f"Risco {candidate.direction.value} de {candidate.size_cm} cm anula o risco anterior"
        )
    check_width(geometry.total_width(segments), candidate.size_cm, max_width_cm)


# -------------------------------------------------------------------
# Perfil em construção
# -------------------------------------------------------------------

class BendBuilder:
    """
    Perfil de dobra em construção.

    Os riscos continuam editáveis até confirm(). Cada operação valida
    sobre uma cópia e só então substitui a lista.
    """

    def __init__(
        self,
        segments: Iterable[Segment] = (),
        max_width_cm: Optional[Decimal] = None,
    ) -> None:
        self.max_width_cm = (
            to_decimal(max_width_cm) if max_width_cm is not None else settings.max_bend_width_cm
        )
        self._segments: list[Segment] = list(segments)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def total_width_cm(self) -> Decimal:
        return geometry.total_width(self._segments)

    @property
    def rounded_width_cm(self) -> int:
        return round_to_multiple_of_5(self.total_width_cm)

    @property
    def remaining_width_cm(self) -> Decimal:
        return self.max_width_cm - self.total_width_cm

    def append_segment(self, direction: Direction | str, size_cm: Number) -> tuple[Segment, ...]:
        """
        Adiciona um risco ao final do perfil.

        Returns:
            A nova lista de riscos

        Raises:
            InvalidInputError, ReversalNotAllowedError, WidthExceededError
        """
        candidate = Segment(direction=parse_direction(direction), size_cm=parse_size(size_cm))
        validate_candidate(self._segments, candidate, self.max_width_cm)
        self._segments = [*self._segments, candidate]
        return self.segments

    def edit_segment_size(self, index: int, new_size_cm: Number) -> tuple[Segment, ...]:
        """
        Troca o tamanho de um risco já adicionado.

        A reversão é verificada contra os dois vizinhos, pois a edição
        pode formar uma ida e volta com o risco anterior ou o seguinte.

        Raises:
            InvalidInputError: Índice fora da lista ou tamanho inválido
            ReversalNotAllowedError, WidthExceededError
        """
        if not 0 <= index < len(self._segments):
            raise InvalidInputError(f"Risco {index} não existe")

        size = parse_size(new_size_cm)
        current = self._segments[index]
        edited = Segment(direction=current.direction, size_cm=size)

        if index > 0 and geometry.is_reversal(self._segments[index - 1], edited):
            raise ReversalNotAllowedError("A edição faz o risco anular o anterior")
        if index + 1 < len(self._segments) and geometry.is_reversal(edited, self._segments[index + 1]):
            raise ReversalNotAllowedError("A edição faz o risco seguinte anular este")

        check_width(self.total_width_cm - current.size_cm, size, self.max_width_cm)

        updated = list(self._segments)
        updated[index] = edited
        self._segments = updated
        return self.segments

    def undo_last(self) -> tuple[Segment, ...]:
        """Remove o último risco (sem efeito se o perfil estiver vazio)."""
        self._segments = self._segments[:-1]
        return self.segments

    def clear(self) -> None:
        self._segments = []

    def confirm(self, diagram_ref: Optional[str] = None) -> ConfirmedBend:
        """
        Congela o perfil em uma dobra confirmada.

        Raises:
            EmptyBendError: Se não houver nenhum risco
        """
        if not self._segments:
            raise EmptyBendError()
        bend = ConfirmedBend(self._segments, max_width_cm=self.max_width_cm, diagram_ref=diagram_ref)
        self._segments = []
        return bend


# -------------------------------------------------------------------
# Dobra confirmada
# -------------------------------------------------------------------

class ConfirmedBend:
    """
    Dobra com forma congelada.

    Os metros corridos ficam como entradas editáveis: entradas vazias ou
    inválidas são mantidas como campos em branco, mas não somam.
    """

    def __init__(
        self,
        segments: Iterable[Segment],
        lengths: Optional[Iterable[LengthInput]] = None,
        max_width_cm: Optional[Decimal] = None,
        diagram_ref: Optional[str] = None,
    ) -> None:
        self._segments = tuple(segments)
        self._lengths: list[LengthInput] = list(lengths) if lengths is not None else [None]
        for value in self._lengths:
            parse_length(value)
        if not self._lengths:
            self._lengths = [None]
        self.max_width_cm = max_width_cm if max_width_cm is not None else settings.max_bend_width_cm
        self.diagram_ref = diagram_ref

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    @property
    def lengths(self) -> tuple[LengthInput, ...]:
        return tuple(self._lengths)

    @property
    def positive_lengths(self) -> list[Decimal]:
        return [v for v in (parse_length(raw) for raw in self._lengths) if v is not None]

    @property
    def total_width_cm(self) -> Decimal:
        return geometry.total_width(self._segments)

    @property
    def rounded_width_cm(self) -> int:
        return round_to_multiple_of_5(self.total_width_cm)

    @property
    def total_length_m(self) -> Decimal:
        return total_length(self._lengths)

    @property
    def area_m2(self) -> Decimal:
        return bend_area(self.rounded_width_cm, self.total_length_m)

    @property
    def is_billable(self) -> bool:
        """True quando há ao menos um comprimento positivo."""
        return has_positive_length(self._lengths)

    def set_length(self, index: int, value: LengthInput) -> None:
        """
        Raises:
            InvalidInputError: Índice inexistente ou comprimento acima do máximo
        """
        if not 0 <= index < len(self._lengths):
            raise InvalidInputError(f"Comprimento {index} não existe")
        parse_length(value)
        self._lengths[index] = value

    def add_length(self, value: LengthInput = None) -> None:
        parse_length(value)
        self._lengths.append(value)

    def remove_length(self, index: int) -> None:
        """Remove uma entrada; a última entrada restante nunca é removida."""
        if not 0 <= index < len(self._lengths):
            raise InvalidInputError(f"Comprimento {index} não existe")
        if len(self._lengths) <= 1:
            return
        del self._lengths[index]

    def reopen(self) -> BendBuilder:
        """Volta a dobra para edição, com os mesmos riscos."""
        return BendBuilder(self._segments, max_width_cm=self.max_width_cm)

    def measurement(self) -> BendMeasurementRead:
        return BendMeasurementRead(
            segments=list(self._segments),
            total_width_cm=self.total_width_cm,
            rounded_width_cm=self.rounded_width_cm,
            lengths=self.positive_lengths,
            total_length_m=self.total_length_m,
            area_m2=self.area_m2,
            is_billable=self.is_billable,
        )


# -------------------------------------------------------------------
# Orçamento em montagem
# -------------------------------------------------------------------

class QuoteDraft:
    """Dobras confirmadas na ordem de produção, antes do envio."""

    def __init__(self) -> None:
        self._bends: list[ConfirmedBend] = []

    @property
    def bends(self) -> tuple[ConfirmedBend, ...]:
        return tuple(self._bends)

    def add_bend(self, bend: ConfirmedBend) -> None:
        self._bends.append(bend)

    def remove_bend(self, index: int) -> ConfirmedBend:
        if not 0 <= index < len(self._bends):
            raise InvalidInputError(f"Dobra {index} não existe")
        return self._bends.pop(index)

    def edit_bend(self, index: int) -> BendBuilder:
        """Retira a dobra do orçamento e devolve o perfil para edição."""
        return self.remove_bend(index).reopen()

    def totals(self, price_per_m2: Number) -> QuoteTotals:
        """Totais considerando apenas as dobras com metros corridos informados."""
        areas = [b.area_m2 for b in self._bends if b.is_billable]
        return compute_quote_totals(areas, price_per_m2)


def replay_bend(
    segments: Iterable[tuple[Direction | str, Number]],
    lengths: Iterable[LengthInput] = (None,),
    max_width_cm: Optional[Decimal] = None,
    diagram_ref: Optional[str] = None,
) -> ConfirmedBend:
    """
    Refaz uma dobra risco a risco, aplicando todas as validações.

    Args:
        segments: Pares (direção, tamanho) na ordem em que foram desenhados
        lengths: Entradas de metros corridos
        max_width_cm: Teto de largura (padrão: configuração)
        diagram_ref: Referência ao desenho

    Returns:
        A dobra confirmada

    Raises:
        InvalidInputError, ReversalNotAllowedError, WidthExceededError, EmptyBendError
    """
    builder = BendBuilder(max_width_cm=max_width_cm)
    for direction, size in segments:
        builder.append_segment(direction, size)
    bend = builder.confirm(diagram_ref=diagram_ref)
    for index, value in enumerate(lengths):
        if index == 0:
            bend.set_length(0, value)
        else:
            bend.add_length(value)
    return bend

"""Symmetry utilities for Ultimate Tic-Tac-Toe boards.

This module exposes the eight rotation/reflection symmetries of a 3x3 grid
and helpers for applying them to cell indices, single sub-boards, moves and a
whole :class:`~ultimate_velha.game.MetaBoard`.  Win detection and the
heuristic's pressure score are both invariant under these transforms, which
makes them handy for checking the rules engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .game import EMPTY, Line, LineWin, MetaBoard, Move

Mapping = Tuple[int, ...]


def _transform_index(index: int, transform: Tuple[int, int, int, int]) -> int:
    """Apply an affine transform, centred on the middle cell, to an index."""

    row, col = divmod(index, 3)
    row, col = row - 1, col - 1
    a, b, c, d = transform
    new_row = a * row + b * col + 1
    new_col = c * row + d * col + 1
    return new_row * 3 + new_col


def _build_mapping(transform: Tuple[int, int, int, int]) -> Mapping:
    return tuple(_transform_index(index, transform) for index in range(9))


@dataclass(frozen=True)
class Symmetry:
    """A board symmetry; ``mapping[i]`` is where index ``i`` lands."""

    name: str
    mapping: Mapping

    def apply_index(self, index: int) -> int:
        return self.mapping[index]

    def apply_move(self, move: Move) -> Move:
        sub, cell = move
        return self.mapping[sub], self.mapping[cell]

    def apply_line(self, line: Line) -> Line:
        a, b, c = sorted(self.mapping[index] for index in line)
        return a, b, c

    def apply_cells(self, cells: Sequence[str]) -> List[str]:
        transformed = [EMPTY] * 9
        for index, value in enumerate(cells):
            transformed[self.mapping[index]] = value
        return transformed

    def apply_meta_board(self, board: MetaBoard) -> MetaBoard:
        boards: List[List[str]] = [[EMPTY] * 9 for _ in range(9)]
        outcomes: List[Optional[LineWin]] = [None] * 9
        for index in range(9):
            target = self.mapping[index]
            boards[target] = self.apply_cells(board.boards[index])
            outcome = board.outcomes[index]
            if outcome is not None:
                outcomes[target] = LineWin(outcome.winner, self.apply_line(outcome.line))
        return MetaBoard(boards=boards, outcomes=outcomes)


# Affine transforms represented as (a, b, c, d) that act on centred (row, col)
_TRANSFORMS: Tuple[Tuple[int, int, int, int], ...] = (
    (1, 0, 0, 1),   # Identity
    (0, -1, 1, 0),  # Rotate 90
    (-1, 0, 0, -1),  # Rotate 180
    (0, 1, -1, 0),  # Rotate 270
    (1, 0, 0, -1),  # Mirror vertical axis
    (-1, 0, 0, 1),  # Mirror horizontal axis
    (0, 1, 1, 0),   # Main diagonal reflection
    (0, -1, -1, 0),  # Anti-diagonal reflection
)

_NAMES = (
    "identity",
    "rot90",
    "rot180",
    "rot270",
    "mirror_v",
    "mirror_h",
    "diag_main",
    "diag_anti",
)

SYMMETRIES: Tuple[Symmetry, ...] = tuple(
    Symmetry(name=name, mapping=_build_mapping(transform))
    for transform, name in zip(_TRANSFORMS, _NAMES)
)


def invert_mapping(mapping: Sequence[int]) -> Tuple[int, ...]:
    """Return the inverse of a permutation mapping."""

    inverse = [0] * len(mapping)
    for source, target in enumerate(mapping):
        inverse[target] = source
    return tuple(inverse)


def inverse(symmetry: Symmetry) -> Symmetry:
    return Symmetry(name=f"{symmetry.name}^-1", mapping=invert_mapping(symmetry.mapping))


__all__ = ["SYMMETRIES", "Symmetry", "inverse", "invert_mapping"]

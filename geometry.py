"""Quarter-turn rotation of part shapes and translation onto the board."""

from __future__ import annotations

from typing import Iterable, Tuple

from models import Cell

ROTATIONS = (0, 1, 2, 3)


def rotate_cell(cell: Cell, rotation: int) -> Cell:
    x, y = cell
    r = rotation % 4
    if r == 1:
        return (y, -x)
    if r == 2:
        return (-x, -y)
    if r == 3:
        return (-y, x)
    return (x, y)


def transform(shape: Iterable[Cell], rotation: int) -> Tuple[Cell, ...]:
    """Rotate every local cell about the local origin; order is preserved."""
    return tuple(rotate_cell(c, rotation) for c in shape)


def place_at(shape: Iterable[Cell], origin: Cell, rotation: int) -> Tuple[Cell, ...]:
    ox, oy = origin
    return tuple((ox + tx, oy + ty) for tx, ty in transform(shape, rotation))


__all__ = ["ROTATIONS", "rotate_cell", "transform", "place_at"]

from __future__ import annotations

from typing import Container, Iterable, Optional, Set

from models import Board, Cell, CellState, PlacedPart, SlotKey


def cells_fit(cells: Iterable[Cell], board: Board, taken: Container[Cell]) -> bool:
    """True when every cell is on the board, not blocked and not in ``taken``.

    Out-of-bounds, blocked and collision failures are not distinguished.
    """
    for x, y in cells:
        if not board.in_bounds(x, y):
            return False
        if board.state(x, y) == CellState.BLOCKED:
            return False
        if (x, y) in taken:
            return False
    return True


def occupied_cells(placed: Iterable[PlacedPart], exclude_id: Optional[SlotKey] = None) -> Set[Cell]:
    taken: Set[Cell] = set()
    for p in placed:
        if exclude_id is not None and p.id == exclude_id:
            continue
        taken.update(p.cells)
    return taken


def validate(
    cells: Iterable[Cell],
    board: Board,
    placed: Iterable[PlacedPart],
    exclude_id: Optional[SlotKey] = None,
) -> bool:
    return cells_fit(cells, board, occupied_cells(placed, exclude_id))


__all__ = ["cells_fit", "occupied_cells", "validate"]

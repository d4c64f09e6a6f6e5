# masks.py - equipment patterns -> board cell states
from __future__ import annotations

from typing import List, Optional

from catalog import Catalog
from config import CFG, BOARD_SIZE
from models import Board, CellState, EquipmentShape
from selection import Selection

_CHAR_STATE = {
    "U": CellState.USABLE,
    "P": CellState.POWER,
}


def overlay(grid: List[List[CellState]], equipment: Optional[EquipmentShape], offset_y: int) -> None:
    """Carve usable/power cells out of ``grid``; other characters leave cells as they are."""
    if equipment is None:
        return
    for y, line in enumerate(equipment.pattern):
        gy = y + offset_y
        if not 0 <= gy < BOARD_SIZE:
            continue
        for x in range(min(BOARD_SIZE, len(line))):
            state = _CHAR_STATE.get(line[x])
            if state is not None:
                grid[gy][x] = state


def build_board(
    reactor: Optional[EquipmentShape] = None,
    aux1: Optional[EquipmentShape] = None,
    aux2: Optional[EquipmentShape] = None,
) -> Board:
    grid = [[CellState.BLOCKED] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    overlay(grid, reactor, CFG.REACTOR_OFFSET)
    overlay(grid, aux1, CFG.AUX1_OFFSET)
    overlay(grid, aux2, CFG.AUX2_OFFSET)
    return Board.from_rows(grid)


def build_board_for_selection(selection: Selection, catalog: Catalog) -> Board:
    """Resolve the selected equipment; unknown ids/tiers are treated as unselected."""
    return build_board(
        catalog.get_equipment("reactor", selection.reactor_id, selection.reactor_tier),
        catalog.get_equipment("auxiliary", selection.aux1_id, selection.aux1_tier),
        catalog.get_equipment("auxiliary", selection.aux2_id, selection.aux2_tier),
    )


__all__ = ["build_board", "build_board_for_selection", "overlay"]

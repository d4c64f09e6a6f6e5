# solver/backtracking.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from config import BOARD_SIZE
from geometry import ROTATIONS, place_at
from models import Board, Cell, Placeable, PlacedPart, Placement
from validator import cells_fit, occupied_cells


@dataclass
class SearchStats:
    nodes: int = 0
    exhausted: bool = False   # budget ran out before the search finished
    elapsed_sec: float = 0.0


def enumerate_placements(part: Placeable, board: Board, occupied: Set[Cell]) -> List[Placement]:
    """Every legal placement of ``part``: rotation-major, then row-major origin."""
    out: List[Placement] = []
    for r in ROTATIONS:
        for y in range(BOARD_SIZE):
            for x in range(BOARD_SIZE):
                cells = place_at(part.shape, (x, y), r)
                if cells_fit(cells, board, occupied):
                    out.append(Placement(part, (x, y), r, cells))
    return out


def solve_backtracking(
    remaining: Sequence[Placeable],
    board: Board,
    placed: Iterable[PlacedPart] = (),
    *,
    node_limit: int = 0,
    deadline: Optional[float] = None,
) -> Tuple[Optional[List[Placement]], SearchStats]:
    """Chronological backtracking with a minimum-remaining-values part order.

    Each decision point re-enumerates the legal placements of every remaining
    part against the current occupancy, fails fast when any part has none,
    and branches on the part with the fewest (first one wins ties; a count of
    one ends the scan). The occupancy set is updated before each recursive
    call and restored after it, so the committed ``placed`` collection is
    never touched.

    Returns ``(placements, stats)``; ``placements`` is ``None`` when no full
    assignment exists or, with ``stats.exhausted`` set, when ``node_limit``
    or ``deadline`` stopped the search first. Zero/``None`` budgets are
    unbounded.
    """
    stats = SearchStats()
    occupied: Set[Cell] = occupied_cells(placed)
    t0 = time.time()

    def _budget_exceeded() -> bool:
        if node_limit and stats.nodes >= node_limit:
            stats.exhausted = True
        elif deadline is not None and time.time() >= deadline:
            stats.exhausted = True
        return stats.exhausted

    def _search(parts: List[Placeable]) -> Optional[List[Placement]]:
        if not parts:
            return []
        if _budget_exceeded():
            return None
        stats.nodes += 1

        best_idx = -1
        best: Optional[List[Placement]] = None
        for i, part in enumerate(parts):
            opts = enumerate_placements(part, board, occupied)
            if not opts:
                return None
            if best is None or len(opts) < len(best):
                best_idx, best = i, opts
                if len(best) == 1:
                    break

        rest = parts[:best_idx] + parts[best_idx + 1:]
        for plc in best:
            occupied.update(plc.cells)
            sub = _search(rest)
            if sub is not None:
                return [plc] + sub
            occupied.difference_update(plc.cells)
            if stats.exhausted:
                return None
        return None

    result = _search(list(remaining))
    stats.elapsed_sec = time.time() - t0
    return result, stats


__all__ = ["SearchStats", "enumerate_placements", "solve_backtracking"]

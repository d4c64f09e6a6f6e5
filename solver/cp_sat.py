# solver/cp_sat.py - exact placement model for OR-Tools CP-SAT
from __future__ import annotations

import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Board, Cell, Placeable, PlacedPart, Placement
from solver.backtracking import enumerate_placements
from validator import occupied_cells


def try_place_all(
    remaining: Sequence[Placeable],
    board: Board,
    placed: Iterable[PlacedPart] = (),
    *,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, List[Placement], Optional[str]]:
    """Place every part at once: one Boolean per legal placement.

    Returns ``(ok, placements, reason)``. ``placements`` follows the input
    order of ``remaining``. ``reason`` is ``"infeasible"`` when CP-SAT proves
    no assignment exists and ``"timeout"`` when it stops first.
    """
    meta: Dict[str, object] = {"options": 0}
    try_place_all.last_meta = meta

    if not remaining:
        return True, [], None

    occupied = occupied_cells(placed)
    options: List[List[Placement]] = [enumerate_placements(p, board, occupied) for p in remaining]
    meta["options"] = sum(len(o) for o in options)
    if any(not o for o in options):
        return False, [], "infeasible"

    m = _cp.CpModel()
    n = len(remaining)
    p = [[m.NewBoolVar(f"p_{i}_{k}") for k in range(len(options[i]))] for i in range(n)]
    for i in range(n):
        m.AddExactlyOne(p[i])

    cell_to_vars: Dict[Cell, List[_cp.IntVar]] = defaultdict(list)
    for i in range(n):
        for k, plc in enumerate(options[i]):
            for c in plc.cells:
                cell_to_vars[c].append(p[i][k])
    for vars_here in cell_to_vars.values():
        if len(vars_here) > 1:
            m.AddAtMostOne(vars_here)

    solver = _cp.CpSolver()
    seconds = CFG.CP_SAT_SECONDS if max_seconds is None else max_seconds
    if seconds and seconds > 0:
        solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.num_search_workers = int(getattr(CFG, "CP_SAT_WORKERS", 1))
    solver.parameters.log_search_progress = False

    t0 = time.time()
    res = solver.Solve(m)
    meta["elapsed_sec"] = time.time() - t0
    meta["status"] = solver.StatusName(res)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        out: List[Placement] = []
        for i in range(n):
            for k, plc in enumerate(options[i]):
                if solver.BooleanValue(p[i][k]):
                    out.append(plc)
                    break
        return True, out, None
    if res == _cp.INFEASIBLE:
        return False, [], "infeasible"
    if res == _cp.MODEL_INVALID:
        return False, [], "model invalid"
    return False, [], "timeout"


try_place_all.last_meta = {}

__all__ = ["try_place_all"]

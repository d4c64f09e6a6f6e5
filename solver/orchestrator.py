# solver/orchestrator.py - public solve entrypoint
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from config import CFG
from models import Board, Placeable, PlacedPart, Placement, SlotKey
from progress import (
    reset as progress_reset,
    set_done,
    set_engine,
    set_message,
    set_nodes,
    start as progress_start,
)
from solver.backtracking import solve_backtracking
from solver.cp_sat import try_place_all

MSG_EMPTY = "Nothing to place: selection is empty."
MSG_INFEASIBLE = "No complete solution found for the current selection and grid."
MSG_UNKNOWN = "Search budget exhausted before a complete solution was found."
MSG_CONFLICT = "More than one part claims the same slot."

ENGINES = ("backtracking", "cp_sat")


@dataclass
class SolveResult:
    success: bool
    status: str                       # solved | empty | conflict | infeasible | unknown
    message: str = ""
    solution: List[Placement] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


def _resolve_engine(engine: Any) -> str:
    name = str(engine or getattr(CFG, "SOLVER_ENGINE", "backtracking") or "backtracking").strip().lower()
    return name if name in ENGINES else "backtracking"


def slot_conflicts(remaining: Iterable[Placeable], placed: Iterable[PlacedPart]) -> List[SlotKey]:
    """Slots claimed twice, by two pooled parts or by a pooled and a placed part."""
    seen = {p.slot for p in placed}
    out: List[SlotKey] = []
    for pl in remaining:
        if pl.slot in seen:
            if pl.slot not in out:
                out.append(pl.slot)
            continue
        seen.add(pl.slot)
    return out


def _finish(result: SolveResult) -> SolveResult:
    set_done(result.success, reason=result.message or result.status)
    return result


def _run_cp_sat(
    remaining: Sequence[Placeable],
    board: Board,
    placed: Sequence[PlacedPart],
    seconds: Optional[float],
    meta: Dict[str, Any],
) -> SolveResult:
    set_engine("cp_sat")
    set_message(f"CP-SAT over {len(remaining)} parts")
    ok, placements, reason = try_place_all(remaining, board, placed, max_seconds=seconds)
    meta["cp_sat"] = dict(getattr(try_place_all, "last_meta", {}) or {})
    if ok:
        return SolveResult(True, "solved", "", placements, meta)
    if reason == "infeasible":
        return SolveResult(False, "infeasible", MSG_INFEASIBLE, [], meta)
    meta["reason"] = reason
    return SolveResult(False, "unknown", MSG_UNKNOWN, [], meta)


def solve(
    placeables: Iterable[Placeable],
    placed: Iterable[PlacedPart],
    board: Board,
    *,
    engine: Optional[str] = None,
    node_limit: Optional[int] = None,
    seconds: Optional[float] = None,
) -> SolveResult:
    """Find positions for every pooled placeable, or report why not.

    The pool and the placed collection are read, never mutated; committing
    the returned placements is the caller's job. A pool that claims a slot
    twice (or a slot already placed) is refused with status ``"conflict"``,
    so every solved result can be committed in full. ``node_limit``/``seconds``
    default to ``CFG.BACKTRACK_NODE_LIMIT``/``CFG.BACKTRACK_SECONDS`` (zero
    means unbounded). When a bounded backtracking run gives up and
    ``CFG.CP_SAT_FALLBACK`` is on, CP-SAT gets ``CFG.CP_SAT_SECONDS`` to settle it.
    """
    remaining = list(placeables)
    placed = list(placed)
    engine_name = _resolve_engine(engine)

    progress_reset()
    progress_start(len(remaining))
    meta: Dict[str, Any] = {"engine": engine_name, "remaining": len(remaining)}

    if not remaining:
        return _finish(SolveResult(False, "empty", MSG_EMPTY, [], meta))

    conflicts = slot_conflicts(remaining, placed)
    if conflicts:
        meta["conflicts"] = [str(s) for s in conflicts]
        return _finish(SolveResult(False, "conflict", MSG_CONFLICT, [], meta))

    if engine_name == "cp_sat":
        return _finish(_run_cp_sat(remaining, board, placed, None, meta))

    limit = int(CFG.BACKTRACK_NODE_LIMIT if node_limit is None else node_limit)
    budget = float(CFG.BACKTRACK_SECONDS if seconds is None else seconds)
    deadline = time.time() + budget if budget > 0 else None

    set_engine("backtracking")
    set_message(f"Backtracking over {len(remaining)} parts")
    placements, stats = solve_backtracking(
        remaining, board, placed, node_limit=max(0, limit), deadline=deadline
    )
    set_nodes(stats.nodes)
    meta.update(nodes=stats.nodes, elapsed_sec=round(stats.elapsed_sec, 4))

    if placements is not None:
        return _finish(SolveResult(True, "solved", "", placements, meta))
    if not stats.exhausted:
        return _finish(SolveResult(False, "infeasible", MSG_INFEASIBLE, [], meta))

    meta["budget_exhausted"] = True
    if CFG.CP_SAT_FALLBACK:
        meta["fallback"] = "cp_sat"
        return _finish(_run_cp_sat(remaining, board, placed, CFG.CP_SAT_SECONDS, meta))
    return _finish(SolveResult(False, "unknown", MSG_UNKNOWN, [], meta))


__all__ = [
    "SolveResult",
    "solve",
    "slot_conflicts",
    "MSG_EMPTY",
    "MSG_INFEASIBLE",
    "MSG_UNKNOWN",
    "MSG_CONFLICT",
    "ENGINES",
]

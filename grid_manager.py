# grid_manager.py - manual placement on the 8x8 board
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from catalog import Catalog
from consistency import ReconcileReport, reconcile
from geometry import place_at
from masks import build_board_for_selection
from models import Board, Cell, Part, Placeable, PlacedPart, Placement, SlotKey
from selection import Selection
from validator import validate

logger = logging.getLogger(__name__)

DragListener = Callable[[Placeable], None]


@dataclass(frozen=True)
class PlaceResult:
    ok: bool
    slot: Optional[SlotKey] = None


class GridManager:
    """Owns the board plus the placed and placeable collections.

    All mutation happens through this object; callers must not run two
    operations against the same manager concurrently.
    """

    def __init__(self, catalog: Catalog, selection: Optional[Selection] = None, board: Optional[Board] = None):
        self.catalog = catalog
        self.selection = selection if selection is not None else Selection()
        self.board: Board = board if board is not None else Board.blocked()
        self.placed: List[PlacedPart] = []
        self.placeables: List[Placeable] = []
        self._drag_listeners: List[DragListener] = []

    # ---------- observers ----------

    def add_drag_listener(self, callback: DragListener) -> None:
        self._drag_listeners.append(callback)

    def remove_drag_listener(self, callback: DragListener) -> None:
        if callback in self._drag_listeners:
            self._drag_listeners.remove(callback)

    def _notify_drag_start(self, placeable: Placeable) -> None:
        for cb in list(self._drag_listeners):
            cb(placeable)

    # ---------- pool ----------

    def add_placeable(self, part: Part, idx: int) -> Optional[Placeable]:
        """Add ``part`` at slot ``idx`` unless that (part id, idx) is already pooled."""
        candidate = Placeable(part, int(idx))
        if any(pl.key == candidate.key for pl in self.placeables):
            return None
        self.placeables.append(candidate)
        return candidate

    def remove_placeable(self, placeable: Placeable) -> bool:
        for i, pl in enumerate(self.placeables):
            if pl.key == placeable.key:
                del self.placeables[i]
                return True
        return False

    def find_placed(self, slot: SlotKey) -> Optional[PlacedPart]:
        for p in self.placed:
            if p.id == slot:
                return p
        return None

    # ---------- placement ----------

    def try_place(self, part: Placeable, origin: Cell, rotation: int) -> PlaceResult:
        cells = place_at(part.shape, origin, rotation)
        if not validate(cells, self.board, self.placed):
            return PlaceResult(False)
        slot = part.slot
        if self.find_placed(slot) is not None:
            return PlaceResult(False)

        self.placed.append(PlacedPart(slot=slot, part_id=part.part.id, name=part.part.name, cells=cells))
        self.remove_placeable(part)
        return PlaceResult(True, slot)

    def _return_to_pool(self, p: PlacedPart) -> Optional[Placeable]:
        base = self.catalog.get_part_by_id(p.part_id)
        if base is None:
            logger.warning("Placed slot %s refers to unknown part %s", p.slot, p.part_id)
            return None
        placeable = Placeable(base, p.slot.idx)
        if not any(pl.key == placeable.key for pl in self.placeables):
            self.placeables.append(placeable)
        return placeable

    def move_placed(self, slot: SlotKey) -> Optional[Placeable]:
        """Pick a placed part back up; listeners receive the reconstituted placeable."""
        p = self.find_placed(slot)
        if p is None:
            return None
        self.placed.remove(p)
        placeable = self._return_to_pool(p)
        if placeable is None:
            return None
        self._notify_drag_start(placeable)
        return placeable

    def reset_board(self) -> List[Placeable]:
        returned: List[Placeable] = []
        for p in self.placed:
            placeable = self._return_to_pool(p)
            if placeable is not None:
                returned.append(placeable)
        del self.placed[:]
        return returned

    def commit_solution(self, placements: Iterable[Placement]) -> int:
        committed = 0
        for plc in placements:
            if self.try_place(plc.placeable, plc.origin, plc.rotation).ok:
                committed += 1
            else:
                logger.warning("Solved placement for %s no longer fits", plc.placeable.slot)
        return committed

    # ---------- configuration changes ----------

    def rebuild_board(self) -> ReconcileReport:
        self.board = build_board_for_selection(self.selection, self.catalog)
        return self.check_all()

    def check_all(self) -> ReconcileReport:
        return reconcile(
            self.selection.ship_config(self.catalog),
            self.board,
            self.placed,
            self.placeables,
            self.catalog,
        )


__all__ = ["GridManager", "PlaceResult", "DragListener"]

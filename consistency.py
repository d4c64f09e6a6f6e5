# consistency.py - repair placed/placeable collections after a configuration change
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from catalog import Catalog
from models import Board, Placeable, PlacedPart, ShipConfiguration, SlotKey
from validator import validate

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    dropped_slots: List[SlotKey] = field(default_factory=list)   # slot no longer exists
    returned: List[Placeable] = field(default_factory=list)      # position invalid, part back in the pool
    pruned: List[Placeable] = field(default_factory=list)        # placeable slot no longer exists

    @property
    def changed(self) -> bool:
        return bool(self.dropped_slots or self.returned or self.pruned)


def _slot_exists(ship_config: Optional[ShipConfiguration], slot: SlotKey) -> bool:
    if slot.idx < 0:
        return False
    # Without a resolved ship only the lower bound applies.
    if ship_config is None:
        return True
    return slot.idx < ship_config.slot_count(slot.part_type)


def reconcile(
    ship_config: Optional[ShipConfiguration],
    board: Board,
    placed: List[PlacedPart],
    placeables: List[Placeable],
    catalog: Catalog,
) -> ReconcileReport:
    """Prune slots the ship no longer has and return mis-placed parts to the pool.

    ``placed`` and ``placeables`` are mutated in place. Removal indices are
    collected first and applied in descending order.
    """
    report = ReconcileReport()

    remove_placed: List[int] = []
    for i, p in enumerate(placed):
        if not _slot_exists(ship_config, p.slot):
            remove_placed.append(i)
            report.dropped_slots.append(p.slot)
            continue
        if validate(p.cells, board, placed, exclude_id=p.id):
            continue
        remove_placed.append(i)
        base = catalog.get_part_by_id(p.part_id)
        if base is None:
            logger.warning("Dropping placed slot %s: part %s not in catalog", p.slot, p.part_id)
            continue
        report.returned.append(Placeable(base, p.slot.idx))

    for i in sorted(remove_placed, reverse=True):
        del placed[i]

    # returned parts join the pool before the prune pass
    existing = {pl.key for pl in placeables}
    for pl in report.returned:
        if pl.key not in existing:
            placeables.append(pl)
            existing.add(pl.key)

    remove_placeables: List[int] = []
    for i, pl in enumerate(placeables):
        if not _slot_exists(ship_config, pl.slot):
            remove_placeables.append(i)
            report.pruned.append(pl)

    for i in sorted(remove_placeables, reverse=True):
        del placeables[i]

    if report.changed:
        logger.info(
            "Reconciled board: dropped=%d returned=%d pruned=%d",
            len(report.dropped_slots), len(report.returned), len(report.pruned),
        )
    return report


__all__ = ["ReconcileReport", "reconcile"]

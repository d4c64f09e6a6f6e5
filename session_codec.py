"""Flat session state for shareable links.

Placeables serialise as ``{id, idx}`` and placed parts as
``{partId, idx, cells}``; everything else is rebuilt from the catalog.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict, List, Optional

from config import CFG
from grid_manager import GridManager
from models import Placeable, PlacedPart
from selection import NONE_ID

logger = logging.getLogger(__name__)


def _to_int(x: Any) -> Optional[int]:
    try:
        return int(x)
    except (TypeError, ValueError):
        return None


def build_state(manager: GridManager) -> Dict[str, Any]:
    sel = manager.selection
    return {
        "ship": sel.ship_id,
        "st": sel.ship_tier,
        "r": sel.reactor_id,
        "rt": sel.reactor_tier,
        "a1": sel.aux1_id,
        "a1t": sel.aux1_tier,
        "a2": sel.aux2_id,
        "a2t": sel.aux2_tier,
        "pl": [{"id": p.part.id, "idx": p.idx} for p in manager.placeables],
        "pd": [
            {"partId": p.part_id, "idx": p.slot.idx, "cells": [[x, y] for x, y in p.cells]}
            for p in manager.placed
        ],
    }


def encode_state(obj: Dict[str, Any]) -> str:
    raw = json.dumps(obj, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_state(text: str) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    token = text.strip()
    if token.startswith("#s="):
        token = token[3:]
    token += "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _equipment_or_none(manager: GridManager, kind: str, value: Any) -> str:
    if isinstance(value, str) and value in manager.catalog.equipment_ids(kind):
        return value
    return NONE_ID


def _cells(value: Any) -> Optional[List[tuple]]:
    if not isinstance(value, list):
        return None
    out = []
    for c in value:
        if not isinstance(c, (list, tuple)) or len(c) != 2:
            return None
        x, y = _to_int(c[0]), _to_int(c[1])
        if x is None or y is None:
            return None
        out.append((x, y))
    return out


def apply_state(manager: GridManager, state: Optional[Dict[str, Any]]) -> bool:
    """Restore ``state`` into ``manager``; unknown ids degrade to defaults or are skipped."""
    if not state:
        return False
    catalog = manager.catalog
    sel = manager.selection

    ship = state.get("ship")
    if isinstance(ship, str) and ship in catalog.ship_ids():
        sel.set_ship(ship, catalog)
    elif sel.ship_id not in catalog.ship_ids():
        sel.set_ship(CFG.DEFAULT_SHIP, catalog)
    ship_tier = _to_int(state.get("st"))
    if ship_tier is not None and ship_tier in catalog.ship_tiers(sel.ship_id):
        sel.set_ship_tier(ship_tier)

    sel.set_reactor(_equipment_or_none(manager, "reactor", state.get("r")))
    sel.set_reactor_tier(_to_int(state.get("rt")) or 1)
    sel.set_aux1_tier(_to_int(state.get("a1t")) or 1)
    sel.set_aux1(_equipment_or_none(manager, "auxiliary", state.get("a1")))
    sel.set_aux2_tier(_to_int(state.get("a2t")) or 1)
    sel.set_aux2(_equipment_or_none(manager, "auxiliary", state.get("a2")))

    del manager.placeables[:]
    for p in state.get("pl") or []:
        if not isinstance(p, dict):
            continue
        base = catalog.get_part_by_id(str(p.get("id")))
        idx = _to_int(p.get("idx"))
        if base is None or idx is None or idx < 0:
            logger.warning("Skipping unknown placeable in session: %r", p)
            continue
        manager.add_placeable(base, idx)

    del manager.placed[:]
    for p in state.get("pd") or []:
        if not isinstance(p, dict):
            continue
        base = catalog.get_part_by_id(str(p.get("partId")))
        idx = _to_int(p.get("idx"))
        cells = _cells(p.get("cells"))
        if base is None or idx is None or idx < 0 or cells is None:
            logger.warning("Skipping unknown placed part in session: %r", p)
            continue
        slot = Placeable(base, idx).slot
        if manager.find_placed(slot) is not None:
            continue
        manager.placed.append(PlacedPart(slot=slot, part_id=base.id, name=base.name, cells=tuple(cells)))

    manager.rebuild_board()
    return True


__all__ = ["build_state", "encode_state", "decode_state", "apply_state"]

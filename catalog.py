# catalog.py - parts / equipment / ship definitions
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import CFG
from models import (
    EquipmentShape,
    Part,
    PartType,
    ShipConfiguration,
    shape_from_pattern,
    slot_counts,
)

logger = logging.getLogger(__name__)

EQUIPMENT_KINDS = ("reactor", "auxiliary")

_TIER_NAME_RE = re.compile(r"\s*T\d+$", re.IGNORECASE)


def _to_int(x: Any) -> Optional[int]:
    try:
        return int(x)
    except (TypeError, ValueError):
        return None


def _rows(value: Any) -> Optional[Tuple[str, ...]]:
    if not isinstance(value, (list, tuple)):
        return None
    rows = tuple(str(r) for r in value)
    return rows or None


class Catalog:
    """Static catalog of board parts, reactors/auxiliaries and ships.

    Every lookup treats a miss as absence and returns ``None``; nothing here
    raises for unknown ids.
    """

    def __init__(
        self,
        parts: Iterable[Part] = (),
        equipment: Iterable[EquipmentShape] = (),
        ships: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self.parts: List[Part] = list(parts)
        self._by_id: Dict[str, Part] = {p.id: p for p in self.parts}
        self._bases: Dict[str, List[Part]] = {}
        for p in self.parts:
            self._bases.setdefault(p.base_id, []).append(p)
        for variants in self._bases.values():
            variants.sort(key=lambda p: p.tier or 0)

        self._equipment: Dict[Tuple[str, str], List[EquipmentShape]] = {}
        self._equipment_names: Dict[Tuple[str, str], str] = {}
        for eq in equipment:
            self._equipment.setdefault((eq.kind, eq.base_id), []).append(eq)
            self._equipment_names.setdefault((eq.kind, eq.base_id), eq.name)
        for variants in self._equipment.values():
            variants.sort(key=lambda e: e.tier)

        # ship id -> {"name": str, "tiers": [(tier, {PartType: count}), ...]}
        self._ships: Dict[str, Dict[str, Any]] = dict(ships or {})

    # ---------- loading ----------

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Catalog":
        path = path or CFG.CATALOG_PATH
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        parts: List[Part] = []
        for raw in data.get("parts") or []:
            part = _parse_part(raw)
            if part is not None:
                parts.append(part)

        equipment: List[EquipmentShape] = []
        for kind, key in (("reactor", "reactors"), ("auxiliary", "auxiliaries")):
            for raw in data.get(key) or []:
                equipment.extend(_parse_equipment(kind, raw))

        ships: Dict[str, Dict[str, Any]] = {}
        for raw in data.get("ships") or []:
            sid = str(raw.get("id") or "")
            if not sid:
                logger.warning("Skipping ship without id: %r", raw)
                continue
            tiers: List[Tuple[int, Dict[PartType, int]]] = []
            for t in raw.get("tiers") or []:
                tier = _to_int(t.get("tier"))
                if tier is None:
                    logger.warning("Skipping tier without number on ship %s", sid)
                    continue
                tiers.append((tier, slot_counts(t.get("slots") or {})))
            ships[sid] = {"name": str(raw.get("name") or sid), "tiers": tiers}

        return cls(parts, equipment, ships)

    # ---------- parts ----------

    def get_part_by_id(self, part_id: str) -> Optional[Part]:
        return self._by_id.get(part_id)

    def get_ship_key_by_part_type(self, part_type: Any) -> Optional[str]:
        if isinstance(part_type, PartType):
            return part_type.ship_key
        resolved = PartType.from_label(str(part_type))
        return resolved.ship_key if resolved else None

    def parts_by_type(self) -> Dict[PartType, List[Part]]:
        out: Dict[PartType, List[Part]] = {}
        for p in self.parts:
            out.setdefault(p.type, []).append(p)
        return out

    def part_bases_by_type(self) -> Dict[PartType, List[Dict[str, str]]]:
        """One UI entry per base id, with any trailing " Tn" dropped from the name."""
        out: Dict[PartType, List[Dict[str, str]]] = {}
        for p in self.parts:
            bucket = out.setdefault(p.type, [])
            if any(b["id"] == p.base_id for b in bucket):
                continue
            bucket.append({"id": p.base_id, "name": _TIER_NAME_RE.sub("", p.name), "type": p.type.label})
        return out

    def tiers_for_base(self, base_id: str) -> Optional[List[int]]:
        tiers = [p.tier for p in self._bases.get(base_id, []) if p.tier is not None]
        return tiers or None

    def get_concrete_part(self, base_id: str, tier: Optional[int] = None) -> Optional[Part]:
        variants = self._bases.get(base_id) or []
        if not variants:
            return None
        if tier is None:
            return variants[0]
        for p in variants:
            if p.tier == tier:
                return p
        return variants[0]

    # ---------- equipment ----------

    def equipment_ids(self, kind: str) -> List[str]:
        return [base for (k, base) in self._equipment if k == kind]

    def equipment_name(self, kind: str, base_id: str) -> Optional[str]:
        return self._equipment_names.get((kind, base_id))

    def equipment_tiers(self, kind: str, base_id: str) -> List[int]:
        return [e.tier for e in self._equipment.get((kind, base_id), [])]

    def get_equipment(self, kind: str, base_id: Optional[str], tier: Optional[int] = None) -> Optional[EquipmentShape]:
        if not base_id:
            return None
        variants = self._equipment.get((kind, base_id)) or []
        if not variants:
            return None
        if tier is None:
            return variants[0]
        for e in variants:
            if e.tier == tier:
                return e
        return None

    # ---------- ships ----------

    def ship_ids(self) -> List[str]:
        return list(self._ships)

    def ship_name(self, ship_id: str) -> Optional[str]:
        entry = self._ships.get(ship_id)
        return entry["name"] if entry else None

    def ship_tiers(self, ship_id: str) -> List[int]:
        entry = self._ships.get(ship_id)
        if not entry:
            return []
        return [tier for tier, _ in entry["tiers"]]

    def resolve_ship(self, ship_id: str, tier: int) -> Optional[ShipConfiguration]:
        entry = self._ships.get(ship_id)
        if not entry:
            return None
        for t, slots in entry["tiers"]:
            if t == tier:
                return ShipConfiguration(ship_id=ship_id, name=entry["name"], tier=t, slots=dict(slots))
        return None


def _parse_part(raw: Dict[str, Any]) -> Optional[Part]:
    pid = str(raw.get("id") or "")
    part_type = PartType.from_label(str(raw.get("type") or ""))
    rows = _rows(raw.get("shape"))
    if not pid or part_type is None or rows is None:
        logger.warning("Skipping malformed part entry: %r", raw)
        return None
    shape = shape_from_pattern(rows)
    if not shape:
        logger.warning("Skipping part %s with empty shape", pid)
        return None
    return Part(
        id=pid,
        name=str(raw.get("name") or pid),
        type=part_type,
        shape=shape,
        base_id=str(raw.get("base_id") or pid),
        tier=_to_int(raw.get("tier")),
    )


def _parse_equipment(kind: str, raw: Dict[str, Any]) -> List[EquipmentShape]:
    base_id = str(raw.get("id") or "")
    if not base_id:
        logger.warning("Skipping %s without id: %r", kind, raw)
        return []
    name = str(raw.get("name") or base_id)
    out: List[EquipmentShape] = []
    for t in raw.get("tiers") or []:
        tier = _to_int(t.get("tier"))
        rows = _rows(t.get("shape"))
        if tier is None or rows is None:
            logger.warning("Skipping malformed tier on %s %s", kind, base_id)
            continue
        out.append(
            EquipmentShape(
                id=f"{base_id}@{tier}",
                name=name,
                kind=kind,
                tier=tier,
                pattern=rows,
                base_id=base_id,
            )
        )
    return out


__all__ = ["Catalog", "EQUIPMENT_KINDS"]

# app.py - JSON API over one in-process configurator session
from __future__ import annotations

import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, jsonify, request

from catalog import EQUIPMENT_KINDS, Catalog
from config import CFG
from grid_manager import GridManager
from models import Part, Placeable, PlacedPart, Placement, PartType, SlotKey
from progress import as_json as progress_json
from render import board_svg
from selection import Selection
from session_codec import apply_state, build_state, decode_state, encode_state
from solver.orchestrator import solve as solve_orchestrator

SESSION_LOCK = threading.Lock()


def _new_manager(catalog: Optional[Catalog] = None) -> GridManager:
    manager = GridManager(catalog or Catalog.load(CFG.CATALOG_PATH), Selection())
    manager.rebuild_board()
    return manager


SESSION: Dict[str, Any] = {"manager": None, "last_drag": None}

app = Flask(__name__)


def get_manager() -> GridManager:
    if SESSION["manager"] is None:
        SESSION["manager"] = _new_manager()
        SESSION["manager"].add_drag_listener(_remember_drag)
    return SESSION["manager"]


def set_manager(manager: GridManager) -> None:
    manager.add_drag_listener(_remember_drag)
    SESSION["manager"] = manager
    SESSION["last_drag"] = None


def _remember_drag(placeable: Placeable) -> None:
    SESSION["last_drag"] = _placeable_json(placeable)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


# ---------- serialisation ----------

def _slot_json(slot: SlotKey) -> Dict[str, Any]:
    return {"type": slot.part_type.label, "idx": slot.idx, "key": str(slot)}


def _placeable_json(p: Placeable) -> Dict[str, Any]:
    return {"id": p.part.id, "idx": p.idx, "name": p.part.name, "slot": _slot_json(p.slot)}


def _placed_json(p: PlacedPart) -> Dict[str, Any]:
    return {"slot": _slot_json(p.slot), "partId": p.part_id, "name": p.name, "cells": [list(c) for c in p.cells]}


def _placement_json(p: Placement) -> Dict[str, Any]:
    return {
        "id": p.part.id,
        "idx": p.placeable.idx,
        "x": p.origin[0],
        "y": p.origin[1],
        "rotation": p.rotation,
        "cells": [list(c) for c in p.cells],
    }


def _state_json(manager: GridManager) -> Dict[str, Any]:
    return {
        "selection": manager.selection.as_dict(),
        "board": manager.board.rows(),
        "placed": [_placed_json(p) for p in manager.placed],
        "placeables": [_placeable_json(p) for p in manager.placeables],
        "session": encode_state(build_state(manager)),
    }


def _bad_request(message: str):
    return jsonify({"error": message}), 400


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_field(data: Dict[str, Any], key: str, default: Optional[int] = None) -> Optional[int]:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _slot_from_payload(data: Dict[str, Any]) -> Tuple[Optional[SlotKey], Optional[str]]:
    part_type = PartType.from_label(str(data.get("type") or ""))
    idx = _int_field(data, "idx")
    if part_type is None or idx is None:
        return None, "slot needs a known 'type' and an integer 'idx'"
    return SlotKey(part_type, idx), None


# ---------- routes ----------

@app.route("/api/state")
def state():
    with SESSION_LOCK:
        return jsonify(_state_json(get_manager()))


@app.route("/api/selection", methods=["POST"])
def selection():
    data = _payload()
    with SESSION_LOCK:
        manager = get_manager()
        sel, catalog = manager.selection, manager.catalog
        if "ship" in data:
            ship = str(data["ship"])
            if ship not in catalog.ship_ids():
                return _bad_request(f"unknown ship: {ship}")
            sel.set_ship(ship, catalog)
        setters = (
            ("ship_tier", sel.set_ship_tier),
            ("reactor_tier", sel.set_reactor_tier),
            ("aux1_tier", sel.set_aux1_tier),
            ("aux2_tier", sel.set_aux2_tier),
        )
        for key, setter in setters:
            if key in data:
                value = _int_field(data, key)
                if value is None:
                    return _bad_request(f"'{key}' must be an integer")
                setter(value)
        for key, setter in (("reactor", sel.set_reactor), ("aux1", sel.set_aux1), ("aux2", sel.set_aux2)):
            if key in data:
                setter(str(data[key] or ""))
        report = manager.rebuild_board()
        out = _state_json(manager)
        out["reconcile"] = {
            "dropped": [_slot_json(s) for s in report.dropped_slots],
            "returned": [_placeable_json(p) for p in report.returned],
            "pruned": [_placeable_json(p) for p in report.pruned],
        }
        return jsonify(out)


@app.route("/api/catalog")
def catalog_listing():
    with SESSION_LOCK:
        cat = get_manager().catalog
    ships = [{"id": s, "name": cat.ship_name(s), "tiers": cat.ship_tiers(s)} for s in cat.ship_ids()]
    equipment = {
        kind: [
            {"id": e, "name": cat.equipment_name(kind, e), "tiers": cat.equipment_tiers(kind, e)}
            for e in cat.equipment_ids(kind)
        ]
        for kind in EQUIPMENT_KINDS
    }
    concrete = cat.parts_by_type()
    parts = {}
    for part_type, bases in cat.part_bases_by_type().items():
        parts[part_type.label] = {
            "bases": [dict(b, tiers=cat.tiers_for_base(b["id"])) for b in bases],
            "parts": [{"id": p.id, "name": p.name, "base_id": p.base_id, "tier": p.tier} for p in concrete[part_type]],
        }
    return jsonify({"ships": ships, "equipment": equipment, "parts": parts})


def _part_from_payload(cat: Catalog, data: Dict[str, Any]) -> Tuple[Optional[Part], Optional[str]]:
    if "base_id" in data:
        tier = None
        if data.get("tier") is not None:
            tier = _int_field(data, "tier")
            if tier is None:
                return None, "'tier' must be an integer"
        part = cat.get_concrete_part(str(data.get("base_id") or ""), tier)
        if part is None:
            return None, "unknown part base"
        return part, None
    part = cat.get_part_by_id(str(data.get("id") or ""))
    if part is None:
        return None, "unknown part id"
    return part, None


@app.route("/api/placeables", methods=["POST"])
def add_placeable():
    data = _payload()
    idx = _int_field(data, "idx")
    if idx is None or idx < 0:
        return _bad_request("'idx' must be a non-negative integer")
    with SESSION_LOCK:
        manager = get_manager()
        part, err = _part_from_payload(manager.catalog, data)
        if part is None:
            return _bad_request(err)
        ship = manager.selection.ship_config(manager.catalog)
        if ship is not None and idx >= ship.slot_count(part.type):
            return _bad_request(f"ship has no {part.type.label} slot {idx}")
        added = manager.add_placeable(part, idx)
        return jsonify({"ok": added is not None, **_state_json(manager)})


@app.route("/api/place", methods=["POST"])
def place():
    data = _payload()
    idx = _int_field(data, "idx")
    x, y = _int_field(data, "x"), _int_field(data, "y")
    rotation = _int_field(data, "rotation", 0)
    if None in (idx, x, y, rotation):
        return _bad_request("'idx', 'x', 'y' and 'rotation' must be integers")
    with SESSION_LOCK:
        manager = get_manager()
        target = None
        for pl in manager.placeables:
            if pl.part.id == data.get("id") and pl.idx == idx:
                target = pl
                break
        if target is None:
            return _bad_request("no such placeable in the pool")
        result = manager.try_place(target, (x, y), rotation)
        out = _state_json(manager)
        out["ok"] = result.ok
        if result.slot is not None:
            out["slot"] = _slot_json(result.slot)
        return jsonify(out)


@app.route("/api/move", methods=["POST"])
def move():
    slot, err = _slot_from_payload(_payload())
    if slot is None:
        return _bad_request(err)
    with SESSION_LOCK:
        manager = get_manager()
        SESSION["last_drag"] = None
        picked = manager.move_placed(slot)
        out = _state_json(manager)
        out["dragging"] = SESSION["last_drag"] if picked is not None else None
        return jsonify(out)


@app.route("/api/reset", methods=["POST"])
def reset():
    with SESSION_LOCK:
        manager = get_manager()
        manager.reset_board()
        return jsonify(_state_json(manager))


@app.route("/api/solve", methods=["POST"])
def solve():
    data = _payload()
    with SESSION_LOCK:
        manager = get_manager()
        result = solve_orchestrator(
            manager.placeables,
            manager.placed,
            manager.board,
            engine=data.get("engine") or None,
        )
        committed = 0
        if result.success and data.get("apply"):
            committed = manager.commit_solution(result.solution)
        out = _state_json(manager)
        out.update({
            "success": result.success,
            "status": result.status,
            "message": result.message,
            "solution": [_placement_json(p) for p in result.solution],
            "committed": committed,
            "meta": result.meta,
        })
        return jsonify(out)


@app.route("/api/session", methods=["GET", "POST"])
def session():
    with SESSION_LOCK:
        manager = get_manager()
        if request.method == "GET":
            return jsonify({"session": encode_state(build_state(manager))})
        token = str(_payload().get("session") or "")
        decoded = decode_state(token)
        if decoded is None:
            return _bad_request("session token could not be decoded")
        apply_state(manager, decoded)
        return jsonify(_state_json(manager))


@app.route("/board.svg")
def board():
    with SESSION_LOCK:
        manager = get_manager()
        svg, _legend = board_svg(manager.board, manager.placed)
    return Response(svg, mimetype="image/svg+xml")


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)

import pytest

import app as app_module


@pytest.fixture
def client(manager):
    app_module.set_manager(manager)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c
    app_module.SESSION["manager"] = None


def _add(client, part_id, idx):
    return client.post("/api/placeables", json={"id": part_id, "idx": idx})


def test_state_reports_selection_and_board(client):
    data = client.get("/api/state").get_json()
    assert data["selection"]["ship"] == "sloop"
    assert len(data["board"]) == 8
    assert data["placed"] == [] and data["placeables"] == []
    assert data["session"]


def test_add_placeable_validates_input(client):
    assert _add(client, "bar", 0).get_json()["ok"] is True
    assert _add(client, "bar", 0).get_json()["ok"] is False
    assert _add(client, "bar", 3).status_code == 400
    assert _add(client, "ghost", 0).status_code == 400
    assert client.post("/api/placeables", json={"id": "bar", "idx": "x"}).status_code == 400


def test_place_then_move_back_to_pool(client):
    _add(client, "bar", 0)
    resp = client.post("/api/place", json={"id": "bar", "idx": 0, "x": 1, "y": 2, "rotation": 0})
    data = resp.get_json()
    assert data["ok"] is True
    assert data["slot"]["key"] == "Engines_0"
    assert data["placed"][0]["cells"] == [[1, 2], [2, 2], [3, 2]]

    data = client.post("/api/move", json={"type": "Engines", "idx": 0}).get_json()
    assert data["dragging"]["id"] == "bar"
    assert data["placed"] == []
    assert [p["id"] for p in data["placeables"]] == ["bar"]


def test_place_rejects_unknown_pool_entry(client):
    resp = client.post("/api/place", json={"id": "bar", "idx": 0, "x": 0, "y": 0})
    assert resp.status_code == 400


def test_move_needs_known_slot_type(client):
    assert client.post("/api/move", json={"type": "Shields", "idx": 0}).status_code == 400
    data = client.post("/api/move", json={"type": "Engines", "idx": 0}).get_json()
    assert data["dragging"] is None


def test_solve_and_apply(client):
    _add(client, "bar", 0)
    _add(client, "dot", 1)
    data = client.post("/api/solve", json={"apply": True}).get_json()
    assert data["success"] is True
    assert data["status"] == "solved"
    assert data["committed"] == 2
    assert data["placeables"] == []
    assert len(data["placed"]) == 2


def test_solve_with_empty_pool(client):
    data = client.post("/api/solve", json={}).get_json()
    assert data["success"] is False
    assert data["status"] == "empty"


def test_reset_returns_parts(client):
    _add(client, "dot", 0)
    client.post("/api/place", json={"id": "dot", "idx": 0, "x": 4, "y": 4})
    data = client.post("/api/reset").get_json()
    assert data["placed"] == []
    assert [p["id"] for p in data["placeables"]] == ["dot"]


def test_selection_change_rebuilds_board_and_reconciles(client):
    _add(client, "dot", 0)
    client.post("/api/place", json={"id": "dot", "idx": 0, "x": 0, "y": 7})
    data = client.post("/api/selection", json={"reactor": "open_core", "reactor_tier": 1}).get_json()
    assert data["board"][0] == [0] * 8
    assert data["board"][7] == [-1] * 8
    assert [p["id"] for p in data["reconcile"]["returned"]] == ["dot"]
    assert data["selection"]["reactor"] == "open_core"


def test_selection_rejects_bad_values(client):
    assert client.post("/api/selection", json={"ship": "nowhere"}).status_code == 400
    assert client.post("/api/selection", json={"ship_tier": "high"}).status_code == 400


def test_session_round_trip(client):
    client.post("/api/selection", json={"reactor": "open_core"})
    _add(client, "ell", 0)
    token = client.get("/api/session").get_json()["session"]

    client.post("/api/reset")
    client.post("/api/selection", json={"reactor": "none"})
    data = client.post("/api/session", json={"session": token}).get_json()
    assert data["selection"]["reactor"] == "open_core"
    assert [p["id"] for p in data["placeables"]] == ["ell"]

    assert client.post("/api/session", json={"session": "%%%"}).status_code == 400


def test_board_svg(client):
    resp = client.get("/board.svg")
    assert resp.mimetype == "image/svg+xml"
    assert resp.get_data(as_text=True).startswith("<svg")


def test_progress_is_not_cached(client):
    resp = client.get("/progress")
    assert resp.headers["Cache-Control"].startswith("no-store")
    assert "status" in resp.get_json()


def test_catalog_lists_ships_equipment_and_part_bases(client):
    data = client.get("/api/catalog").get_json()
    assert data["ships"][0] == {"id": "sloop", "name": "Sloop", "tiers": [0, 1]}
    assert [e["id"] for e in data["equipment"]["auxiliary"]] == ["wide", "narrow"]
    assert data["equipment"]["auxiliary"][1]["tiers"] == [1, 2]
    sensors = data["parts"]["Sensors"]
    assert [b["id"] for b in sensors["bases"]] == ["ell", "probe"]
    assert sensors["bases"][1] == {"id": "probe", "name": "Probe", "type": "Sensors", "tiers": [1, 2]}
    assert sensors["bases"][0]["tiers"] is None
    assert [p["id"] for p in sensors["parts"]] == ["ell", "probe_t1", "probe_t2"]


def test_add_placeable_by_base_and_tier(client):
    data = client.post("/api/placeables", json={"base_id": "probe", "tier": 2, "idx": 0}).get_json()
    assert [p["id"] for p in data["placeables"]] == ["probe_t2"]
    client.post("/api/reset")
    assert client.post("/api/placeables", json={"base_id": "probe", "tier": "x", "idx": 0}).status_code == 400
    assert client.post("/api/placeables", json={"base_id": "warp", "idx": 0}).status_code == 400


def test_add_placeable_by_base_falls_back_to_lowest_tier(client):
    data = client.post("/api/placeables", json={"base_id": "probe", "tier": 9, "idx": 0}).get_json()
    assert [p["id"] for p in data["placeables"]] == ["probe_t1"]


def test_solve_refuses_pool_with_shared_slot(client):
    _add(client, "dot", 0)
    _add(client, "bar", 0)
    data = client.post("/api/solve", json={"apply": True}).get_json()
    assert data["success"] is False
    assert data["status"] == "conflict"
    assert data["committed"] == 0
    assert data["placed"] == []
    assert [p["id"] for p in data["placeables"]] == ["dot", "bar"]


def test_solve_with_non_string_engine(client):
    _add(client, "dot", 0)
    resp = client.post("/api/solve", json={"engine": 5})
    assert resp.status_code == 200
    assert resp.get_json()["meta"]["engine"] == "backtracking"

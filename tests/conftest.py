import pytest

from catalog import Catalog
from grid_manager import GridManager
from models import Board
from selection import Selection

CATALOG_DATA = {
    "ships": [
        {
            "id": "sloop",
            "name": "Sloop",
            "tiers": [
                {"tier": 0, "slots": {"engine": 3, "sensor": 1}},
                {"tier": 1, "slots": {"engine": 1, "sensor": 1}},
            ],
        },
        {"id": "barge", "name": "Barge", "tiers": [{"tier": 2, "slots": {"engine": 2}}]},
    ],
    "reactors": [
        {
            "id": "open_core",
            "name": "Open Core",
            "tiers": [
                {"tier": 1, "shape": ["UUUUUUUU", "UUUUUUUU", "UUUUUUUU", "UUUUUUUU"]},
                {"tier": 2, "shape": ["UUUUUUUU", "PPPPPPPP"]},
            ],
        }
    ],
    "auxiliaries": [
        {"id": "wide", "name": "Wide", "tiers": [{"tier": 1, "shape": ["UUUUUUUU", "UUUUUUUU"]}]},
        {"id": "narrow", "name": "Narrow", "tiers": [{"tier": 1, "shape": ["UU......"]}, {"tier": 2, "shape": ["UUUU...."]}]},
    ],
    "parts": [
        {"id": "dot", "name": "Dot Engine", "type": "Engines", "shape": ["X"]},
        {"id": "bar", "name": "Bar Engine", "type": "Engines", "shape": ["XXX"]},
        {"id": "ell", "name": "Ell Sensor", "type": "Sensors", "shape": ["X.", "XX"]},
        {"id": "probe_t1", "base_id": "probe", "tier": 1, "name": "Probe T1", "type": "Sensors", "shape": ["X"]},
        {"id": "probe_t2", "base_id": "probe", "tier": 2, "name": "Probe T2", "type": "Sensors", "shape": ["XX"]},
    ],
}


@pytest.fixture
def catalog():
    return Catalog.from_dict(CATALOG_DATA)


@pytest.fixture
def selection():
    return Selection(ship_id="sloop", ship_tier=0)


@pytest.fixture
def manager(catalog, selection):
    return GridManager(catalog, selection, board=Board.usable())

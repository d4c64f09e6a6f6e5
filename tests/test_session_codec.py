from grid_manager import GridManager
from models import PartType, SlotKey
from selection import NONE_ID, Selection
from session_codec import apply_state, build_state, decode_state, encode_state


def _pool(manager, part_id, idx):
    return manager.add_placeable(manager.catalog.get_part_by_id(part_id), idx)


def _open_core(manager):
    manager.selection.set_reactor("open_core")
    manager.selection.set_reactor_tier(1)
    manager.rebuild_board()


def test_session_restores_selection_and_parts(manager, catalog):
    _open_core(manager)
    assert manager.try_place(_pool(manager, "bar", 0), (0, 0), 0).ok
    _pool(manager, "dot", 1)
    _pool(manager, "ell", 0)
    token = encode_state(build_state(manager))

    restored = GridManager(catalog, Selection())
    assert apply_state(restored, decode_state(token))

    assert build_state(restored) == build_state(manager)
    assert restored.board == manager.board
    assert restored.placed[0].slot == SlotKey(PartType.ENGINE, 0)


def test_token_is_url_safe_and_accepts_hash_prefix(manager):
    token = encode_state(build_state(manager))
    assert "=" not in token and "+" not in token and "/" not in token
    assert decode_state("#s=" + token) == decode_state(token)


def test_garbage_tokens_decode_to_none():
    assert decode_state("") is None
    assert decode_state("!!!") is None
    assert decode_state("ünïcode") is None
    assert decode_state(encode_state([1, 2, 3])) is None


def test_unknown_ids_are_skipped(manager):
    state = {
        "ship": "nowhere",
        "r": "bogus",
        "pl": [{"id": "ghost", "idx": 0}, {"id": "dot", "idx": 1}, "junk"],
        "pd": [{"partId": "ghost", "idx": 0, "cells": [[0, 0]]}],
    }
    assert apply_state(manager, state)
    assert manager.selection.ship_id == "sloop"
    assert manager.selection.reactor_id == NONE_ID
    assert [pl.key for pl in manager.placeables] == [("dot", 1)]
    assert manager.placed == []


def test_duplicate_slots_keep_the_first(manager):
    state = {
        "ship": "sloop",
        "st": 0,
        "r": "open_core",
        "rt": 1,
        "pd": [
            {"partId": "dot", "idx": 0, "cells": [[0, 0]]},
            {"partId": "bar", "idx": 0, "cells": [[0, 1], [1, 1], [2, 1]]},
            {"partId": "ell", "idx": 0, "cells": [[5, 0], "x"]},
        ],
    }
    apply_state(manager, state)
    assert [(p.part_id, p.cells) for p in manager.placed] == [("dot", ((0, 0),))]


def test_placed_parts_that_no_longer_fit_return_to_pool(manager):
    state = {"ship": "sloop", "st": 0, "pd": [{"partId": "dot", "idx": 2, "cells": [[3, 3]]}]}
    apply_state(manager, state)
    assert manager.placed == []
    assert [pl.key for pl in manager.placeables] == [("dot", 2)]


def test_empty_state_is_ignored(manager):
    assert not apply_state(manager, None)
    assert not apply_state(manager, {})


def test_negative_slot_indices_are_skipped(manager):
    state = {
        "ship": "sloop",
        "st": 0,
        "r": "open_core",
        "pl": [{"id": "dot", "idx": -1}, {"id": "dot", "idx": 1}],
        "pd": [{"partId": "bar", "idx": -1, "cells": [[0, 0], [1, 0], [2, 0]]}],
    }
    apply_state(manager, state)
    assert [pl.key for pl in manager.placeables] == [("dot", 1)]
    assert manager.placed == []

import random

from models import Board, Placeable, PartType, SlotKey

ENGINE_0 = SlotKey(PartType.ENGINE, 0)


def _pool(manager, part_id, idx):
    return manager.add_placeable(manager.catalog.get_part_by_id(part_id), idx)


def _assert_disjoint(manager):
    seen = set()
    for p in manager.placed:
        for c in p.cells:
            assert c not in seen
            seen.add(c)


def test_try_place_moves_placeable_to_placed(manager):
    bar = _pool(manager, "bar", 0)
    result = manager.try_place(bar, (2, 3), 0)
    assert result.ok
    assert result.slot == ENGINE_0
    assert manager.placeables == []
    [placed] = manager.placed
    assert placed.id == ENGINE_0
    assert placed.part_id == "bar"
    assert placed.cells == ((2, 3), (3, 3), (4, 3))


def test_try_place_overlap_leaves_state_unchanged(manager):
    bar = _pool(manager, "bar", 0)
    assert manager.try_place(bar, (0, 0), 0).ok
    ell = _pool(manager, "ell", 0)
    placed_before = list(manager.placed)
    pool_before = list(manager.placeables)

    result = manager.try_place(ell, (1, 0), 0)

    assert not result.ok
    assert result.slot is None
    assert manager.placed == placed_before
    assert manager.placeables == pool_before


def test_try_place_rejects_blocked_and_out_of_bounds(catalog, selection):
    from grid_manager import GridManager

    manager = GridManager(catalog, selection, board=Board.with_usable_cells([(0, 0), (1, 0)]))
    bar = _pool(manager, "bar", 0)
    assert not manager.try_place(bar, (0, 0), 0).ok
    assert not manager.try_place(bar, (7, 7), 0).ok
    assert manager.placed == []
    assert manager.placeables == [bar]


def test_slot_identity_is_unique_across_part_variants(manager):
    dot = _pool(manager, "dot", 0)
    bar = _pool(manager, "bar", 0)
    assert manager.try_place(dot, (0, 0), 0).ok
    assert not manager.try_place(bar, (0, 5), 0).ok
    assert manager.placeables == [bar]


def test_add_placeable_enforces_part_and_index_uniqueness(manager):
    assert _pool(manager, "dot", 1) is not None
    assert _pool(manager, "dot", 1) is None
    assert _pool(manager, "dot", 2) is not None
    assert len(manager.placeables) == 2


def test_move_placed_returns_part_and_notifies(manager):
    seen = []
    manager.add_drag_listener(seen.append)
    bar = _pool(manager, "bar", 0)
    manager.try_place(bar, (1, 1), 3)

    picked = manager.move_placed(ENGINE_0)

    assert picked == Placeable(bar.part, 0)
    assert seen == [picked]
    assert manager.placed == []
    assert manager.placeables == [picked]


def test_move_placed_missing_slot_is_noop(manager):
    seen = []
    manager.add_drag_listener(seen.append)
    assert manager.move_placed(SlotKey(PartType.SENSOR, 0)) is None
    assert seen == []


def test_reset_then_replace_reproduces_cells(manager):
    moves = [("bar", 0, (0, 0), 0), ("dot", 1, (5, 5), 0), ("ell", 0, (3, 3), 2)]
    for part_id, idx, origin, rot in moves:
        assert manager.try_place(_pool(manager, part_id, idx), origin, rot).ok
    before = {p.slot: p.cells for p in manager.placed}

    returned = manager.reset_board()

    assert manager.placed == []
    assert len(returned) == 3
    assert {pl.key for pl in manager.placeables} == {("bar", 0), ("dot", 1), ("ell", 0)}

    for part_id, idx, origin, rot in moves:
        target = next(pl for pl in manager.placeables if pl.key == (part_id, idx))
        assert manager.try_place(target, origin, rot).ok
    assert {p.slot: p.cells for p in manager.placed} == before


def test_random_operations_never_overlap(manager):
    rng = random.Random(1234)
    for part_id, idx in (("bar", 0), ("dot", 1), ("dot", 2), ("ell", 0)):
        _pool(manager, part_id, idx)

    for _ in range(400):
        op = rng.random()
        if op < 0.6 and manager.placeables:
            target = rng.choice(manager.placeables)
            manager.try_place(target, (rng.randrange(-1, 9), rng.randrange(-1, 9)), rng.randrange(4))
        elif op < 0.9 and manager.placed:
            manager.move_placed(rng.choice(manager.placed).slot)
        else:
            manager.reset_board()
        _assert_disjoint(manager)
        keys = [pl.key for pl in manager.placeables]
        assert len(keys) == len(set(keys))
        assert len(keys) + len(manager.placed) == 4


def test_commit_solution_places_everything(manager):
    from solver.backtracking import solve_backtracking

    for part_id, idx in (("bar", 0), ("dot", 1), ("ell", 0)):
        _pool(manager, part_id, idx)
    placements, _ = solve_backtracking(manager.placeables, manager.board, manager.placed)
    assert manager.commit_solution(placements) == 3
    assert manager.placeables == []
    _assert_disjoint(manager)


def test_rebuild_board_applies_selection(manager):
    bar = _pool(manager, "bar", 0)
    assert manager.try_place(bar, (0, 7), 0).ok
    manager.selection.set_reactor("open_core")

    report = manager.rebuild_board()

    assert manager.board.state(0, 0) == 0
    assert manager.board.state(0, 7) == -1
    assert manager.placed == []
    assert [pl.key for pl in report.returned] == [("bar", 0)]
    assert [pl.key for pl in manager.placeables] == [("bar", 0)]

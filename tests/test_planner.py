import pytest

from vox_codei.grid import CELL_NODE, DEVICE_TIMER
from vox_codei.maps import parse_grid
from vox_codei.plan import count_devices, pad_plan, replay
from vox_codei.planner import STRATEGIES, plan_actions


@pytest.mark.parametrize("strategy", sorted(STRATEGIES))
def test_column_board_first_decision(column_board, strategy):
    res = plan_actions(strategy, column_board, 5, 1)
    assert res.strategy == strategy
    assert res.decisions == [(1, 3), None, None, None, None]


@pytest.mark.parametrize("strategy", sorted(STRATEGIES))
def test_plans_fill_round_budget(strategy):
    grid = parse_grid(["@.#.@", ".....", "@.@.@"])
    res = plan_actions(strategy, grid, 15, 4)
    assert len(res.decisions) == 15
    assert res.devices_used == count_devices(res.decisions) <= 4
    final = replay(grid, res.decisions, extra_rounds=DEVICE_TIMER)
    if res.feasible:
        assert final.count(CELL_NODE) == 0


@pytest.mark.parametrize("strategy", sorted(STRATEGIES))
def test_planning_does_not_mutate_grid(strategy, corridor_board):
    before = corridor_board.render()
    plan_actions(strategy, corridor_board, 10, 2)
    assert corridor_board.render() == before
    assert corridor_board.device_count() == 0


def test_unknown_strategy():
    with pytest.raises(ValueError):
        plan_actions("random", parse_grid([".@"]), 3, 1)


def test_pad_plan():
    assert pad_plan([(1, 1)], 3) == [(1, 1), None, None]
    assert pad_plan([(1, 1), None, (2, 2)], 2) == [(1, 1), None]
    assert pad_plan([], 0) == []


def test_replay_rejects_illegal_placement():
    grid = parse_grid([".@"])
    with pytest.raises(ValueError):
        replay(grid, [(1, 0)])

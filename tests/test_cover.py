import pytest

from vox_codei.algorithms.cover import (
    plan_set_cover,
    replay_schedule,
    schedule_cover,
    select_cover,
)
from vox_codei.candidates import generate_candidates
from vox_codei.grid import CELL_NODE, DEVICE_TIMER
from vox_codei.maps import generate_board, parse_grid
from vox_codei.plan import replay

BOARDS = [
    ["@...@", ".#.#.", "@...@"],
    ["@@.@@", "@...@", ".@@@."],
    ["..@..", ".@@@.", "@@#@@", ".@@@.", "..@.."],
    ["@.@.@.@", ".......", "@.#.#.@", "@.....@"],
]


def _masks_by_position(grid):
    return {c.position: c.mask for c in generate_candidates(grid)}


class TestSelectCover:
    def test_picks_largest_gain(self, column_board):
        cover = select_cover(column_board)
        assert cover.positions == [(1, 3)]
        assert cover.coverage_rate == 1.0
        assert cover.prune_iterations == 0

    def test_raw_footprint_breaks_ties(self, corridor_board):
        cover = select_cover(corridor_board)
        assert cover.positions == [(0, 0), (1, 0)]
        assert cover.iterations == 2

    @pytest.mark.parametrize("rows", BOARDS)
    def test_cover_is_complete_and_irredundant(self, rows):
        grid = parse_grid(rows)
        cover = select_cover(grid)
        masks = _masks_by_position(grid)

        union = 0
        for pos in cover.positions:
            union |= masks[pos]
        assert union.bit_count() == grid.count(CELL_NODE)
        assert cover.coverage_rate == 1.0

        for pos in cover.positions:
            others = 0
            for other in cover.positions:
                if other != pos:
                    others |= masks[other]
            assert masks[pos] & ~others, pos

    def test_redundant_choice_is_removed(self):
        # 第一轮选中 (4, 0)，之后 (1, 0) 与 (7, 0) 覆盖了它的全部节点
        grid = parse_grid([
            "..@@.@@..",
            ".@..#..@.",
        ])
        cover = select_cover(grid)
        assert cover.positions == [(1, 0), (7, 0)]
        assert cover.iterations == 3
        assert cover.prune_iterations == 1
        assert cover.coverage_rate == 1.0

    def test_uncoverable_nodes_are_reported(self):
        grid = parse_grid(["#@#", "###", ".@."])
        cover = select_cover(grid)
        assert cover.uncoverable == [(1, 0)]
        assert cover.positions == [(0, 2)]
        assert cover.coverage_rate == pytest.approx(0.5)


class TestSchedule:
    def test_levels_and_depths(self, corridor_board):
        schedule = schedule_cover(corridor_board, [(0, 0), (1, 0)])
        assert schedule.level == {(0, 0): 0, (1, 0): 1}
        assert schedule.clearer == {(1, 0): (0, 0)}
        assert schedule.depth == {(0, 0): 1, (1, 0): 0}
        assert schedule.order == [(0, 0), (1, 0)]
        assert schedule.blocked == []

    def test_longest_chain_goes_first(self):
        grid = parse_grid(["....@", ".@@@."])
        # (0, 1) 清出 (1, 1)，依赖链最长，排在无依赖的 (0, 0) 之前
        schedule = schedule_cover(grid, [(0, 0), (0, 1), (1, 1)])
        assert schedule.level == {(0, 0): 0, (0, 1): 0, (1, 1): 1}
        assert schedule.clearer == {(1, 1): (0, 1)}
        assert schedule.depth == {(0, 0): 0, (0, 1): 1, (1, 1): 0}
        assert schedule.order == [(0, 1), (0, 0), (1, 1)]

    def test_never_empty_positions_are_blocked(self):
        grid = parse_grid(["@@@@@@@."])
        cover = select_cover(grid)
        assert cover.positions == [(3, 0), (2, 0)]

        schedule = schedule_cover(grid, cover.positions)
        assert schedule.order == []
        assert sorted(schedule.blocked) == [(2, 0), (3, 0)]

    def test_replay_waits_for_real_detonation(self, corridor_board):
        decisions = replay_schedule(corridor_board, [(0, 0), (1, 0)], 10, 2)
        assert decisions == [(0, 0), None, None, None, (1, 0)] + [None] * 5


class TestPlanSetCover:
    def test_column_board(self, column_board):
        res = plan_set_cover(column_board, 5, 1)
        assert res.decisions == [(1, 3), None, None, None, None]
        assert res.feasible

    def test_corridor_board_clears(self, corridor_board):
        res = plan_set_cover(corridor_board, 10, 2)
        assert res.feasible
        assert res.devices_used == 2
        assert replay(corridor_board, res.decisions).count(CELL_NODE) == 0

    def test_device_budget_limits_placements(self, corridor_board):
        res = plan_set_cover(corridor_board, 10, 1)
        assert res.decisions == [(0, 0)] + [None] * 9
        assert not res.feasible

    def test_round_budget_limits_placements(self, corridor_board):
        res = plan_set_cover(corridor_board, 3, 2)
        assert res.decisions == [(0, 0), None, None]
        assert not res.feasible

    def test_blocked_cover_waits(self):
        res = plan_set_cover(parse_grid(["@@@@@@@."]), 6, 3)
        assert res.decisions == [None] * 6
        assert not res.feasible

    @pytest.mark.parametrize("rows", BOARDS)
    def test_schedule_replays_legally(self, rows):
        grid = parse_grid(rows)
        res = plan_set_cover(grid, 40, 20)
        # replay 在非空格上放置会抛出 ValueError
        final = replay(grid, res.decisions, extra_rounds=DEVICE_TIMER)
        if res.feasible:
            assert final.count(CELL_NODE) == 0

    @pytest.mark.parametrize("layout", ["scatter", "walls", "clusters"])
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_generated_boards_replay_legally(self, layout, seed):
        grid, info = generate_board(layout, "medium", seed)
        res = plan_set_cover(grid, info.rounds, info.devices)
        assert len(res.decisions) == info.rounds
        replay(grid, res.decisions)

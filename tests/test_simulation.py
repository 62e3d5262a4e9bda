import pytest

from vox_codei.grid import CELL_NODE, DEVICE_TIMER, Grid
from vox_codei.maps import parse_grid
from vox_codei.simulation import BLAST_RANGE, blast_coords, enumerate_blast, tick


class TestBlast:
    def test_open_board_order(self, open_board):
        assert blast_coords(open_board, 3, 3) == [
            (3, 4), (3, 5), (3, 6),   # 下
            (3, 2), (3, 1), (3, 0),   # 上
            (4, 3), (5, 3), (6, 3),   # 右
            (2, 3), (1, 3), (0, 3),   # 左
        ]

    def test_origin_never_included(self, open_board):
        for x in range(open_board.width):
            for y in range(open_board.height):
                assert (x, y) not in blast_coords(open_board, x, y)

    def test_corner_is_clipped_by_bounds(self):
        grid = Grid.empty(5, 5)
        assert sorted(blast_coords(grid, 0, 0)) == [
            (0, 1), (0, 2), (0, 3), (1, 0), (2, 0), (3, 0),
        ]

    @pytest.mark.parametrize("distance", [1, 2, 3])
    def test_passive_stops_ray(self, open_board, distance):
        open_board.put_passive(3, 3 + distance)
        coords = blast_coords(open_board, 3, 3)
        down = [(x, y) for x, y in coords if x == 3 and y > 3]
        assert all(y - 3 < distance for _, y in down)
        assert len(down) == distance - 1
        # 其他方向不受影响
        assert len(coords) == 3 * BLAST_RANGE + distance - 1

    def test_blast_reports_contents_and_passes_through_nodes(self):
        grid = parse_grid([".@@@"])
        assert enumerate_blast(grid, 0, 0) == [
            ((1, 0), CELL_NODE),
            ((2, 0), CELL_NODE),
            ((3, 0), CELL_NODE),
        ]


class TestTick:
    def test_device_detonates_after_timer(self):
        grid = parse_grid([".@.."])
        grid.put_device(0, 0)
        cleared = []

        for _ in range(DEVICE_TIMER - 1):
            assert tick(grid, lambda x, y: cleared.append((x, y))) == []
        assert grid.devices[0].timer == 1
        assert grid.count(CELL_NODE) == 1

        assert tick(grid, lambda x, y: cleared.append((x, y))) == [(0, 0)]
        assert cleared == [(1, 0)]
        assert grid.device_count() == 0
        assert grid.render() == ["...."]

    def test_chain_reaction_ignores_remaining_timer(self):
        grid = parse_grid(["......@"])
        grid.put_device(0, 0)
        tick(grid)
        grid.put_device(3, 0)
        tick(grid)
        tick(grid)
        assert [d.timer for d in grid.devices] == [1, 2]

        detonated = tick(grid)

        assert detonated == [(0, 0), (3, 0)]
        assert grid.device_count() == 0
        assert grid.render() == ["......."]

    def test_device_detonates_once(self):
        grid = Grid.empty(5, 1)
        for x in range(3):
            grid.put_device(x, 0)
        for _ in range(DEVICE_TIMER - 1):
            tick(grid)

        detonated = tick(grid)

        assert sorted(detonated) == [(0, 0), (1, 0), (2, 0)]
        assert len(set(detonated)) == len(detonated)
        assert grid.device_count() == 0

    def test_passive_shields_other_device(self):
        grid = parse_grid(["..#.."])
        grid.put_device(1, 0)
        tick(grid)
        grid.put_device(3, 0)
        for _ in range(DEVICE_TIMER - 1):
            tick(grid)

        assert grid.device_count() == 1
        assert grid.device_at(3, 0).timer == 1

    def test_tick_is_deterministic(self):
        grid = parse_grid(["@.@.", ".@..", "...@"])
        grid.put_device(1, 0)
        tick(grid)
        grid.put_device(3, 1)

        first, second = grid.clone(), grid.clone()
        for _ in range(DEVICE_TIMER):
            assert tick(first) == tick(second)
            assert first.render() == second.render()
            assert first.devices == second.devices

    def test_no_observer_is_allowed(self):
        grid = parse_grid([".@"])
        grid.put_device(0, 0)
        for _ in range(DEVICE_TIMER):
            tick(grid)
        assert grid.count(CELL_NODE) == 0

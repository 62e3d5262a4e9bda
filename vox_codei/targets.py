from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np

from .grid import Coord, Grid


@dataclass
class TargetSet:
    """需要摧毁的节点集合。

    attrs
    ------
    coords: List[(x, y)]，按索引顺序存储所有节点坐标（行优先）。
    index_map: np.ndarray[int32]，shape 与 grid.cells 相同，节点格为其索引，否则为 -1。
    """

    coords: List[Coord]
    index_map: np.ndarray

    @property
    def size(self) -> int:
        return len(self.coords)

    @property
    def full_mask(self) -> int:
        return (1 << self.size) - 1

    def mask_of(self, coords: Iterable[Coord]) -> int:
        """将坐标集合转换为位图，非节点坐标被忽略。"""

        mask = 0
        for x, y in coords:
            idx = int(self.index_map[x, y])
            if idx >= 0:
                mask |= 1 << idx
        return mask

    def coords_of(self, mask: int) -> List[Coord]:
        result: List[Coord] = []
        m = mask
        while m:
            lsb = m & -m
            result.append(self.coords[lsb.bit_length() - 1])
            m ^= lsb
        return result


def build_target_set(grid: Grid) -> TargetSet:
    """以棋盘上当前所有节点构造 TargetSet。"""

    index_map = np.full(grid.cells.shape, -1, dtype=np.int32)
    coords = grid.node_coords()
    for idx, (x, y) in enumerate(coords):
        index_map[x, y] = idx
    return TargetSet(coords=coords, index_map=index_map)

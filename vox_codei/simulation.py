from __future__ import annotations

from collections import deque
from typing import Callable, List, Optional, Tuple

from .grid import CELL_DEVICE, CELL_NODE, CELL_PASSIVE, Coord, Device, Grid

# 爆炸射线方向 (dx, dy)，顺序固定为 下、上、右、左，保证遍历结果可复现
BLAST_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
)

# 每条射线的最大长度
BLAST_RANGE = 3

NodeCleared = Callable[[int, int], None]


def enumerate_blast(grid: Grid, x: int, y: int) -> List[Tuple[Coord, int]]:
    """枚举从 (x, y) 引爆时波及的格子及其当前内容。

    传播规则：
    - 四个方向各发出一条长度不超过 BLAST_RANGE 的射线；
    - 越界或遇到障碍时立即停止，障碍格本身不计入；
    - 起点格本身不计入。
    """

    affected: List[Tuple[Coord, int]] = []
    for dx, dy in BLAST_DIRECTIONS:
        for dist in range(1, BLAST_RANGE + 1):
            bx, by = x + dx * dist, y + dy * dist
            if not grid.in_bounds(bx, by):
                break
            contents = grid.cell(bx, by)
            if contents == CELL_PASSIVE:
                break
            affected.append(((bx, by), contents))
    return affected


def blast_coords(grid: Grid, x: int, y: int) -> List[Coord]:
    return [coord for coord, _ in enumerate_blast(grid, x, y)]


def tick(grid: Grid, on_node_cleared: Optional[NodeCleared] = None) -> List[Coord]:
    """推进一回合：所有炸弹计时减 1，并处理到时引爆及连锁引爆。

    引爆队列按先进先出处理；被波及的炸弹无论剩余计时都会加入队列，
    同一枚炸弹在一次 tick 中最多引爆一次。被清除的节点通过
    on_node_cleared(x, y) 回调通知。

    返回本回合引爆的炸弹位置，按引爆顺序排列。
    """

    triggered: deque[Device] = deque()
    queued: set[Coord] = set()
    for device in grid.devices:
        device.timer -= 1
        if device.timer <= 0:
            triggered.append(device)
            queued.add(device.position)

    detonated: List[Coord] = []
    while triggered:
        device = triggered.popleft()
        for (bx, by), contents in enumerate_blast(grid, device.x, device.y):
            if contents == CELL_DEVICE:
                # 连锁引爆
                if (bx, by) not in queued:
                    chained = grid.device_at(bx, by)
                    if chained is not None:
                        triggered.append(chained)
                        queued.add((bx, by))
            elif contents == CELL_NODE:
                grid.clear(bx, by)
                if on_node_cleared is not None:
                    on_node_cleared(bx, by)
        grid.remove_device(device)
        detonated.append(device.position)

    return detonated

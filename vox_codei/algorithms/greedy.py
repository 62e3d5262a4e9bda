from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Optional

import numpy as np

from ..grid import CELL_EMPTY, CELL_NODE, Coord, Grid
from ..plan import Decision, PlanResult, check_budget, count_devices
from ..simulation import blast_coords, tick

logger = logging.getLogger(__name__)


def plan_greedy(grid: Grid, rounds: int, devices: int) -> PlanResult:
    """逐回合贪心：每回合选取能摧毁最多未认领节点的空格放置炸弹。

    - 工作棋盘为 grid 的副本，每回合先推进一回合再决策；
    - claimed 记录已被之前选中的炸弹覆盖的节点，后续评分不再重复计入；
    - 最高分为 0 时等待，不放置无效炸弹；
    - 同分时取行优先扫描中第一个出现的格子。

    单遍、无回溯，即使存在可行解也可能失败。
    """

    check_budget(rounds, devices)
    start = perf_counter()

    board = grid.clone()
    claimed = np.zeros(board.cells.shape, dtype=bool)
    remaining = devices
    decisions: List[Decision] = []

    for _ in range(rounds):
        tick(board)

        if remaining <= 0:
            decisions.append(None)
            continue

        best_score = 0
        best_pos: Optional[Coord] = None
        for y in range(board.height):
            for x in range(board.width):
                if board.cells[x, y] != CELL_EMPTY:
                    continue
                score = 0
                for bx, by in blast_coords(board, x, y):
                    if board.cells[bx, by] == CELL_NODE and not claimed[bx, by]:
                        score += 1
                if score > best_score:
                    best_score = score
                    best_pos = (x, y)

        if best_pos is None:
            decisions.append(None)
            continue

        for bx, by in blast_coords(board, *best_pos):
            if board.cells[bx, by] == CELL_NODE:
                claimed[bx, by] = True
        board.put_device(*best_pos)
        remaining -= 1
        decisions.append(best_pos)
        logger.debug("greedy: 放置 %s，新增摧毁 %d 个节点", best_pos, best_score)

    # 仍在场的节点中存在未被认领的，说明贪心无法覆盖全部节点
    unclaimed = int(np.count_nonzero((board.cells == CELL_NODE) & ~claimed))
    runtime_ms = (perf_counter() - start) * 1000.0

    return PlanResult(
        strategy="greedy",
        decisions=decisions,
        devices_used=count_devices(decisions),
        feasible=unclaimed == 0,
        runtime_ms=runtime_ms,
    )

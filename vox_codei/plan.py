from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .grid import Coord, Grid
from .simulation import tick

# 每回合的决策：放置坐标，或 None 表示等待
Decision = Optional[Coord]


@dataclass
class PlanResult:
    """一次规划的结果。

    decisions 长度恰好等于规划时的剩余回合数；feasible 表示规划器认为该计划
    能清除全部节点（对贪心算法而言只是其内部估计）。
    """

    strategy: str
    decisions: List[Decision]
    devices_used: int
    feasible: bool
    runtime_ms: float
    nodes_expanded: int = 0


def check_budget(rounds: int, devices: int) -> None:
    if rounds < 0:
        raise ValueError(f"剩余回合数不能为负: {rounds}")
    if devices < 0:
        raise ValueError(f"剩余炸弹数不能为负: {devices}")


def pad_plan(prefix: Sequence[Decision], rounds: int) -> List[Decision]:
    """用等待补齐到 rounds 个决策，超出部分截断。"""

    plan = list(prefix[:rounds])
    plan.extend([None] * (rounds - len(plan)))
    return plan


def count_devices(decisions: Sequence[Decision]) -> int:
    return sum(1 for d in decisions if d is not None)


def replay(grid: Grid, decisions: Sequence[Decision], extra_rounds: int = 0) -> Grid:
    """在棋盘副本上按驱动程序的方式回放计划：每回合先放置，再推进一回合。

    extra_rounds 额外推进若干回合，使尚未到时的炸弹也能引爆。
    非法放置会抛出 ValueError。
    """

    board = grid.clone()
    for decision in decisions:
        if decision is not None:
            board.put_device(*decision)
        tick(board)
    for _ in range(extra_rounds):
        tick(board)
    return board

from __future__ import annotations

from typing import Callable, Dict

from .algorithms.cover import plan_set_cover
from .algorithms.exhaustive import plan_exhaustive
from .algorithms.greedy import plan_greedy
from .grid import Grid
from .plan import PlanResult

PlanFunction = Callable[[Grid, int, int], PlanResult]

# 三种互斥的规划策略
STRATEGIES: Dict[str, PlanFunction] = {
    "greedy": plan_greedy,
    "exhaustive": plan_exhaustive,
    "cover": plan_set_cover,
}


def plan_actions(strategy: str, grid: Grid, rounds: int, devices: int) -> PlanResult:
    """统一入口：给定棋盘与剩余回合数 / 炸弹数，返回完整的逐回合决策。"""

    if strategy not in STRATEGIES:
        raise ValueError(f"未知 strategy: {strategy}")
    return STRATEGIES[strategy](grid, rounds, devices)

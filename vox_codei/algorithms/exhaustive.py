from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Optional

from ..candidates import PotentialPlacement, generate_candidates, simplify_candidates
from ..grid import CELL_EMPTY, CELL_NODE, Coord, Grid
from ..plan import Decision, PlanResult, check_budget, count_devices, pad_plan
from ..simulation import tick

logger = logging.getLogger(__name__)


class SearchTimeout(Exception):
    """搜索超出 time_limit_sec。"""


class ExhaustivePlanner:
    """基于回溯的完整搜索规划器。

    同时维护两张棋盘：
    - simulation：带真实计时的炸弹，用于判断哪些格子当前可放置；
    - result：只用于记账，放置炸弹时立即清除其波及的节点，
      与真实引爆时间无关。

    候选按本步能额外摧毁的节点数降序尝试，这只是搜索顺序上的启发式，
    最坏情况下仍是指数级。"""

    def __init__(
        self,
        grid: Grid,
        rounds: int,
        devices: int,
        time_limit_sec: Optional[float] = None,
    ) -> None:
        check_budget(rounds, devices)
        self.grid = grid
        self.rounds = rounds
        self.devices = devices
        self.time_limit_sec = time_limit_sec

        self.candidates: List[PotentialPlacement] = simplify_candidates(generate_candidates(grid))

        self.start_time: float = 0.0
        self.nodes_expanded: int = 0

    def _check_time(self) -> None:
        if self.time_limit_sec is None:
            return
        if perf_counter() - self.start_time > self.time_limit_sec:
            raise SearchTimeout()

    def _search(
        self,
        simulation: Grid,
        result: Grid,
        rounds: int,
        devices: int,
        after_placement: bool,
    ) -> Optional[List[Decision]]:
        vacated: List[Coord] = []
        tick(simulation, lambda x, y: vacated.append((x, y)))

        if result.count(CELL_NODE) == 0:
            return []

        if devices <= 0 or rounds <= 0:
            return None

        self._check_time()
        self.nodes_expanded += 1

        # 刚放置过炸弹：任意空格候选都可尝试；
        # 刚等待过：只尝试本回合被清空的格子，否则等待没有意义
        if after_placement:
            eligible = [
                c for c in self.candidates if simulation.cells[c.position] == CELL_EMPTY
            ]
        else:
            freed = set(vacated)
            eligible = [c for c in self.candidates if c.position in freed]

        scored = []
        for cand in eligible:
            effect = sum(1 for bx, by in cand.blast if result.cells[bx, by] == CELL_NODE)
            if effect > 0:
                scored.append((effect, cand))
        scored.sort(key=lambda item: item[0], reverse=True)

        for _, cand in scored:
            next_simulation = simulation.clone()
            next_simulation.put_device(*cand.position)
            next_result = result.clone()
            for bx, by in cand.blast:
                if next_result.cells[bx, by] == CELL_NODE:
                    next_result.clear(bx, by)

            plan = self._search(next_simulation, next_result, rounds - 1, devices - 1, True)
            if plan is not None:
                return [cand.position] + plan

        if simulation.device_count() > 0:
            plan = self._search(simulation.clone(), result, rounds - 1, devices, False)
            if plan is not None:
                return [None] + plan

        return None

    def solve(self) -> PlanResult:
        self.start_time = perf_counter()
        self.nodes_expanded = 0

        logger.debug(
            "exhaustive: %d 个候选，%d 回合，%d 枚炸弹",
            len(self.candidates),
            self.rounds,
            self.devices,
        )

        try:
            prefix = self._search(
                self.grid.clone(), self.grid.clone(), self.rounds, self.devices, True
            )
        except SearchTimeout:
            logger.warning("exhaustive: 搜索超时 (%.1f s)，改为全部等待", self.time_limit_sec)
            prefix = None

        runtime_ms = (perf_counter() - self.start_time) * 1000.0

        if prefix is None:
            logger.warning(
                "exhaustive: 未找到可行计划（展开 %d 个节点），改为全部等待",
                self.nodes_expanded,
            )
            decisions = pad_plan([], self.rounds)
        else:
            decisions = pad_plan(prefix, self.rounds)

        return PlanResult(
            strategy="exhaustive",
            decisions=decisions,
            devices_used=count_devices(decisions),
            feasible=prefix is not None,
            runtime_ms=runtime_ms,
            nodes_expanded=self.nodes_expanded,
        )


def plan_exhaustive(
    grid: Grid,
    rounds: int,
    devices: int,
    time_limit_sec: Optional[float] = None,
) -> PlanResult:
    return ExhaustivePlanner(grid, rounds, devices, time_limit_sec).solve()

from __future__ import annotations

import argparse
import logging
import sys
from collections import deque
from typing import Deque, List, Optional, TextIO

from .grid import Grid
from .maps import parse_grid
from .plan import Decision
from .planner import STRATEGIES, plan_actions
from .simulation import tick

logger = logging.getLogger(__name__)

WAIT = "WAIT"


def _read_ints(line: str, count: int) -> List[int]:
    parts = line.split()
    if len(parts) < count:
        raise ValueError(f"需要 {count} 个整数: {line!r}")
    return [int(p) for p in parts[:count]]


def format_decision(decision: Decision) -> str:
    if decision is None:
        return WAIT
    return f"{decision[0]} {decision[1]}"


class Player:
    """回合驱动：读取棋盘与每回合的剩余回合数 / 炸弹数，输出一条决策。

    第一次决策时规划一次完整计划，之后按顺序回放，不再重新规划。
    自身维护一份棋盘，每回合应用决策后推进一回合。
    """

    def __init__(self, reader: TextIO, output: TextIO, strategy: str = "exhaustive") -> None:
        if strategy not in STRATEGIES:
            raise ValueError(f"未知 strategy: {strategy}")
        self.reader = reader
        self.output = output
        self.strategy = strategy
        self.grid: Optional[Grid] = None
        self.plan: Optional[Deque[Decision]] = None

    def init(self) -> Grid:
        width, height = _read_ints(self._read_line(), 2)
        rows = [self._read_line() for _ in range(height)]
        for row in rows:
            logger.debug(row)
        self.grid = parse_grid(rows, width)
        return self.grid

    def _read_line(self) -> str:
        line = self.reader.readline()
        if not line:
            raise EOFError("输入已结束")
        return line.rstrip("\r\n")

    def act(self) -> Decision:
        if self.grid is None:
            raise RuntimeError("必须先调用 init()")

        line = self._read_line()
        logger.debug(line)
        rounds, devices = _read_ints(line, 2)

        if self.plan is None:
            result = plan_actions(self.strategy, self.grid, rounds, devices)
            logger.info(
                "%s: feasible=%s，使用 %d 枚炸弹，耗时 %.1f ms",
                result.strategy,
                result.feasible,
                result.devices_used,
                result.runtime_ms,
            )
            self.plan = deque(result.decisions)

        decision = self.plan.popleft() if self.plan else None
        if decision is not None:
            self.grid.put_device(*decision)
        self.output.write(format_decision(decision) + "\n")
        self.output.flush()

        tick(self.grid)
        for row in self.grid.render():
            logger.debug(row)
        return decision

    def run(self) -> int:
        """处理整局输入直到结束，返回已执行的回合数。"""

        self.init()
        played = 0
        while True:
            try:
                self.act()
            except EOFError:
                break
            played += 1
        return played


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Vox Codei 炸弹放置规划")
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), default="exhaustive")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    Player(sys.stdin, sys.stdout, args.strategy).run()


if __name__ == "__main__":
    main()

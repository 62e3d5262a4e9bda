from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, List, Optional

import numpy as np

from ..candidates import PotentialPlacement, generate_candidates
from ..grid import CELL_EMPTY, CELL_NODE, Coord, Grid
from ..plan import Decision, PlanResult, check_budget, count_devices
from ..simulation import blast_coords, tick
from ..targets import TargetSet, build_target_set

logger = logging.getLogger(__name__)


@dataclass
class CoverResult:
    """阶段 A：近似最小覆盖集合。"""

    selected_indices: List[int]
    positions: List[Coord]
    coverage_rate: float
    iterations: int
    prune_iterations: int
    uncoverable: List[Coord] = field(default_factory=list)


@dataclass
class Schedule:
    """阶段 B：依赖关系与排序。

    level: 解锁链上的层级，无需其他炸弹清路的放置为 0；
    clearer: 被解锁位置 -> 解锁它的放置；
    depth: 依赖它的放置链的最大长度，没有依赖者为 0；
    order: 按 depth 降序排好的放置顺序；
    blocked: 永远无法变为空格的放置。
    """

    level: Dict[Coord, int]
    clearer: Dict[Coord, Coord]
    depth: Dict[Coord, int]
    order: List[Coord]
    blocked: List[Coord] = field(default_factory=list)


def _simplify(
    selected: List[int],
    candidates: List[PotentialPlacement],
    coverage: np.ndarray,
    targets: TargetSet,
) -> int:
    """反复移除完全冗余的已选候选：其覆盖的每个节点都还被其他已选候选覆盖。

    原地修改 selected 与 coverage，返回移除次数。
    """

    removed = 0
    changed = True
    while changed:
        changed = False
        for cand_idx in list(selected):
            covered = [int(targets.index_map[x, y]) for x, y in candidates[cand_idx].blast]
            if all(coverage[i] > 1 for i in covered):
                selected.remove(cand_idx)
                coverage[covered] -= 1
                removed += 1
                changed = True
                break  # 重启循环
    return removed


def select_cover(grid: Grid) -> CoverResult:
    """贪心集合覆盖 + 冗余删除。

    每次选取未覆盖节点最多的候选（同分取覆盖总数更大者，再同分取先出现者），
    选入后立即做一次冗余删除。无法被任何候选波及的节点不参与覆盖。
    """

    targets = build_target_set(grid)
    candidates = generate_candidates(grid, targets)

    global_cover = 0
    for cand in candidates:
        global_cover |= cand.mask
    uncoverable = targets.coords_of(targets.full_mask & ~global_cover)
    if uncoverable:
        logger.warning("cover: %d 个节点无法被任何位置波及: %s", len(uncoverable), uncoverable)

    coverage = np.zeros(targets.size, dtype=np.int32)
    selected: List[int] = []
    iterations = 0
    prune_iterations = 0

    uncovered = global_cover
    while uncovered:
        best_gain = 0
        best_size = 0
        best_idx = -1
        for cand in candidates:
            gain = (cand.mask & uncovered).bit_count()
            size = cand.mask.bit_count()
            if gain > best_gain or (gain == best_gain and gain > 0 and size > best_size):
                best_gain = gain
                best_size = size
                best_idx = cand.idx

        if best_idx < 0:
            break

        selected.append(best_idx)
        for x, y in candidates[best_idx].blast:
            coverage[targets.index_map[x, y]] += 1
        uncovered &= ~candidates[best_idx].mask
        iterations += 1

        prune_iterations += _simplify(selected, candidates, coverage, targets)

    covered = int(np.count_nonzero(coverage > 0))
    coverage_rate = covered / targets.size if targets.size > 0 else 1.0

    return CoverResult(
        selected_indices=selected,
        positions=[candidates[i].position for i in selected],
        coverage_rate=coverage_rate,
        iterations=iterations,
        prune_iterations=prune_iterations,
        uncoverable=uncoverable,
    )


def schedule_cover(grid: Grid, positions: List[Coord]) -> Schedule:
    """根据遮挡关系为覆盖集合排序。

    放置位置可能本身是节点，必须等其他炸弹清空后才能放置。在草稿棋盘上
    乐观地立即清除每个可放置位置的爆炸范围（不等待真实计时），以确定
    谁解锁了谁，再按依赖链长度得到总顺序。
    """

    scratch = grid.clone()
    remaining = list(positions)
    level: Dict[Coord, int] = {}
    clearer: Dict[Coord, Coord] = {}
    resolved: List[Coord] = []

    while remaining:
        placeable = [p for p in remaining if scratch.cells[p] == CELL_EMPTY]
        if not placeable:
            break

        for pos in placeable:
            level.setdefault(pos, 0)
            for bx, by in blast_coords(scratch, *pos):
                if scratch.cells[bx, by] != CELL_NODE:
                    continue
                scratch.clear(bx, by)
                unlocked = (bx, by)
                if unlocked in remaining and unlocked not in level:
                    level[unlocked] = level[pos] + 1
                    clearer[unlocked] = pos

        resolved.extend(placeable)
        remaining = [p for p in remaining if p not in placeable]

    if remaining:
        logger.warning("cover: %d 个放置位置永远无法变为空格，已放弃: %s", len(remaining), remaining)

    # 按层级从深到浅计算依赖链长度，子节点先于父节点
    depth: Dict[Coord, int] = {}
    for pos in sorted(resolved, key=lambda p: level[p], reverse=True):
        depth.setdefault(pos, 0)
        parent = clearer.get(pos)
        if parent is not None:
            depth[parent] = max(depth.get(parent, 0), depth[pos] + 1)

    order = sorted(resolved, key=lambda p: (-depth[p], level[p]))

    return Schedule(level=level, clearer=clearer, depth=depth, order=order, blocked=remaining)


def replay_schedule(
    grid: Grid,
    order: List[Coord],
    rounds: int,
    devices: int,
) -> List[Decision]:
    """在真实计时下回放排好的放置顺序。

    每回合先推进一回合，再从剩余放置中选取第一个当前为空格的位置；
    没有可放置位置时等待。全部放置后其余回合等待。
    """

    board = grid.clone()
    outstanding = list(order)
    remaining = devices
    decisions: List[Decision] = []

    for _ in range(rounds):
        tick(board)

        choice: Optional[Coord] = None
        if outstanding and remaining > 0:
            for pos in outstanding:
                if board.cells[pos] == CELL_EMPTY:
                    choice = pos
                    break

        if choice is None:
            decisions.append(None)
            continue

        outstanding.remove(choice)
        board.put_device(*choice)
        remaining -= 1
        decisions.append(choice)

    if outstanding:
        logger.warning(
            "cover: 回合数或炸弹数不足，%d 个放置未执行: %s", len(outstanding), outstanding
        )

    return decisions


def plan_set_cover(grid: Grid, rounds: int, devices: int) -> PlanResult:
    check_budget(rounds, devices)
    start = perf_counter()

    cover = select_cover(grid)
    schedule = schedule_cover(grid, cover.positions)
    logger.debug(
        "cover: 选中 %d 个位置（删除冗余 %d 次），顺序 %s",
        len(cover.positions),
        cover.prune_iterations,
        schedule.order,
    )
    if len(schedule.order) > devices:
        logger.warning("cover: 覆盖需要 %d 枚炸弹，仅剩 %d 枚", len(schedule.order), devices)

    decisions = replay_schedule(grid, schedule.order, rounds, devices)
    placed = count_devices(decisions)

    feasible = (
        not cover.uncoverable
        and not schedule.blocked
        and placed == len(cover.positions)
    )
    runtime_ms = (perf_counter() - start) * 1000.0

    return PlanResult(
        strategy="cover",
        decisions=decisions,
        devices_used=placed,
        feasible=feasible,
        runtime_ms=runtime_ms,
    )

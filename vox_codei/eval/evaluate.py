from __future__ import annotations

import csv
import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import List

from ..algorithms.cover import plan_set_cover
from ..algorithms.exhaustive import plan_exhaustive
from ..algorithms.greedy import plan_greedy
from ..grid import CELL_NODE, DEVICE_TIMER, Grid
from ..maps import LAYOUTS, generate_board
from ..plan import PlanResult, replay
from .charts import plot_all_charts

logger = logging.getLogger(__name__)


@dataclass
class ExperimentResult:
    """单次实验（棋盘 × 规划算法）的指标记录。"""

    layout: str
    scale: str
    seed: int
    algorithm: str  # "exhaustive" / "greedy" / "cover"

    node_count: int
    rounds: int
    device_budget: int

    devices_used: int
    feasible: bool
    cleared: bool          # 回放计划后节点是否全部被摧毁
    nodes_left: int
    runtime_ms: float
    nodes_expanded: int


def _ensure_output_dirs(base_dir: str) -> None:
    os.makedirs(base_dir, exist_ok=True)
    os.makedirs(os.path.join(base_dir, "charts"), exist_ok=True)


def _record(
    layout: str,
    scale: str,
    seed: int,
    grid: Grid,
    rounds: int,
    devices: int,
    res: PlanResult,
) -> ExperimentResult:
    # 回合用完后再多推进几回合，让最后放置的炸弹也能引爆
    final = replay(grid, res.decisions, extra_rounds=DEVICE_TIMER)
    nodes_left = final.count(CELL_NODE)
    return ExperimentResult(
        layout=layout,
        scale=scale,
        seed=seed,
        algorithm=res.strategy,
        node_count=grid.count(CELL_NODE),
        rounds=rounds,
        device_budget=devices,
        devices_used=res.devices_used,
        feasible=res.feasible,
        cleared=nodes_left == 0,
        nodes_left=nodes_left,
        runtime_ms=res.runtime_ms,
        nodes_expanded=res.nodes_expanded,
    )


def run_all_experiments(
    output_dir: str = "output",
    exhaustive_time_limit_sec: float = 10.0,
) -> List[ExperimentResult]:
    _ensure_output_dirs(output_dir)

    scales = ["small", "medium", "large"]
    results: List[ExperimentResult] = []

    # 固定随机种子，保证可复现
    base_seed = 42

    for scale_idx, scale in enumerate(scales):
        for layout_idx, layout in enumerate(LAYOUTS):
            seed = base_seed + scale_idx * 100 + layout_idx
            grid, info = generate_board(layout, scale, seed)

            runs: List[PlanResult] = [
                plan_greedy(grid, info.rounds, info.devices),
                plan_set_cover(grid, info.rounds, info.devices),
            ]
            # 完整搜索是指数级的，只在小棋盘上运行
            if scale == "small":
                runs.append(
                    plan_exhaustive(
                        grid,
                        info.rounds,
                        info.devices,
                        time_limit_sec=exhaustive_time_limit_sec,
                    )
                )

            for res in runs:
                record = _record(layout, scale, seed, grid, info.rounds, info.devices, res)
                logger.info(
                    "%s/%s %s: cleared=%s devices=%d %.1f ms",
                    layout,
                    scale,
                    record.algorithm,
                    record.cleared,
                    record.devices_used,
                    record.runtime_ms,
                )
                results.append(record)

    # 写出 CSV 与 JSON 摘要
    csv_path = os.path.join(output_dir, "results_table.csv")
    json_path = os.path.join(output_dir, "summary.json")

    fieldnames = list(ExperimentResult.__dataclass_fields__)

    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in results:
            writer.writerow(asdict(r))

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump([asdict(r) for r in results], f, ensure_ascii=False, indent=2)

    # 生成图表
    charts_dir = os.path.join(output_dir, "charts")
    plot_all_charts(results, charts_dir)

    return results


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_all_experiments()


if __name__ == "__main__":
    main()

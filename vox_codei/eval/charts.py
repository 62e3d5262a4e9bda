from __future__ import annotations

import os
from typing import Dict, Iterable, List

import matplotlib.pyplot as plt
import numpy as np

from ..maps import LAYOUTS

ALGO_ORDER = ["exhaustive", "greedy", "cover"]
ALGO_LABELS = {"exhaustive": "完整搜索", "greedy": "贪心", "cover": "集合覆盖"}
LAYOUT_LABELS = {"scatter": "随机散布", "walls": "障碍墙", "clusters": "节点团"}


def _group_by(
    results: Iterable[dict], key: str
) -> Dict[str, List[dict]]:
    grouped: Dict[str, List[dict]] = {}
    for r in results:
        k = r[key]
        grouped.setdefault(k, []).append(r)
    return grouped


def _plot_bar_per_scale(
    results: List[dict],
    metric_key: str,
    ylabel: str,
    title: str,
    filename_prefix: str,
    output_dir: str,
) -> List[str]:
    """按 scale 生成柱状图（横轴为棋盘布局，柱为算法），返回生成的文件路径。"""

    written: List[str] = []
    for scale, scale_results in _group_by(results, "scale").items():
        algos = [a for a in ALGO_ORDER if any(r["algorithm"] == a for r in scale_results)]
        if not algos:
            continue

        fig, ax = plt.subplots(figsize=(8, 5), dpi=150)

        x = np.arange(len(LAYOUTS))
        width = 0.25

        for i, algo in enumerate(algos):
            vals = []
            for layout in LAYOUTS:
                value = np.nan
                for r in scale_results:
                    if r["layout"] == layout and r["algorithm"] == algo:
                        value = float(r[metric_key])
                        break
                vals.append(value)
            offset = (i - (len(algos) - 1) / 2) * width
            ax.bar(x + offset, vals, width, label=ALGO_LABELS.get(algo, algo))

        ax.set_xticks(x)
        ax.set_xticklabels([LAYOUT_LABELS[layout] for layout in LAYOUTS], rotation=0)
        ax.set_ylabel(ylabel)
        ax.set_title(f"{title}（{scale}）")

        # 图例放在下方，避免遮挡图形
        ax.legend(loc="lower center", bbox_to_anchor=(0.5, -0.3), ncol=len(algos), frameon=False)
        fig.subplots_adjust(bottom=0.3, top=0.88)

        out_path = os.path.join(output_dir, f"{filename_prefix}_{scale}.png")
        fig.savefig(out_path, bbox_inches="tight")
        plt.close(fig)
        written.append(out_path)

    return written


def _plot_clear_rate(results: List[dict], output_dir: str) -> str:
    """各算法在全部棋盘上的清除成功率。"""

    fig, ax = plt.subplots(figsize=(6, 4), dpi=150)

    grouped = _group_by(results, "algorithm")
    algos = [a for a in ALGO_ORDER if a in grouped]
    rates = [np.mean([1.0 if r["cleared"] else 0.0 for r in grouped[a]]) for a in algos]

    ax.bar(np.arange(len(algos)), rates, 0.5)
    ax.set_xticks(np.arange(len(algos)))
    ax.set_xticklabels([ALGO_LABELS[a] for a in algos])
    ax.set_ylim(0.0, 1.0)
    ax.set_ylabel("清除成功率")
    ax.set_title("回放后全部节点被摧毁的比例")

    out_path = os.path.join(output_dir, "clear_rate.png")
    fig.savefig(out_path, bbox_inches="tight")
    plt.close(fig)
    return out_path


def plot_all_charts(results_dataclasses, output_dir: str) -> List[str]:
    """从 ExperimentResult 列表生成所有图表。"""

    os.makedirs(output_dir, exist_ok=True)

    # dataclass -> dict
    results: List[dict] = [
        r if isinstance(r, dict) else r.__dict__ for r in results_dataclasses
    ]
    if not results:
        return []

    written: List[str] = []

    # 1) 炸弹数量对比
    written += _plot_bar_per_scale(
        results,
        metric_key="devices_used",
        ylabel="炸弹数量",
        title="各算法炸弹数量对比",
        filename_prefix="devices",
        output_dir=output_dir,
    )

    # 2) 运行时间对比
    written += _plot_bar_per_scale(
        results,
        metric_key="runtime_ms",
        ylabel="运行时间 (ms)",
        title="各算法运行时间对比",
        filename_prefix="runtime",
        output_dir=output_dir,
    )

    # 3) 清除成功率
    written.append(_plot_clear_rate(results, output_dir))

    return written

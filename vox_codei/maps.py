from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

import numpy as np

from .grid import CELL_EMPTY, CELL_NODE, CELL_PASSIVE, Grid

# 三种尺度的统一尺寸设置 (width, height)
SCALE_DIMS: Dict[str, Tuple[int, int]] = {
    "small": (6, 5),
    "medium": (12, 9),
    "large": (16, 12),
}

LAYOUTS = ("scatter", "walls", "clusters")


@dataclass
class MapInfo:
    """地图元信息，附带建议的回合数与炸弹数。"""

    layout: str   # "scatter" / "walls" / "clusters"
    scale: str    # "small" / "medium" / "large"
    seed: int
    rounds: int
    devices: int


def parse_grid(rows: Iterable[str], width: int | None = None) -> Grid:
    """将协议中的文本行解析为棋盘：'@' 为节点，'#' 为障碍，其余为空格。"""

    lines: List[str] = [row.rstrip("\r\n") for row in rows]
    if not lines:
        raise ValueError("棋盘至少需要一行")
    if width is None:
        width = len(lines[0])
    for y, line in enumerate(lines):
        if len(line) < width:
            raise ValueError(f"第 {y} 行长度 {len(line)} 小于棋盘宽度 {width}")

    grid = Grid.empty(width, len(lines))
    for y, line in enumerate(lines):
        for x in range(width):
            ch = line[x]
            if ch == "@":
                grid.put_node(x, y)
            elif ch == "#":
                grid.put_passive(x, y)
    return grid


def _base_grid(scale: str) -> Grid:
    if scale not in SCALE_DIMS:
        raise ValueError(f"未知 scale: {scale}")
    width, height = SCALE_DIMS[scale]
    return Grid.empty(width, height)


def _suggest_budget(grid: Grid) -> Tuple[int, int]:
    """按节点数量给出宽松的炸弹数与回合数。"""

    nodes = grid.count(CELL_NODE)
    devices = max(1, math.ceil(nodes / 2))
    rounds = 4 * devices + 8
    return rounds, devices


def generate_scatter_board(scale: str, seed: int) -> Grid:
    """随机散布节点与障碍。"""

    rng = np.random.default_rng(seed)
    grid = _base_grid(scale)
    noise = rng.random(grid.cells.shape)
    grid.cells[noise < 0.08] = CELL_PASSIVE
    grid.cells[(noise >= 0.08) & (noise < 0.28)] = CELL_NODE
    return grid


def generate_walls_board(scale: str, seed: int) -> Grid:
    """若干带缺口的障碍墙，节点分布在墙之间。"""

    rng = np.random.default_rng(seed)
    grid = _base_grid(scale)

    for x in range(2, grid.width - 1, 4):
        gap = int(rng.integers(0, grid.height))
        for y in range(grid.height):
            if abs(y - gap) > 1:
                grid.cells[x, y] = CELL_PASSIVE

    noise = rng.random(grid.cells.shape)
    grid.cells[(grid.cells == CELL_EMPTY) & (noise < 0.2)] = CELL_NODE
    return grid


def generate_clusters_board(scale: str, seed: int) -> Grid:
    """若干矩形节点团，模拟成片的防火墙节点。"""

    rng = np.random.default_rng(seed)
    grid = _base_grid(scale)
    num_clusters = {"small": 1, "medium": 3, "large": 5}[scale]

    for _ in range(num_clusters):
        w = int(rng.integers(1, 4))
        h = int(rng.integers(1, 4))
        x0 = int(rng.integers(0, max(1, grid.width - w)))
        y0 = int(rng.integers(0, max(1, grid.height - h)))
        grid.cells[x0:x0 + w, y0:y0 + h] = CELL_NODE

    noise = rng.random(grid.cells.shape)
    grid.cells[(grid.cells == CELL_EMPTY) & (noise < 0.05)] = CELL_PASSIVE
    return grid


def generate_board(layout: str, scale: str, seed: int) -> Tuple[Grid, MapInfo]:
    """统一入口，根据 layout 和 scale 生成对应棋盘。"""

    if layout == "scatter":
        grid = generate_scatter_board(scale, seed)
    elif layout == "walls":
        grid = generate_walls_board(scale, seed)
    elif layout == "clusters":
        grid = generate_clusters_board(scale, seed)
    else:
        raise ValueError(f"未知 layout: {layout}")

    rounds, devices = _suggest_budget(grid)
    return grid, MapInfo(layout=layout, scale=scale, seed=seed, rounds=rounds, devices=devices)

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .grid import CELL_NODE, CELL_PASSIVE, Coord, Grid
from .simulation import enumerate_blast
from .targets import TargetSet, build_target_set


@dataclass
class PotentialPlacement:
    """炸弹候选点。

    blast 为在初始棋盘上该位置引爆时能够波及的节点坐标（按爆炸遍历顺序），
    mask 为同一集合在 TargetSet 上的位图表示。
    """

    idx: int
    position: Coord
    blast: Tuple[Coord, ...]
    mask: int
    on_node: bool = False   # 候选格本身是节点，需先被其他炸弹清空才能放置

    def signature(self) -> str:
        """覆盖范围的规范字符串，用于识别等价候选。"""

        return ", ".join(f"{x}:{y}" for x, y in sorted(self.blast))


def generate_candidates(grid: Grid, targets: TargetSet | None = None) -> List[PotentialPlacement]:
    """在给定棋盘上为每个非障碍格生成候选（行优先顺序）。

    规则：
    - 障碍格不能放置炸弹，不生成候选；
    - 空格与节点格都生成候选，节点格候选需要等该节点被清除后才能放置；
    - 覆盖范围只记录节点格，空格不计入。
    """

    if targets is None:
        targets = build_target_set(grid)

    candidates: List[PotentialPlacement] = []
    idx_counter = 0
    for y in range(grid.height):
        for x in range(grid.width):
            contents = grid.cell(x, y)
            if contents == CELL_PASSIVE:
                continue

            blast = tuple(
                coord for coord, hit in enumerate_blast(grid, x, y) if hit == CELL_NODE
            )
            candidates.append(
                PotentialPlacement(
                    idx=idx_counter,
                    position=(x, y),
                    blast=blast,
                    mask=targets.mask_of(blast),
                    on_node=contents == CELL_NODE,
                )
            )
            idx_counter += 1

    return candidates


def simplify_candidates(candidates: List[PotentialPlacement]) -> List[PotentialPlacement]:
    """去除等价候选。

    - 节点格候选全部保留（位置本身需要被清空，彼此不可互换）；
    - 空格候选按覆盖范围分组，每组只保留第一个；
    - 结果中节点格候选在前，空格候选在后。
    """

    on_nodes = [c for c in candidates if c.on_node]

    by_signature: Dict[str, PotentialPlacement] = {}
    for cand in candidates:
        if cand.on_node:
            continue
        by_signature.setdefault(cand.signature(), cand)

    return on_nodes + list(by_signature.values())

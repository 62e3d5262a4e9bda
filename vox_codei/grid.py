from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

# 格子内容：空 / 不可破坏障碍 / 目标节点 / 已放置的炸弹
CELL_EMPTY = 0
CELL_PASSIVE = 1
CELL_NODE = 2
CELL_DEVICE = 3

# 与输入输出协议一致的字符表示，下标即格子内容
CELL_CHARS = ".#@B"

# 炸弹放置后经过的回合数，到 0 时引爆
DEVICE_TIMER = 4

Coord = Tuple[int, int]


@dataclass
class Device:
    """已放置的炸弹：位置固定，timer 每回合减 1。"""

    x: int
    y: int
    timer: int = DEVICE_TIMER

    @property
    def position(self) -> Coord:
        return (self.x, self.y)


@dataclass
class Grid:
    """二维棋盘。

    cells 的 shape = (width, height)，以 cells[x, y] 访问，x 为列、y 为行。
    devices 按放置顺序保存当前所有未引爆的炸弹。

    不变式：cells[x, y] == CELL_DEVICE 当且仅当 devices 中存在位于 (x, y) 的炸弹；
    CELL_PASSIVE 的格子在整个生命周期内不会改变。
    """

    cells: np.ndarray
    devices: List[Device] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.cells.ndim != 2:
            raise ValueError("cells 数组必须是二维的 (width, height)")
        if self.cells.shape[0] == 0 or self.cells.shape[1] == 0:
            raise ValueError(f"棋盘尺寸必须为正: {self.cells.shape}")
        if self.cells.dtype != np.int8:
            self.cells = self.cells.astype(np.int8)
        if self.cells.min() < CELL_EMPTY or self.cells.max() > CELL_DEVICE:
            raise ValueError("cells 中存在未知的格子类型")

        positions = [d.position for d in self.devices]
        if len(set(positions)) != len(positions):
            raise ValueError("同一格子上不能有多枚炸弹")
        for x, y in positions:
            if not self.in_bounds(x, y) or self.cells[x, y] != CELL_DEVICE:
                raise ValueError(f"炸弹 ({x}, {y}) 所在格子未标记为炸弹")
        if self.count(CELL_DEVICE) != len(positions):
            raise ValueError("存在没有对应炸弹的炸弹格")

    @classmethod
    def empty(cls, width: int, height: int) -> "Grid":
        """构造一个全部为空格的棋盘。"""

        if width <= 0 or height <= 0:
            raise ValueError(f"棋盘尺寸必须为正: {width}x{height}")
        return cls(cells=np.zeros((width, height), dtype=np.int8))

    @property
    def width(self) -> int:
        return self.cells.shape[0]

    @property
    def height(self) -> int:
        return self.cells.shape[1]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise ValueError(f"坐标越界: ({x}, {y})，棋盘为 {self.width}x{self.height}")

    def cell(self, x: int, y: int) -> int:
        self._check_bounds(x, y)
        return int(self.cells[x, y])

    def is_empty(self, x: int, y: int) -> bool:
        self._check_bounds(x, y)
        return self.cells[x, y] == CELL_EMPTY

    def put_node(self, x: int, y: int) -> None:
        self._check_bounds(x, y)
        if self.cells[x, y] != CELL_EMPTY:
            raise ValueError(f"只能在空格上放置节点: ({x}, {y})")
        self.cells[x, y] = CELL_NODE

    def put_passive(self, x: int, y: int) -> None:
        self._check_bounds(x, y)
        if self.cells[x, y] != CELL_EMPTY:
            raise ValueError(f"只能在空格上放置障碍: ({x}, {y})")
        self.cells[x, y] = CELL_PASSIVE

    def put_device(self, x: int, y: int) -> Device:
        """在空格上放置一枚新炸弹，返回该炸弹。"""

        self._check_bounds(x, y)
        if self.cells[x, y] != CELL_EMPTY:
            raise ValueError(
                f"炸弹只能放在空格上: ({x}, {y}) 当前为 {CELL_CHARS[self.cell(x, y)]!r}"
            )
        device = Device(x, y)
        self.cells[x, y] = CELL_DEVICE
        self.devices.append(device)
        return device

    def clear(self, x: int, y: int) -> None:
        """清除节点；空格与障碍保持不变。炸弹格只能通过 remove_device 清除。"""

        self._check_bounds(x, y)
        if self.cells[x, y] == CELL_DEVICE:
            raise ValueError(f"炸弹格需通过 remove_device 清除: ({x}, {y})")
        if self.cells[x, y] == CELL_NODE:
            self.cells[x, y] = CELL_EMPTY

    def device_at(self, x: int, y: int) -> Optional[Device]:
        self._check_bounds(x, y)
        for device in self.devices:
            if device.x == x and device.y == y:
                return device
        return None

    def remove_device(self, device: Device) -> None:
        self.devices.remove(device)
        self.cells[device.x, device.y] = CELL_EMPTY

    def device_count(self) -> int:
        return len(self.devices)

    def count(self, kind: int) -> int:
        return int(np.count_nonzero(self.cells == kind))

    def node_coords(self) -> List[Coord]:
        """按行优先顺序返回所有节点坐标。"""

        return [
            (x, y)
            for y in range(self.height)
            for x in range(self.width)
            if self.cells[x, y] == CELL_NODE
        ]

    def clone(self) -> "Grid":
        return Grid(
            self.cells.copy(),
            [Device(d.x, d.y, d.timer) for d in self.devices],
        )

    def render(self) -> List[str]:
        """按行输出字符画，与输入协议使用相同字符。"""

        return [
            "".join(CELL_CHARS[self.cells[x, y]] for x in range(self.width))
            for y in range(self.height)
        ]

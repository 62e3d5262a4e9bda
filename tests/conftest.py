import pytest

from vox_codei.grid import Grid
from vox_codei.maps import parse_grid


@pytest.fixture
def column_board() -> Grid:
    """中间一列三个节点，从底部一枚炸弹即可全部摧毁。"""

    return parse_grid([
        ".@.",
        ".@.",
        ".@.",
        "...",
    ])


@pytest.fixture
def corridor_board() -> Grid:
    """单行走廊：只有最左侧是空格，第二枚炸弹必须等第一枚清出位置。"""

    return parse_grid([".@@@@"])


@pytest.fixture
def open_board() -> Grid:
    return Grid.empty(7, 7)

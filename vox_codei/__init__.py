"""Vox Codei 炸弹放置规划代码包。

子模块：
- grid: 二维棋盘、格子类型与炸弹
- simulation: 爆炸传播与回合推进（连锁引爆）
- targets: 需摧毁节点集合与位图索引
- candidates: 炸弹候选生成与等价去重
- plan: 计划结果、补齐与回放
- planner: 统一的规划入口
- maps: 文本棋盘解析与测试棋盘生成
- player: 逐回合读写的驱动程序
- algorithms: 贪心 / 完整搜索 / 集合覆盖规划
- eval: 统一评估与制图
"""

__all__ = [
    "grid",
    "simulation",
    "targets",
    "candidates",
    "plan",
    "planner",
    "maps",
    "player",
    "algorithms",
]

"""
检查状态枚举

定义 Sensu/Nagios 约定的检查状态，数值即进程退出码
"""

from enum import IntEnum


class CheckState(IntEnum):
    """
    检查状态枚举

    数值与 Sensu/Nagios 插件的退出码一致:
        - OK (0): 测量值在阈值范围内
        - WARNING (1): 超出 warning 阈值
        - CRITICAL (2): 超出 critical 阈值，或输入配置错误
        - UNKNOWN (3): 检查本身失败（连库失败、查询失败、结果无法解析）
    """
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    def __str__(self) -> str:
        return self.name

    @property
    def exit_code(self) -> int:
        """进程退出码"""
        return int(self)

    @property
    def is_problem(self) -> bool:
        """是否为非 OK 状态"""
        return self is not CheckState.OK

"""
periodically 进程内周期任务调度库

为每个注册的任务在独立线程中按固定间隔执行，并支持带截止时间的协调停止。

主要功能：
----------
* 固定间隔执行：第n次执行不早于启动后n个间隔
* 防止重叠：上一次执行未结束时跳过本次触发，不排队
* 一次性启动：重复或并发调用start只生效一次
* 协调停止：广播取消信号，在截止时间内等待所有任务退出
* 统一日志：基于loguru的日志管理
* 配置管理：基于pydantic-settings的多源配置加载

使用方法：
----------
::

    from periodically import Manager

    manager = Manager()
    manager.every(5, lambda ctx: print("tick"))
    manager.start()
    ...
    manager.stop(5)
"""

import importlib.util

# 使用importlib.util.find_spec检查_version模块是否存在
if importlib.util.find_spec("periodically._version") is not None:
    from ._version import __version__  # type: ignore
else:
    # 如果_version.py不存在（例如在开发环境中初次克隆后），使用默认版本
    __version__ = "0.0.0.dev0"

from periodically.core import (
    ExecutionContext,
    ForcedStopError,
    InvalidIntervalError,
    PeriodicallyError,
    RegistrationAfterStartError,
)
from periodically.scheduler import Manager, ManagerState, TaskRunner

__all__ = [
    "__version__",
    "ExecutionContext",
    "ForcedStopError",
    "InvalidIntervalError",
    "PeriodicallyError",
    "RegistrationAfterStartError",
    "Manager",
    "ManagerState",
    "TaskRunner",
]

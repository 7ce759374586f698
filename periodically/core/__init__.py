"""
核心模块

提供调度器的基础设施，包括配置、执行上下文、异常和日志。
"""

from periodically.core.config import (
    LogConfig,
    LogLevel,
    SchedulerConfig,
    Settings,
    load_settings,
)
from periodically.core.context import ExecutionContext, Signal
from periodically.core.exceptions import (
    ForcedStopError,
    InvalidIntervalError,
    PeriodicallyError,
    RegistrationAfterStartError,
)
from periodically.core.logging import get_logger, setup_logging

__all__ = [
    "LogConfig",
    "LogLevel",
    "SchedulerConfig",
    "Settings",
    "load_settings",
    "ExecutionContext",
    "Signal",
    "PeriodicallyError",
    "RegistrationAfterStartError",
    "ForcedStopError",
    "InvalidIntervalError",
    "get_logger",
    "setup_logging",
]

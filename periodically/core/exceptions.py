"""
异常定义模块

定义调度器使用的异常类。任务函数自身抛出的异常不会被转换为这里的异常。
"""

from typing import Any, Dict, Optional


class PeriodicallyError(Exception):
    """调度器基础异常类"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        初始化异常

        Args:
            code: 错误代码
            message: 错误消息
            details: 错误详情
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RegistrationAfterStartError(PeriodicallyError):
    """调度器启动后注册任务异常"""

    def __init__(
        self,
        message: str = "unable to register a worker after calling <start> method",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code="REGISTRATION_AFTER_START",
            message=message,
            details=details,
        )


class ForcedStopError(PeriodicallyError):
    """
    强制停止异常

    截止时间先于所有任务线程退出到达。取消信号已经发出，
    仍在运行的任务会在当前执行结束后自行退出。
    """

    def __init__(
        self,
        message: str = "workers were stopped forcibly",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code="FORCED_STOP",
            message=message,
            details=details,
        )


class InvalidIntervalError(PeriodicallyError, ValueError):
    """任务执行间隔非法异常"""

    def __init__(
        self,
        message: str = "interval must be positive and finite",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code="INVALID_INTERVAL",
            message=message,
            details=details,
        )


class ConfigError(PeriodicallyError):
    """配置文件无法读取或格式错误"""

    def __init__(
        self,
        message: str = "invalid configuration file",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code="CONFIG_ERROR",
            message=message,
            details=details,
        )

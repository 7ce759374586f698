"""
调度管理器模块

管理所有任务执行器的注册、启动和带截止时间的协调停止。
"""

import enum
import math
import threading
from typing import Any, Callable, List, Optional, Tuple, Union

from periodically.core.config import SchedulerConfig
from periodically.core.context import ExecutionContext, Seconds, Signal, to_seconds
from periodically.core.exceptions import (
    ForcedStopError,
    InvalidIntervalError,
    RegistrationAfterStartError,
)
from periodically.core.logging import get_logger
from periodically.scheduler.runner import TaskFunc, TaskRunner


class ManagerState(enum.Enum):
    """调度管理器状态枚举"""

    CREATED = "created"  # 已创建，可以注册任务
    RUNNING = "running"  # 运行中
    STOPPED = "stopped"  # 已停止，不可重启


class Manager:
    """
    调度管理器

    独占所有任务执行器，持有共享的取消上下文和“全部停止”信号。
    任务只能在start之前注册；start只会生效一次；stop广播取消后
    在截止时间内等待所有任务线程退出。
    """

    def __init__(self, logger: Any = None, config: Optional[SchedulerConfig] = None):
        """
        初始化调度管理器

        Args:
            logger: 日志记录器，需提供debug/info/warning/error方法，默认使用loguru
            config: 调度器配置
        """
        self.log = logger if logger is not None else get_logger("periodically")
        self.config = config or SchedulerConfig()

        self._ctx = ExecutionContext()
        self._runners: List[TaskRunner] = []
        self._threads: List[threading.Thread] = []
        self._all_stopped = Signal()
        self._start_guard = threading.Lock()
        # 注册与启动互斥，启动后任务集合不再变化
        self._registry_lock = threading.Lock()
        self._started = False
        self._state = ManagerState.CREATED

    @property
    def state(self) -> ManagerState:
        """当前状态"""
        return self._state

    @property
    def started(self) -> bool:
        """是否已经启动"""
        return self._started

    @property
    def context(self) -> ExecutionContext:
        """传给所有任务的共享执行上下文"""
        return self._ctx

    @property
    def all_stopped(self) -> Signal:
        """所有任务线程退出后关闭的信号"""
        return self._all_stopped

    @property
    def tasks(self) -> Tuple[TaskRunner, ...]:
        """已注册的任务执行器"""
        return tuple(self._runners)

    def every(
        self, interval: Seconds, func: TaskFunc, name: Optional[str] = None
    ) -> TaskRunner:
        """
        注册按固定间隔执行的任务

        Args:
            interval: 执行间隔，秒数或timedelta，必须为正数
            func: 任务函数，接收执行上下文
            name: 任务名称，如果为None则使用函数名

        Returns:
            TaskRunner: 任务执行器

        Raises:
            RegistrationAfterStartError: 调度器已经启动
            InvalidIntervalError: 执行间隔不是有限的正数
        """
        seconds = to_seconds(interval)
        if not (seconds > 0 and math.isfinite(seconds)):
            raise InvalidIntervalError(details={"interval": seconds})

        with self._registry_lock:
            if self._started:
                raise RegistrationAfterStartError(
                    details={"task": name or getattr(func, "__name__", repr(func))}
                )
            runner = TaskRunner(func, seconds, name=name)
            self._runners.append(runner)

        self.log.debug(f"已注册任务: {runner.name}, 间隔: {runner.interval}s")
        return runner

    def task(self, interval: Seconds, name: Optional[str] = None) -> Callable[[TaskFunc], TaskFunc]:
        """
        注册任务的装饰器形式

        Args:
            interval: 执行间隔
            name: 任务名称

        Returns:
            Callable: 装饰器，原样返回被装饰的函数
        """

        def decorator(func: TaskFunc) -> TaskFunc:
            self.every(interval, func, name=name)
            return func

        return decorator

    def start(self) -> None:
        """启动所有任务，重复调用和并发调用只有第一次生效"""
        if not self._start_guard.acquire(blocking=False):
            return

        with self._registry_lock:
            self._started = True
            self._state = ManagerState.RUNNING
            runners = list(self._runners)

        prefix = self.config.thread_name_prefix
        for runner in runners:
            self._threads.append(runner.start(self._ctx, prefix))

        coordinator = threading.Thread(
            target=self._wait_workers,
            name=f"{prefix}-coordinator",
            daemon=True,
        )
        coordinator.start()

        self.log.info(f"periodically workers are running [任务数量: {len(runners)}]")

    def _wait_workers(self) -> None:
        for thread in self._threads:
            thread.join()
        self._all_stopped.close()

    def stop(self, deadline: Union[ExecutionContext, Seconds, None] = None) -> None:
        """
        停止所有任务

        广播取消信号后等待所有任务线程退出，等待时间受截止时间限制。
        超时不会终止任务线程，只是不再等待。

        Args:
            deadline: 截止时间上下文或秒数，None表示使用配置的stop_timeout

        Raises:
            ForcedStopError: 截止时间先于所有任务线程退出到达
        """
        op = "periodically.stop"

        if not self._started:
            self.log.warning("You can not call <stop> method before <start>")
            return

        self._ctx.cancel()
        self._state = ManagerState.STOPPED

        if deadline is None:
            deadline = self.config.stop_timeout
        owns_deadline = not isinstance(deadline, ExecutionContext)
        if owns_deadline:
            deadline = ExecutionContext.with_timeout(deadline)

        first = Signal()
        self._all_stopped.add_callback(first.close)
        deadline.add_done_callback(first.close)
        try:
            first.wait()
        finally:
            self._all_stopped.remove_callback(first.close)
            deadline.remove_done_callback(first.close)
            if owns_deadline:
                deadline.cancel()

        if self._all_stopped.closed:
            self.log.info("all periodically workers stopped successfully")
            return

        pending = [runner.name for runner in self._runners if runner.in_progress]
        self.log.warning(f"periodically workers stopped forcibly [未退出任务: {pending}]")
        raise ForcedStopError(
            message=f"{op}: workers were stopped forcibly",
            details={"operation": op, "pending": pending},
        )

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        等待所有任务线程退出

        Args:
            timeout: 超时时间（秒），None表示无限等待

        Returns:
            bool: 是否全部退出
        """
        return self._all_stopped.wait(timeout)

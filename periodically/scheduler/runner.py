"""
任务执行器模块

每个注册的任务对应一个TaskRunner，在独立线程中按固定间隔触发执行。
上一次执行尚未结束时到达的触发点直接丢弃，不排队也不抢占。
"""

import threading
import time
from typing import Callable, Optional

from periodically.core.context import ExecutionContext, Seconds, to_seconds
from periodically.core.logging import get_logger

logger = get_logger(__name__)

TaskFunc = Callable[[ExecutionContext], None]


class TaskRunner:
    """
    任务执行器

    保存任务函数和执行间隔，二者在整个生命周期内不变。
    执行中标志通过非阻塞获取的锁实现原子的检查并设置，获取失败即跳过本次触发。
    """

    def __init__(self, func: TaskFunc, interval: Seconds, name: Optional[str] = None):
        """
        初始化任务执行器

        Args:
            func: 任务函数，接收执行上下文，返回值被忽略
            interval: 执行间隔，秒数或timedelta
            name: 任务名称，如果为None则使用函数名
        """
        self.func = func
        self.interval = to_seconds(interval)
        self.name = name or getattr(func, "__name__", repr(func))
        self.runs = 0
        self.skipped = 0
        self._in_progress = threading.Lock()

    def __str__(self) -> str:
        return f"TaskRunner(name={self.name}, interval={self.interval}s)"

    @property
    def in_progress(self) -> bool:
        """任务函数是否正在执行"""
        return self._in_progress.locked()

    def try_run(self, ctx: ExecutionContext) -> bool:
        """
        执行一次触发

        Args:
            ctx: 执行上下文，原样传给任务函数

        Returns:
            bool: 是否执行了任务函数，上一次执行未结束时返回False
        """
        if not self._in_progress.acquire(blocking=False):
            self.skipped += 1
            return False

        try:
            self.func(ctx)
            self.runs += 1
        finally:
            self._in_progress.release()
        return True

    def run(self, ctx: ExecutionContext) -> None:
        """
        执行循环

        第n次触发不早于启动后n个间隔。上下文取消时立即返回，
        但不会打断正在执行的任务函数。

        Args:
            ctx: 共享的执行上下文
        """
        started_at = time.monotonic()
        tick = 1
        try:
            while True:
                delay = started_at + tick * self.interval - time.monotonic()
                if ctx.wait(max(delay, 0.0)):
                    return

                self.try_run(ctx)

                # 执行期间经过的触发点全部丢弃
                elapsed = int((time.monotonic() - started_at) // self.interval)
                if elapsed > tick:
                    self.skipped += elapsed - tick
                tick = max(elapsed, tick) + 1
        finally:
            logger.debug(f"任务 {self.name} 的执行线程已退出")

    def start(self, ctx: ExecutionContext, name_prefix: str = "periodically") -> threading.Thread:
        """
        在独立线程中启动执行循环

        Args:
            ctx: 共享的执行上下文
            name_prefix: 线程名前缀

        Returns:
            threading.Thread: 已启动的线程
        """
        thread = threading.Thread(
            target=self.run,
            args=(ctx,),
            name=f"{name_prefix}-{self.name}",
            daemon=True,
        )
        thread.start()
        return thread

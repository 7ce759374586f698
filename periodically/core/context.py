"""
执行上下文模块

提供一次性关闭信号（Signal）和可取消的执行上下文（ExecutionContext），
用于在调度器与各个任务线程之间广播取消和截止时间。
"""

import threading
from datetime import timedelta
from typing import Callable, List, Optional, Union

Seconds = Union[int, float, timedelta]


def to_seconds(value: Seconds) -> float:
    """
    将时间间隔统一转换为秒

    Args:
        value: 秒数或timedelta

    Returns:
        float: 秒数
    """
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class Signal:
    """
    一次性信号

    只能被关闭一次，关闭后所有等待者被唤醒，已注册的回调各执行一次。
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def closed(self) -> bool:
        """信号是否已关闭"""
        return self._event.is_set()

    def close(self) -> bool:
        """
        关闭信号

        Returns:
            bool: 只有真正完成关闭的那次调用返回True
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        # 回调在锁外执行，允许回调中再次访问本信号
        for callback in callbacks:
            callback()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        等待信号关闭

        Args:
            timeout: 超时时间（秒），None表示无限等待

        Returns:
            bool: 信号是否已关闭
        """
        return self._event.wait(timeout)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """
        注册关闭回调，如果信号已关闭则立即执行

        Args:
            callback: 无参回调函数
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """
        移除尚未执行的关闭回调，不存在时忽略

        Args:
            callback: 之前注册的回调函数
        """
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


class ExecutionContext:
    """
    执行上下文

    携带取消信号，调度器将同一个上下文传给所有任务线程和任务函数，
    任务函数可以通过它感知关闭请求。
    """

    def __init__(self):
        self._done = Signal()
        self._timer: Optional[threading.Timer] = None
        self._deadline_exceeded = False

    @classmethod
    def with_timeout(cls, timeout: Seconds) -> "ExecutionContext":
        """
        创建在指定时间后自动取消的上下文

        Args:
            timeout: 超时时间，秒数或timedelta

        Returns:
            ExecutionContext: 带截止时间的上下文
        """
        ctx = cls()
        seconds = to_seconds(timeout)
        if seconds <= 0:
            ctx._expire()
            return ctx

        ctx._timer = threading.Timer(seconds, ctx._expire)
        ctx._timer.daemon = True
        ctx._timer.start()
        return ctx

    def _expire(self) -> None:
        if not self._done.closed:
            self._deadline_exceeded = True
        self.cancel()

    @property
    def cancelled(self) -> bool:
        """上下文是否已取消"""
        return self._done.closed

    @property
    def deadline_exceeded(self) -> bool:
        """是否因截止时间到达而取消"""
        return self._deadline_exceeded

    def cancel(self) -> None:
        """取消上下文，可重复调用"""
        if self._timer is not None:
            self._timer.cancel()
        self._done.close()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        等待上下文被取消

        Args:
            timeout: 超时时间（秒），None表示无限等待

        Returns:
            bool: 上下文是否已取消
        """
        return self._done.wait(timeout)

    def sleep(self, seconds: float) -> bool:
        """
        可被取消打断的睡眠

        Args:
            seconds: 睡眠时长（秒）

        Returns:
            bool: 完整睡眠结束返回True，被取消打断返回False
        """
        return not self._done.wait(max(seconds, 0.0))

    def add_done_callback(self, callback: Callable[[], None]) -> None:
        """
        注册取消回调

        Args:
            callback: 无参回调函数
        """
        self._done.add_callback(callback)

    def remove_done_callback(self, callback: Callable[[], None]) -> None:
        """移除尚未执行的取消回调"""
        self._done.remove_callback(callback)

    def __enter__(self) -> "ExecutionContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cancel()

import threading
import time
from datetime import timedelta

import pytest

from periodically.core.context import ExecutionContext
from periodically.scheduler.runner import TaskRunner


def _start(runner: TaskRunner, ctx: ExecutionContext) -> threading.Thread:
    return runner.start(ctx, "test")


def test_name_and_interval():
    """测试任务名称和间隔的默认值"""

    def heartbeat(ctx):
        pass

    runner = TaskRunner(heartbeat, timedelta(milliseconds=250))
    assert runner.name == "heartbeat"
    assert runner.interval == pytest.approx(0.25)
    assert TaskRunner(heartbeat, 1, name="custom").name == "custom"


def test_try_run_skips_while_in_progress():
    """测试执行中到达的触发被跳过"""
    entered = threading.Event()
    release = threading.Event()

    def blocking(ctx):
        entered.set()
        release.wait(5)

    runner = TaskRunner(blocking, 1)
    ctx = ExecutionContext()
    results = []
    worker = threading.Thread(target=lambda: results.append(runner.try_run(ctx)))
    worker.start()
    assert entered.wait(2)

    assert runner.in_progress
    assert runner.try_run(ctx) is False
    assert runner.skipped == 1

    release.set()
    worker.join(2)
    assert results == [True]
    assert runner.runs == 1
    assert not runner.in_progress


def test_try_run_passes_context():
    """测试任务函数收到执行上下文"""
    received = []
    runner = TaskRunner(received.append, 1)
    ctx = ExecutionContext()

    assert runner.try_run(ctx) is True
    assert received == [ctx]


def test_exception_is_not_caught_and_releases_guard():
    """测试任务异常向上抛出且执行中标志被释放"""

    def broken(ctx):
        raise RuntimeError("boom")

    runner = TaskRunner(broken, 1)
    with pytest.raises(RuntimeError, match="boom"):
        runner.try_run(ExecutionContext())
    assert not runner.in_progress
    assert runner.runs == 0


def test_first_run_after_one_interval():
    """测试首次执行在一个完整间隔之后"""
    fired = threading.Event()
    calls = []

    def record(ctx):
        calls.append(time.monotonic())
        fired.set()

    runner = TaskRunner(record, 0.2)
    ctx = ExecutionContext()
    started_at = time.monotonic()
    thread = _start(runner, ctx)

    assert fired.wait(2)
    ctx.cancel()
    thread.join(2)
    assert calls[0] - started_at >= 0.19


def test_ticks_never_fire_early():
    """测试第n次执行不早于启动后n个间隔"""
    calls = []
    runner = TaskRunner(lambda ctx: calls.append(time.monotonic()), 0.05)
    ctx = ExecutionContext()
    started_at = time.monotonic()
    thread = _start(runner, ctx)

    time.sleep(0.4)
    ctx.cancel()
    thread.join(2)

    assert len(calls) >= 3
    for n, called_at in enumerate(calls, start=1):
        assert called_at - started_at >= n * 0.05 - 0.01


def test_cancel_exits_without_waiting_for_tick():
    """测试取消后执行线程立即退出"""
    runner = TaskRunner(lambda ctx: None, 60)
    ctx = ExecutionContext()
    thread = _start(runner, ctx)

    ctx.cancel()
    thread.join(1)
    assert not thread.is_alive()
    assert runner.runs == 0


def test_in_flight_run_finishes_after_cancel():
    """测试取消不会打断正在执行的任务"""
    entered = threading.Event()
    release = threading.Event()
    finished = []

    def slow(ctx):
        entered.set()
        release.wait(5)
        finished.append(ctx.cancelled)

    runner = TaskRunner(slow, 0.05)
    ctx = ExecutionContext()
    thread = _start(runner, ctx)
    assert entered.wait(2)

    ctx.cancel()
    time.sleep(0.1)
    assert thread.is_alive()

    release.set()
    thread.join(2)
    assert not thread.is_alive()
    assert finished == [True]
    assert runner.runs == 1


def test_slow_task_skips_ticks_during_execution():
    """测试执行时间超过间隔时丢弃执行期间的触发"""
    active = []
    overlaps = []
    lock = threading.Lock()
    starts = []

    def slow(ctx):
        starts.append(time.monotonic())
        with lock:
            active.append(1)
            if len(active) > 1:
                overlaps.append(len(active))
        time.sleep(0.25)
        with lock:
            active.pop()

    runner = TaskRunner(slow, 0.1)
    ctx = ExecutionContext()
    thread = _start(runner, ctx)

    time.sleep(1.05)
    ctx.cancel()
    thread.join(2)

    assert overlaps == []
    assert 2 <= runner.runs <= 4
    assert runner.skipped >= 2 * (runner.runs - 1)
    for earlier, later in zip(starts, starts[1:]):
        assert 0.25 <= later - earlier < 0.38

"""
定时任务模块

提供按固定间隔执行任务的调度功能，同一任务的执行不会重叠。
"""

from periodically.scheduler.manager import Manager, ManagerState
from periodically.scheduler.runner import TaskRunner

__all__ = ["Manager", "ManagerState", "TaskRunner"]

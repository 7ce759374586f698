"""
命令行工具主入口模块

提供命令行工具的主入口，运行一个演示调度器。
"""

import sys
import time
from typing import Optional, Tuple

import click

from periodically import __version__
from periodically.core.config import Settings, load_settings
from periodically.core.context import ExecutionContext
from periodically.core.exceptions import ConfigError, ForcedStopError
from periodically.core.logging import get_logger, setup_logging
from periodically.scheduler.manager import Manager


def _make_task(interval: float, log):
    def task(ctx: ExecutionContext) -> None:
        log.info(f"running every {interval:g} seconds")

    task.__name__ = f"every_{interval:g}s"
    return task


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """periodically 周期任务调度器命令行工具"""
    pass


@main.command()
@click.option(
    "--every",
    "intervals",
    type=float,
    multiple=True,
    default=(5.0, 10.0),
    show_default=True,
    help="任务执行间隔（秒），可重复指定",
)
@click.option("--duration", type=float, default=60.0, show_default=True, help="运行时长（秒）")
@click.option("--stop-timeout", type=float, default=None, help="停止截止时间（秒），默认读取配置")
@click.option("--config", "config_path", default=None, help="配置文件路径")
def demo(
    intervals: Tuple[float, ...],
    duration: float,
    stop_timeout: Optional[float],
    config_path: Optional[str],
) -> None:
    """运行演示任务，到时后带截止时间停止"""
    try:
        settings = load_settings(Settings, config_path=config_path)
    except ConfigError as e:
        click.echo(f"错误: {e}")
        sys.exit(2)
    setup_logging(settings.log)
    log = get_logger("periodically.cli")

    manager = Manager(logger=log, config=settings.scheduler)
    try:
        for interval in intervals:
            manager.every(interval, _make_task(interval, log))
    except ValueError as e:
        click.echo(f"错误: {e}")
        sys.exit(2)

    manager.start()
    time.sleep(duration)

    timeout = stop_timeout if stop_timeout is not None else settings.scheduler.stop_timeout
    with ExecutionContext.with_timeout(timeout) as shutdown:
        try:
            manager.stop(shutdown)
        except ForcedStopError as e:
            log.error(str(e))
            click.echo(f"错误: {e}")
            sys.exit(1)

    log.info("app stopped")


if __name__ == "__main__":
    main()

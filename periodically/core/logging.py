"""
日志管理模块

调度器内部统一使用loguru记录日志。setup_logging按LogConfig重建loguru的输出，
并把指定标准库日志器的记录转交给loguru。
"""

import inspect
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from loguru import logger

from periodically.core.config import LogConfig


class InterceptHandler(logging.Handler):
    """把标准库logging的记录转交给loguru，保留原始调用位置"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 跳过logging模块自身的栈帧
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    config: LogConfig,
    intercept: Sequence[str] = ("periodically",),
) -> List[int]:
    """
    设置日志系统

    Args:
        config: 日志配置
        intercept: 需要转交给loguru的标准库日志器名称

    Returns:
        List[int]: 新添加的loguru输出ID
    """
    logger.remove()
    logger.configure(extra={"name": "periodically"})

    sink_ids = [logger.add(sys.stderr, level=config.level.value, format=config.format)]

    if config.file_path:
        log_file = Path(config.file_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(
                log_file,
                level=config.level.value,
                format=config.format,
                rotation=config.rotation,
                retention=config.retention,
                compression=config.compression,
                serialize=config.serialize,
            )
        )

    handler = InterceptHandler()
    for name in intercept:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.setLevel(logging.DEBUG)
        std_logger.propagate = False

    return sink_ids


def get_logger(name: str = "periodically"):
    """
    获取绑定了名称的loguru日志记录器

    Args:
        name: 日志记录器名称，出现在日志格式的extra[name]中

    Returns:
        logger: loguru日志记录器
    """
    return logger.bind(name=name)

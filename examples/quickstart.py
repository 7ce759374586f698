"""
快速入门示例

注册两个周期任务，运行一分钟后带5秒截止时间停止。

运行方法：
python -m examples.quickstart
"""

import time

from periodically import ExecutionContext, ForcedStopError, Manager
from periodically.core.logging import get_logger

logger = get_logger("examples.quickstart")


def main() -> None:
    manager = Manager(logger)

    manager.every(5, lambda ctx: logger.info("每5秒执行一次"), name="every_5s")

    @manager.task(10)
    def every_10s(ctx: ExecutionContext) -> None:
        logger.info("每10秒执行一次")

    manager.start()

    time.sleep(60)

    with ExecutionContext.with_timeout(5) as shutdown:
        try:
            manager.stop(shutdown)
        except ForcedStopError as e:
            logger.error(str(e))

    logger.info("app stopped")


if __name__ == "__main__":
    main()

"""
日志配置
"""
import sys
from loguru import logger
from .config import settings, Settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(config: Settings = settings) -> None:
    """按配置重建 loguru 输出"""
    logger.remove()
    
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level="DEBUG" if config.DEBUG else config.LOG_LEVEL,
        colorize=True
    )
    
    # 按天滚动，保留 30 天
    if config.LOG_TO_FILE:
        logger.add(
            config.LOG_DIR / "medinsight_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            level="DEBUG",
            format=FILE_FORMAT,
            compression="zip"
        )


setup_logging()

__all__ = ["logger", "setup_logging"]

"""
日志模块
终端显示逐档抓取进度，文件保留纯文本记录
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from stockdaily.data.models import WatchListEntry

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "{progress}<level>{message}</level>\n{exception}"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {progress}{message}\n{exception}"


def _progress_prefix(record: Dict[str, Any], colored: bool) -> str:
    """绑定了股票代码的记录加上 [市场:代码] 前缀"""
    extra = record["extra"]
    if "code" not in extra:
        return ""
    tag = f"[{extra.get('market', '?')}:{extra['code']}] "
    return f"<cyan>{tag}</cyan>" if colored else tag


def _console_format(record: Dict[str, Any]) -> str:
    return CONSOLE_FORMAT.replace("{progress}", _progress_prefix(record, colored=True))


def _file_format(record: Dict[str, Any]) -> str:
    return FILE_FORMAT.replace("{progress}", _progress_prefix(record, colored=False))


def security_logger(entry: WatchListEntry):
    """
    获取绑定了某档股票的日志器

    Args:
        entry: 监控清单项

    Returns:
        日志器实例
    """
    return logger.bind(code=entry.code, market=entry.market.value)


def setup_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
    format_string: Optional[str] = None,
) -> None:
    """
    配置日志系统

    Args:
        level: 日志级别
        log_file: 日志文件路径（空则只输出到终端）
        rotation: 日志轮转大小
        retention: 日志保留时间
        format_string: 自定义格式，同时用于终端与文件（不含进度前缀）
    """
    logger.remove()
    level = level.upper()

    logger.add(
        sys.stderr,
        level=level,
        format=format_string or _console_format,
        colorize=True,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=format_string or _file_format,
            rotation=rotation,
            retention=retention,
            compression="zip",
            encoding="utf-8",
        )

    logger.debug(f"日志系统初始化完成，级别: {level}")

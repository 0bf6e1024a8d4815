"""
工具模块
提供配置、日志、日期等通用功能
"""

from stockdaily.utils.logger import setup_logger
from stockdaily.utils.trading_date import resolve_trade_date, to_roc_period, utc_timestamp, validate_trade_date

__all__ = [
    "setup_logger",
    "resolve_trade_date",
    "to_roc_period",
    "utc_timestamp",
    "validate_trade_date",
]

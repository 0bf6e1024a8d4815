"""
数据层模块
提供行情获取、标准化与涨跌停计算
"""

from stockdaily.data.limits import PriceLimits, compute_limits
from stockdaily.data.models import LatestSnapshot, Market, PriceRecord, PriceSnapshotEntry, WatchListEntry
from stockdaily.data.normalizer import normalize_row, normalize_rows

__all__ = [
    "LatestSnapshot",
    "Market",
    "PriceRecord",
    "PriceSnapshotEntry",
    "WatchListEntry",
    "PriceLimits",
    "compute_limits",
    "normalize_row",
    "normalize_rows",
]

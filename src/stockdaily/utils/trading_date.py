"""
交易日期工具
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

# 台湾时间 UTC+8
TAIWAN_TZ = timezone(timedelta(hours=8), name="Asia/Taipei")

# 民国纪元 = 公元 - 1911
ROC_YEAR_OFFSET = 1911

DATE_FORMAT = "%Y%m%d"


def resolve_trade_date(now: Optional[datetime] = None) -> str:
    """
    取得查询日期

    以台湾时间为准，周六、周日往回退到周五。
    不处理国定假日。

    Args:
        now: 当前时间（默认系统时间；无时区视为 UTC）

    Returns:
        YYYYMMDD 格式日期字符串
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    local = now.astimezone(TAIWAN_TZ)
    weekday = local.weekday()
    if weekday == 5:
        local -= timedelta(days=1)  # 周六 -> 周五
    elif weekday == 6:
        local -= timedelta(days=2)  # 周日 -> 周五

    return local.strftime(DATE_FORMAT)


def validate_trade_date(value: str) -> str:
    """
    校验 YYYYMMDD 日期

    Raises:
        ValueError: 不是 8 位数字或不是有效日期
    """
    text = str(value).strip()
    if len(text) != 8 or not text.isdigit():
        raise ValueError(f"日期必须是 8 位数字 (YYYYMMDD): {value!r}")
    try:
        datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        raise ValueError(f"无效日期: {value!r}") from None
    return text


def to_roc_period(trade_date: str) -> str:
    """
    公元日期转为柜买中心使用的民国年月

    Example:
        >>> to_roc_period("20240105")
        '113/01'
    """
    text = validate_trade_date(trade_date)
    year = int(text[:4]) - ROC_YEAR_OFFSET
    return f"{year}/{text[4:6]}"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC 时间戳，精确到毫秒

    Example:
        2024-01-05T07:30:00.123Z
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

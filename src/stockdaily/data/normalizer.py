"""
行情记录标准化
把上游的 9 栏资料映射为 PriceRecord

栏位顺序（两个数据源一致）:
    [日期, 成交股数, 成交金额, 开盘价, 最高价, 最低价, 收盘价, 涨跌价差, 成交笔数]
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from stockdaily.data.models import Market, PriceRecord
from stockdaily.errors import NormalizationError

ROW_FIELDS = (
    "date",
    "volume",
    "turnover",
    "open",
    "high",
    "low",
    "close",
    "change",
    "transactions",
)

INTEGER_FIELDS = ("volume", "turnover", "transactions")
PRICE_FIELDS = ("open", "high", "low", "close")

THOUSANDS_SEPARATOR = ","


def _parse_decimal(value: Any, field: str) -> Decimal:
    """去除千分位后解析为 Decimal"""
    if isinstance(value, bool) or value is None:
        raise NormalizationError(f"无法解析数值: {value!r}", field=field)

    text = str(value).replace(THOUSANDS_SEPARATOR, "").strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise NormalizationError(f"无法解析数值: {value!r}", field=field) from None

    if not number.is_finite():
        raise NormalizationError(f"非有限数值: {value!r}", field=field)
    return number


def _parse_int(value: Any, field: str) -> int:
    number = _parse_decimal(value, field)
    # 1234.0 视为整数，1234.5 不接受
    if number != number.to_integral_value():
        raise NormalizationError(f"不是整数: {value!r}", field=field)
    return int(number)


def normalize_row(row: Sequence[Any], market: Optional[Market] = None) -> PriceRecord:
    """
    标准化单笔原始资料

    Args:
        row: 9 栏原始资料（字符串或数值）
        market: 来源市场，仅用于错误信息

    Returns:
        PriceRecord 对象

    Raises:
        NormalizationError: 栏位不足或数值无法解析
    """
    if not isinstance(row, (list, tuple)) or len(row) < len(ROW_FIELDS):
        source = f"{market.value} " if market else ""
        raise NormalizationError(f"{source}资料栏位不足: {row!r}")

    values = dict(zip(ROW_FIELDS, row))

    parsed = {
        "date": str(values["date"]).strip(),
        "change": values["change"],
    }
    for name in INTEGER_FIELDS:
        parsed[name] = _parse_int(values[name], name)
    for name in PRICE_FIELDS:
        parsed[name] = _parse_decimal(values[name], name)

    return PriceRecord(**parsed)


def normalize_rows(rows: Sequence[Sequence[Any]], market: Optional[Market] = None) -> PriceRecord:
    """
    取最后一笔（最新日期）资料并标准化

    上游资料假定按日期递增排列，这里不检查顺序，
    也不核对日期是否等于查询日。

    Args:
        rows: 原始资料列表
        market: 来源市场

    Returns:
        最新一笔的 PriceRecord
    """
    if not rows:
        raise NormalizationError("没有可用的资料列")
    return normalize_row(rows[-1], market)

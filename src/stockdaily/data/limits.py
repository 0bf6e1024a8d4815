"""
涨跌停价计算
以收盘价 ±10% 估算次一交易日的涨跌停价
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

LIMIT_UP_RATIO = Decimal("1.10")
LIMIT_DOWN_RATIO = Decimal("0.90")
PRICE_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class PriceLimits:
    """涨跌停价"""
    limit_up: Decimal
    limit_down: Decimal


def _as_decimal(price: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(price, Decimal):
        value = price
    else:
        # float 先转字符串，避免二进制误差（33.35 -> 33.35 而非 33.3499...）
        try:
            value = Decimal(str(price))
        except InvalidOperation:
            raise ValueError(f"收盘价无效: {price!r}") from None
    if not value.is_finite():
        raise ValueError(f"收盘价必须为有限数值: {price!r}")
    return value


def compute_limits(close: Union[Decimal, int, float, str]) -> PriceLimits:
    """
    计算涨跌停价

    采用精确的 Decimal 运算，四舍五入（ROUND_HALF_UP）到小数点后两位。
    不处理升降单位（tick size）。

    Args:
        close: 收盘价

    Returns:
        PriceLimits 对象

    Raises:
        ValueError: 收盘价不是有限数值
    """
    price = _as_decimal(close)
    return PriceLimits(
        limit_up=(price * LIMIT_UP_RATIO).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP),
        limit_down=(price * LIMIT_DOWN_RATIO).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP),
    )

"""
数据模型模块
定义监控清单、标准化行情记录与快照结构
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Union


class Market(Enum):
    """
    上市市场

    决定使用哪个上游数据源。
    """
    TSE = "tse"  # 上市，证交所 TWSE
    OTC = "otc"  # 上柜，柜买中心 TPEx

    @classmethod
    def parse(cls, value: Union[str, "Market"]) -> "Market":
        """从字符串解析市场，大小写不敏感"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"未知市场: {value!r}，可选值: {valid}") from None


@dataclass(frozen=True)
class WatchListEntry:
    """监控清单中的一档股票"""
    code: str
    name: str
    market: Market

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "name": self.name, "market": self.market.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatchListEntry":
        """
        从字典创建

        Args:
            data: 包含 code / name / market 的字典

        Returns:
            WatchListEntry 对象
        """
        code = str(data.get("code") or "").strip()
        if not code:
            raise ValueError(f"监控清单项缺少 code: {data}")
        return cls(
            code=code,
            name=str(data.get("name") or code),
            market=Market.parse(data.get("market", "")),
        )


def _to_number(value: Decimal) -> Union[int, float]:
    """Decimal 转为 JSON 数值"""
    if value.as_tuple().exponent >= 0:
        return int(value)
    return float(value)


@dataclass
class PriceRecord:
    """
    标准化日行情记录

    两个数据源的 9 栏原始资料都会被映射成此结构。
    date 保留上游格式（如民国年 113/01/05），不做转换；
    change 原样透传，不做解析。
    """
    date: str
    volume: int
    turnover: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    change: Any
    transactions: int

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "date": self.date,
            "volume": self.volume,
            "turnover": self.turnover,
            "open": _to_number(self.open),
            "high": _to_number(self.high),
            "low": _to_number(self.low),
            "close": _to_number(self.close),
            "change": self.change,
            "transactions": self.transactions,
        }


@dataclass
class PriceSnapshotEntry(PriceRecord):
    """
    快照中的单档股票

    在 PriceRecord 基础上加入清单元数据、涨跌停价与抓取时间。
    """
    code: str = ""
    name: str = ""
    market: Market = Market.TSE
    limit_up: Decimal = Decimal("0")
    limit_down: Decimal = Decimal("0")
    fetched_at: str = ""

    @classmethod
    def build(
        cls,
        entry: WatchListEntry,
        record: PriceRecord,
        limit_up: Decimal,
        limit_down: Decimal,
        fetched_at: str,
    ) -> "PriceSnapshotEntry":
        """合并清单项、行情记录与涨跌停价"""
        values = {f.name: getattr(record, f.name) for f in fields(PriceRecord)}
        return cls(
            **values,
            code=entry.code,
            name=entry.name,
            market=entry.market,
            limit_up=limit_up,
            limit_down=limit_down,
            fetched_at=fetched_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，键名与输出 JSON 一致"""
        data: Dict[str, Any] = {
            "code": self.code,
            "name": self.name,
            "market": self.market.value,
        }
        data.update(super().to_dict())
        data["limitUp"] = _to_number(self.limit_up)
        data["limitDown"] = _to_number(self.limit_down)
        data["fetchedAt"] = self.fetched_at
        return data


@dataclass
class LatestSnapshot:
    """最新快照指针"""
    date: str
    updated_at: str
    stocks: List[PriceSnapshotEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "updatedAt": self.updated_at,
            "stocks": [s.to_dict() for s in self.stocks],
        }

"""
证交所 (TWSE) 数据提供者
上市股票个股日成交资讯
"""

from typing import Dict, List, Tuple

from stockdaily.data.models import Market
from stockdaily.data.providers.base import DataProvider, RawPriceRow
from stockdaily.errors import RetrievalError
from stockdaily.utils.trading_date import validate_trade_date


class TWSEProvider(DataProvider):
    """
    证交所数据提供者

    响应格式:
        {"stat": "OK", "fields": [...], "data": [["113/01/02", "12,345", ...], ...]}

    data 为查询日期所在月份的每日资料，按日期递增。
    """

    BASE_URL = "https://www.twse.com.tw/exchangeReport/STOCK_DAY"

    @property
    def name(self) -> str:
        return "twse"

    @property
    def market(self) -> Market:
        return Market.TSE

    def build_request(self, code: str, trade_date: str) -> Tuple[str, Dict[str, str]]:
        params = {
            "response": "json",
            "date": validate_trade_date(trade_date),
            "stockNo": code,
        }
        return self.BASE_URL, params

    def parse_payload(self, code: str, text: str) -> List[RawPriceRow]:
        data = self._decode_json(code, text)

        stat = data.get("stat")
        if stat != "OK":
            raise RetrievalError(code, f"无资料 (stat={stat})")

        rows = data.get("data")
        if not isinstance(rows, list) or not rows:
            raise RetrievalError(code, "无资料")
        return rows

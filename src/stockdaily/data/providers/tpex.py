"""
柜买中心 (TPEx) 数据提供者
上柜股票个股日成交资讯
"""

from typing import Dict, List, Tuple

from stockdaily.data.models import Market
from stockdaily.data.providers.base import DataProvider, RawPriceRow
from stockdaily.errors import RetrievalError
from stockdaily.utils.trading_date import to_roc_period

HTML_PREFIXES = ("<!doctype", "<html")


class TPExProvider(DataProvider):
    """
    柜买中心数据提供者

    查询参数使用民国年月（如 113/01），响应格式:
        {"stkNo": "5410", "reportDate": "113/01", "aaData": [["113/01/02", "1,234", ...], ...]}

    服务维护或被限流时会返回 HTML 页面而不是 JSON。
    """

    BASE_URL = "https://www.tpex.org.tw/web/stock/aftertrading/daily_trading_info/st43_result.php"

    @property
    def name(self) -> str:
        return "tpex"

    @property
    def market(self) -> Market:
        return Market.OTC

    def build_request(self, code: str, trade_date: str) -> Tuple[str, Dict[str, str]]:
        params = {
            "l": "zh-tw",
            "d": to_roc_period(trade_date),
            "stkno": code,
        }
        return self.BASE_URL, params

    def parse_payload(self, code: str, text: str) -> List[RawPriceRow]:
        if text.lstrip()[:9].lower().startswith(HTML_PREFIXES):
            raise RetrievalError(code, "API 暂时无法使用")

        data = self._decode_json(code, text)

        rows = data.get("aaData")
        if not isinstance(rows, list) or not rows:
            raise RetrievalError(code, "无资料")
        return rows

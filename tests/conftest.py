"""
测试全局配置

提供假数据源、内存存储与常用的原始资料样本，测试不访问网络。
"""

import asyncio
import copy
import json
from typing import Any, Dict, List, Optional

import pytest

from stockdaily.data.models import Market, WatchListEntry
from stockdaily.data.providers.base import DataProvider
from stockdaily.errors import RetrievalError
from stockdaily.storage.base import ArtifactStore

CONFIG_ENV_VARS = (
    "STOCK_DATA_DIR",
    "STOCK_REQUEST_DELAY",
    "STOCK_USER_AGENT",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """清除会影响配置的环境变量"""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def run_async(coro):
    """在同步上下文中执行协程"""
    return asyncio.run(coro)


def make_row(
    date: str = "113/01/05",
    close: str = "10.80",
    change: str = "+0.30",
) -> List[str]:
    """证交所格式的单笔资料"""
    return [date, "12,345", "678,900", "10.50", "11.00", "10.00", close, change, "321"]


class FakeProvider(DataProvider):
    """
    模拟数据源

    responses: {code: 资料列表 | Exception | None}，None 视为无资料。
    """

    def __init__(self, market: Market, responses: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._market = market
        self.responses = responses or {}
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return f"fake_{self._market.value}"

    @property
    def market(self) -> Market:
        return self._market

    def build_request(self, code, trade_date):
        return "http://fake.local", {"code": code, "date": trade_date}

    def parse_payload(self, code, text):
        return []

    async def fetch(self, code, trade_date):
        self.calls.append((code, trade_date))
        response = self.responses.get(code)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise RetrievalError(code, "无资料")
        return response


class MemoryStore(ArtifactStore):
    """内存存储，可指定写入失败的资料名称"""

    def __init__(self, fail_on=(), initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})
        self.fail_on = set(fail_on)
        self.writes: List[str] = []

    def read(self, name):
        return copy.deepcopy(self.data.get(name))

    def write(self, name, data):
        if name in self.fail_on:
            raise OSError(f"No space left on device: {name}")
        # 与文件存储一致：内容必须可 JSON 序列化
        self.data[name] = json.loads(json.dumps(data, ensure_ascii=False))
        self.writes.append(name)

    def exists(self, name):
        return name in self.data

    def names(self):
        return sorted(self.data)


@pytest.fixture
def watch_list():
    return [
        WatchListEntry("2324", "仁寶", Market.TSE),
        WatchListEntry("5410", "國眾", Market.OTC),
        WatchListEntry("5880", "合庫金", Market.TSE),
    ]


@pytest.fixture
def fixed_clock():
    return lambda: "2024-01-05T07:30:00.000Z"

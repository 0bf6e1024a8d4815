"""
数据提供者基类
定义日行情获取的统一接口
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp
from loguru import logger

from stockdaily.data.models import Market
from stockdaily.errors import RetrievalError

RawPriceRow = Sequence[Any]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)


class DataProvider(ABC):
    """
    数据提供者抽象基类

    每个上市市场对应一个实现，负责：
    - 把 YYYYMMDD 查询日期转换为该数据源要求的格式
    - 发送 HTTP 请求
    - 拆开响应外壳，返回统一的 9 栏原始资料列表

    标准化由 normalizer 负责，提供者不解析数值。
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        初始化数据提供者

        Args:
            user_agent: 请求使用的 User-Agent
            session: 外部传入的 HTTP 会话（可选，传入时不负责关闭）
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self._session = session
        self._owns_session = session is None

    @property
    @abstractmethod
    def name(self) -> str:
        """数据源名称"""
        pass

    @property
    @abstractmethod
    def market(self) -> Market:
        """对应的上市市场"""
        pass

    @abstractmethod
    def build_request(self, code: str, trade_date: str) -> Tuple[str, Dict[str, str]]:
        """
        构建请求

        Args:
            code: 股票代码
            trade_date: YYYYMMDD 查询日期

        Returns:
            (url, query 参数)
        """
        pass

    @abstractmethod
    def parse_payload(self, code: str, text: str) -> List[RawPriceRow]:
        """
        解析响应正文

        Args:
            code: 股票代码
            text: 响应正文

        Returns:
            原始资料列表（按日期递增）

        Raises:
            RetrievalError: 响应无法解析、结构异常或无资料
        """
        pass

    async def fetch(self, code: str, trade_date: str) -> List[RawPriceRow]:
        """
        获取某档股票在查询日期所属区间的日行情

        Args:
            code: 股票代码
            trade_date: YYYYMMDD 查询日期

        Returns:
            原始资料列表

        Raises:
            RetrievalError: 获取失败或无资料
        """
        url, params = self.build_request(code, trade_date)
        text = await self._request_text(code, url, params)
        return self.parse_payload(code, text)

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """关闭 HTTP 会话"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _request_text(self, code: str, url: str, params: Dict[str, str]) -> str:
        """
        发送 GET 请求并返回正文

        Raises:
            RetrievalError: 网络错误、非 200 响应或正文无法解码
        """
        session = await self._get_session()
        headers = {"User-Agent": self.user_agent}
        logger.debug(f"{self.name} 请求 {url} {params}")

        try:
            async with session.get(url, params=params, headers=headers) as response:
                if response.status != 200:
                    raise RetrievalError(code, f"{self.name} API 请求失败: HTTP {response.status}")
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RetrievalError(code, f"{self.name} 网络请求错误: {e}") from e
        except UnicodeDecodeError as e:
            # 维护页面常以 Big5 返回且未声明 charset
            raise RetrievalError(code, f"{self.name} 响应编码无法解析: {e}") from e

    def _decode_json(self, code: str, text: str) -> Dict[str, Any]:
        """解析 JSON 外壳，必须是对象"""
        try:
            data = json.loads(text)
        except ValueError:
            raise RetrievalError(code, f"{self.name} 响应不是有效的 JSON") from None
        if not isinstance(data, dict):
            raise RetrievalError(code, f"{self.name} 响应结构异常: {type(data).__name__}")
        return data

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self):
        return f"DataProvider({self.name})"

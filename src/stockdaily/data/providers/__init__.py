"""
数据提供者模块
按上市市场选择对应的数据源
"""

from typing import Dict, Optional

from stockdaily.data.models import Market
from stockdaily.data.providers.base import DEFAULT_USER_AGENT, DataProvider, RawPriceRow
from stockdaily.data.providers.tpex import TPExProvider
from stockdaily.data.providers.twse import TWSEProvider

PROVIDERS = {
    Market.TSE: TWSEProvider,
    Market.OTC: TPExProvider,
}


def create_providers(user_agent: Optional[str] = None) -> Dict[Market, DataProvider]:
    """
    为每个市场创建数据提供者

    Args:
        user_agent: 请求使用的 User-Agent

    Returns:
        {Market: DataProvider} 字典
    """
    return {market: cls(user_agent=user_agent) for market, cls in PROVIDERS.items()}


__all__ = [
    "DEFAULT_USER_AGENT",
    "DataProvider",
    "RawPriceRow",
    "TPExProvider",
    "TWSEProvider",
    "PROVIDERS",
    "create_providers",
]

"""
配置管理模块
统一管理数据源、存储、日志与监控清单配置
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from stockdaily.data.models import Market, WatchListEntry
from stockdaily.data.providers.base import DEFAULT_USER_AGENT

# 默认监控清单
DEFAULT_WATCH_LIST = (
    WatchListEntry("00918", "大華優利高填息30", Market.TSE),
    WatchListEntry("00929", "復華台灣科技優息", Market.TSE),
    WatchListEntry("00922", "國泰台灣領袖50", Market.TSE),
    WatchListEntry("1229", "聯華", Market.TSE),
    WatchListEntry("2324", "仁寶", Market.TSE),
    WatchListEntry("5880", "合庫金", Market.TSE),
    WatchListEntry("5410", "國眾", Market.OTC),
    WatchListEntry("6186", "新潤", Market.OTC),
)


def _coerce(key: str, default: Any, value: Any) -> Any:
    """按默认值的类型转换 YAML 中的值"""
    if isinstance(default, str):
        return "" if value is None else str(value)
    if isinstance(value, bool):
        raise ValueError(f"配置项 {key} 不是数值: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"配置项 {key} 不是数值: {value!r}") from None


@dataclass
class ProviderConfig:
    """数据源配置"""
    user_agent: str = DEFAULT_USER_AGENT
    request_delay: float = 0.8


@dataclass
class StorageConfig:
    """存储配置"""
    output_dir: str = "./public/stock-data"


@dataclass
class LoggingConfig:
    """日志配置"""
    level: str = "INFO"
    file: str = ""
    rotation: str = "10 MB"
    retention: str = "1 week"


@dataclass
class Config:
    """
    系统配置

    优先级：环境变量 > 配置文件 > 默认值
    """
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    watch_list: List[WatchListEntry] = field(default_factory=lambda: list(DEFAULT_WATCH_LIST))

    def __post_init__(self):
        """从环境变量加载配置"""
        self.apply_env()

    def apply_env(self) -> None:
        """用环境变量覆盖配置"""
        self.storage.output_dir = os.getenv("STOCK_DATA_DIR", self.storage.output_dir)
        self.provider.user_agent = os.getenv("STOCK_USER_AGENT", self.provider.user_agent)

        delay = os.getenv("STOCK_REQUEST_DELAY")
        if delay:
            self.provider.request_delay = float(delay)

        self.logging.level = os.getenv("LOG_LEVEL", self.logging.level)
        self.logging.file = os.getenv("LOG_FILE", self.logging.file)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """
        从 YAML 文件加载配置

        Args:
            path: 配置文件路径

        Returns:
            Config 对象
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        从字典加载配置

        Args:
            data: 配置字典

        Returns:
            Config 对象

        Raises:
            ValueError: 未知配置项、数值无法转换或监控清单项无效
        """
        config = cls()

        for section in ("provider", "storage", "logging"):
            if section in data:
                target = getattr(config, section)
                for key, value in (data[section] or {}).items():
                    if not hasattr(target, key):
                        raise ValueError(f"未知配置项: {section}.{key}")
                    setattr(target, key, _coerce(f"{section}.{key}", getattr(target, key), value))

        if "watch_list" in data:
            config.watch_list = [WatchListEntry.from_dict(item) for item in data["watch_list"] or []]

        # 配置文件载入后，环境变量仍然优先
        config.apply_env()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "provider": {
                "user_agent": self.provider.user_agent,
                "request_delay": self.provider.request_delay,
            },
            "storage": {
                "output_dir": self.storage.output_dir,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "rotation": self.logging.rotation,
                "retention": self.logging.retention,
            },
            "watch_list": [entry.to_dict() for entry in self.watch_list],
        }

    def save_yaml(self, path: str) -> None:
        """保存配置到 YAML 文件"""
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> Config:
    """
    加载配置

    Args:
        config_path: YAML 配置文件路径
        env_file: .env 文件路径

    Returns:
        Config 对象
    """
    # 加载 .env 文件
    if env_file:
        load_dotenv(env_file)
    else:
        default_env = Path(".env")
        if default_env.exists():
            load_dotenv(default_env)

    if config_path and Path(config_path).exists():
        return Config.from_yaml(config_path)
    return Config()

"""
异常定义
区分可恢复的单檔错误与终止运行的持久化错误
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """单檔抓取失败类型"""
    RETRIEVAL = "retrieval"
    NORMALIZATION = "normalization"


class PersistStep(Enum):
    """持久化步骤（按执行顺序）"""
    SNAPSHOT = "snapshot"
    LATEST = "latest"
    HISTORY = "history"


class StockDataError(Exception):
    """所有领域异常的基类"""


class RetrievalError(StockDataError):
    """
    上游数据获取失败

    包括网络不可达、非 200 响应、响应结构异常或无资料。
    调用方记录后跳过该股票。
    """

    kind = ErrorKind.RETRIEVAL

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class NormalizationError(StockDataError):
    """数值字段无法解析"""

    kind = ErrorKind.NORMALIZATION

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)


class PersistenceError(StockDataError):
    """
    存储写入失败

    不会被恢复：后续步骤不再执行，运行以非零状态结束。
    """

    def __init__(self, step: PersistStep, message: str):
        self.step = step
        self.message = message
        super().__init__(f"[{step.value}] {message}")

"""
存储后端基类
按名称读写整份资料（artifact）
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional


class ArtifactStore(ABC):
    """
    存储后端抽象基类

    所有资料位于同一个命名空间下，以名称区分。
    写入总是整份覆盖。
    """

    @abstractmethod
    def read(self, name: str) -> Optional[Any]:
        """
        读取资料

        Args:
            name: 资料名称

        Returns:
            反序列化后的内容，不存在返回 None
        """
        pass

    @abstractmethod
    def write(self, name: str, data: Any) -> None:
        """
        写入资料（整份覆盖）

        Args:
            name: 资料名称
            data: 可 JSON 序列化的内容

        Raises:
            OSError: 写入失败
        """
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        """检查资料是否存在"""
        pass

    @abstractmethod
    def names(self) -> List[str]:
        """列出所有资料名称"""
        pass

"""
JSON 文件存储后端
每份资料保存为目录下的一个 .json 文件
"""

import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

from loguru import logger

from stockdaily.storage.base import ArtifactStore


class JSONFileStore(ArtifactStore):
    """
    JSON 文件存储

    特点：
    - 名称 name 对应文件 <directory>/<name>.json
    - 目录在首次写入时自动创建
    - 先写临时文件再替换，写入失败不会留下半份文件
    - UTF-8、2 空格缩进，保留中文
    """

    SUFFIX = ".json"

    def __init__(self, directory: Union[str, Path], indent: int = 2):
        """
        初始化文件存储

        Args:
            directory: 存储目录
            indent: JSON 缩进
        """
        self.directory = Path(directory)
        self.indent = indent

    def path_for(self, name: str) -> Path:
        """资料名称对应的文件路径"""
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"无效的资料名称: {name!r}")
        return self.directory / f"{name}{self.SUFFIX}"

    def read(self, name: str) -> Optional[Any]:
        path = self.path_for(name)
        if not path.is_file():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, name: str, data: Any) -> None:
        path = self.path_for(name)
        self.directory.mkdir(parents=True, exist_ok=True)

        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=self.indent)
                f.write("\n")
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"已写入 {path}")

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def names(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{self.SUFFIX}") if p.is_file())

    def __repr__(self):
        return f"JSONFileStore({self.directory})"

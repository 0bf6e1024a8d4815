"""
快照持久化
维护三份资料：当日快照、最新指针、历史日期索引
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from stockdaily.data.models import LatestSnapshot, PriceSnapshotEntry
from stockdaily.errors import PersistenceError, PersistStep
from stockdaily.storage.base import ArtifactStore
from stockdaily.utils.trading_date import utc_timestamp, validate_trade_date

LATEST_ARTIFACT = "latest"
HISTORY_ARTIFACT = "history"


class SnapshotPersister:
    """
    快照持久化

    依序执行三个步骤，任一步失败立即抛出 PersistenceError，
    后续步骤不再执行，已完成的步骤不回滚：

    1. 写入 <trade_date>：当日快照，无条件覆盖
    2. 写入 latest：{date, updatedAt, stocks}，即使快照为空也覆盖
    3. 更新 history：日期不在索引中才插入并按降序重写，已存在则不动
    """

    def __init__(
        self,
        store: ArtifactStore,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self.store = store
        self.clock = clock

    def persist(self, snapshot: Sequence[PriceSnapshotEntry], trade_date: str) -> None:
        """
        保存快照

        Args:
            snapshot: 快照项列表
            trade_date: YYYYMMDD 交易日期

        Raises:
            ValueError: 日期格式错误（此时不会写入任何资料）
            PersistenceError: 某一步写入失败
        """
        trade_date = validate_trade_date(trade_date)
        stocks = list(snapshot)

        self._write(PersistStep.SNAPSHOT, trade_date, [s.to_dict() for s in stocks])
        logger.info(f"💾 已储存: {trade_date} ({len(stocks)} 档)")

        latest = LatestSnapshot(date=trade_date, updated_at=self.clock(), stocks=stocks)
        self._write(PersistStep.LATEST, LATEST_ARTIFACT, latest.to_dict())
        logger.info(f"💾 已更新: {LATEST_ARTIFACT}")

        if self._update_history(trade_date):
            logger.info(f"💾 已加入历史索引: {trade_date}")
        else:
            logger.info(f"历史索引已包含 {trade_date}，不需更新")

    def _write(self, step: PersistStep, name: str, data: Any) -> None:
        try:
            self.store.write(name, data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"写入 {name} 失败: {e}")
            raise PersistenceError(step, f"写入 {name} 失败: {e}") from e

    def _update_history(self, trade_date: str) -> bool:
        """
        把日期加入历史索引

        Returns:
            是否重写了索引
        """
        history = self.load_history()
        if trade_date in history:
            return False

        updated = sorted(set(history) | {trade_date}, reverse=True)
        self._write(PersistStep.HISTORY, HISTORY_ARTIFACT, updated)
        return True

    def load_history(self) -> List[str]:
        """
        读取历史日期索引

        Returns:
            日期列表（降序），不存在时为空列表
        """
        data = self._read(PersistStep.HISTORY, HISTORY_ARTIFACT)
        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError(PersistStep.HISTORY, f"{HISTORY_ARTIFACT} 格式异常，应为数组")
        return [str(d) for d in data]

    def load_latest(self) -> Optional[Dict[str, Any]]:
        """读取最新快照指针"""
        return self._read(PersistStep.LATEST, LATEST_ARTIFACT)

    def load_snapshot(self, trade_date: str) -> Optional[List[Dict[str, Any]]]:
        """读取指定日期的快照"""
        trade_date = validate_trade_date(trade_date)
        return self._read(PersistStep.SNAPSHOT, trade_date)

    def _read(self, step: PersistStep, name: str) -> Optional[Any]:
        try:
            return self.store.read(name)
        except (OSError, ValueError) as e:
            raise PersistenceError(step, f"读取 {name} 失败: {e}") from e

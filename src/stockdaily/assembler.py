"""
快照组装
逐档抓取监控清单，标准化后合并为当日快照
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional, Sequence

from loguru import logger

from stockdaily.data.limits import compute_limits
from stockdaily.data.models import Market, PriceRecord, PriceSnapshotEntry, WatchListEntry
from stockdaily.data.normalizer import normalize_rows
from stockdaily.data.providers.base import DataProvider
from stockdaily.errors import ErrorKind, NormalizationError, RetrievalError
from stockdaily.utils.logger import security_logger
from stockdaily.utils.trading_date import utc_timestamp

DEFAULT_REQUEST_DELAY = 0.8


@dataclass(frozen=True)
class FetchResult:
    """
    单档抓取结果

    成功时 record 有值；失败时 error_kind / error 说明原因。
    """
    entry: WatchListEntry
    record: Optional[PriceRecord] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def success(cls, entry: WatchListEntry, record: PriceRecord) -> "FetchResult":
        return cls(entry=entry, record=record)

    @classmethod
    def failure(cls, entry: WatchListEntry, kind: ErrorKind, error: str) -> "FetchResult":
        return cls(entry=entry, error_kind=kind, error=error)


@dataclass
class AssemblyReport:
    """一次组装的结果：成功的快照项与被跳过的股票"""
    trade_date: str
    entries: List[PriceSnapshotEntry] = field(default_factory=list)
    skipped: List[FetchResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries) + len(self.skipped)


class SnapshotAssembler:
    """
    快照组装器

    按清单顺序逐档处理，不并发，不排序，不去重。
    抓取或标准化失败的股票直接跳过，不写入空值。
    每档之间固定等待 request_delay 秒，避免被上游限流。
    """

    def __init__(
        self,
        providers: Mapping[Market, DataProvider],
        request_delay: float = DEFAULT_REQUEST_DELAY,
        clock: Callable[[], str] = utc_timestamp,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        初始化组装器

        Args:
            providers: {Market: DataProvider} 映射
            request_delay: 两档之间的等待秒数
            clock: 返回抓取时间戳的函数
            sleep: 异步等待函数（测试时可替换）
        """
        self.providers = dict(providers)
        self.request_delay = request_delay
        self.clock = clock
        self.sleep = sleep

    async def fetch_record(self, entry: WatchListEntry, trade_date: str) -> FetchResult:
        """
        抓取并标准化单档股票

        只有 RetrievalError / NormalizationError 会被转为失败结果，
        其余异常直接向上抛出，终止整个运行。
        """
        provider = self.providers.get(entry.market)
        if provider is None:
            return FetchResult.failure(
                entry, ErrorKind.RETRIEVAL, f"没有 {entry.market.value} 市场的数据源"
            )

        try:
            rows = await provider.fetch(entry.code, trade_date)
            record = normalize_rows(rows, entry.market)
        except (RetrievalError, NormalizationError) as e:
            return FetchResult.failure(entry, e.kind, str(e))

        return FetchResult.success(entry, record)

    async def assemble_report(
        self,
        watch_list: Sequence[WatchListEntry],
        trade_date: str,
    ) -> AssemblyReport:
        """
        组装快照并保留跳过原因

        Args:
            watch_list: 监控清单
            trade_date: YYYYMMDD 查询日期

        Returns:
            AssemblyReport 对象
        """
        report = AssemblyReport(trade_date=trade_date)

        for index, entry in enumerate(watch_list):
            if index > 0 and self.request_delay > 0:
                await self.sleep(self.request_delay)

            log = security_logger(entry)
            log.info(f"🔍 {entry.name}")
            result = await self.fetch_record(entry, trade_date)

            if not result.ok:
                log.warning(f"⚠️ 跳过: {result.error}")
                report.skipped.append(result)
                continue

            record = result.record
            limits = compute_limits(record.close)
            report.entries.append(
                PriceSnapshotEntry.build(
                    entry,
                    record,
                    limit_up=limits.limit_up,
                    limit_down=limits.limit_down,
                    fetched_at=self.clock(),
                )
            )
            log.info(f"✅ 收盘: {record.close} | 涨跌: {record.change}")

        logger.info(f"抓取完成: {len(report.entries)}/{report.total} 档")
        return report

    async def assemble(
        self,
        watch_list: Sequence[WatchListEntry],
        trade_date: str,
    ) -> List[PriceSnapshotEntry]:
        """
        组装快照

        Returns:
            成功标准化的快照项，顺序与清单一致
        """
        report = await self.assemble_report(watch_list, trade_date)
        return report.entries

    async def close(self) -> None:
        """关闭所有数据提供者的 HTTP 会话"""
        for provider in self.providers.values():
            await provider.close()

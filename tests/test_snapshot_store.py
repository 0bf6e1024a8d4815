"""
快照持久化测试

覆盖范围：
- 三份资料的内容与格式
- 同日重跑覆盖（幂等）
- 历史索引排序、去重、只增不删
- 写入失败时立即中止（fail fast）
- JSONFileStore 文件读写
"""

import json
from decimal import Decimal

import pytest

from conftest import MemoryStore, make_row
from stockdaily.data.models import Market, PriceSnapshotEntry, WatchListEntry
from stockdaily.data.normalizer import normalize_row
from stockdaily.errors import PersistenceError, PersistStep
from stockdaily.storage import HISTORY_ARTIFACT, LATEST_ARTIFACT, JSONFileStore, SnapshotPersister

UPDATED_AT = "2024-01-05T07:31:00.000Z"


def make_entry(code="2324", name="仁寶", market=Market.TSE, close="30.80") -> PriceSnapshotEntry:
    record = normalize_row(make_row(close=close))
    price = Decimal(close)
    return PriceSnapshotEntry.build(
        WatchListEntry(code, name, market),
        record,
        limit_up=(price * Decimal("1.1")).quantize(Decimal("0.01")),
        limit_down=(price * Decimal("0.9")).quantize(Decimal("0.01")),
        fetched_at="2024-01-05T07:30:00.000Z",
    )


def make_persister(store):
    return SnapshotPersister(store, clock=lambda: UPDATED_AT)


class TestPersist:
    """三份资料"""

    def test_writes_all_three_artifacts_in_order(self):
        store = MemoryStore()
        make_persister(store).persist([make_entry()], "20240105")

        assert store.writes == ["20240105", LATEST_ARTIFACT, HISTORY_ARTIFACT]

    def test_dated_snapshot_content(self):
        store = MemoryStore()
        make_persister(store).persist([make_entry(), make_entry("5410", "國眾", Market.OTC, "45.80")], "20240105")

        snapshot = store.data["20240105"]
        assert [s["code"] for s in snapshot] == ["2324", "5410"]
        first = snapshot[0]
        assert list(first) == [
            "code", "name", "market", "date", "volume", "turnover", "open", "high",
            "low", "close", "change", "transactions", "limitUp", "limitDown", "fetchedAt",
        ]
        assert first["market"] == "tse"
        assert first["volume"] == 12345
        assert first["close"] == 30.8
        assert first["limitUp"] == 33.88
        assert first["limitDown"] == 27.72
        assert first["change"] == "+0.30"

    def test_latest_pointer(self):
        store = MemoryStore()
        make_persister(store).persist([make_entry()], "20240105")

        latest = store.data[LATEST_ARTIFACT]
        assert latest["date"] == "20240105"
        assert latest["updatedAt"] == UPDATED_AT
        assert latest["stocks"] == store.data["20240105"]

    def test_empty_snapshot_still_overwrites_latest(self):
        store = MemoryStore(initial={LATEST_ARTIFACT: {"date": "20240104", "updatedAt": "x", "stocks": [{"code": "1"}]}})
        make_persister(store).persist([], "20240105")

        assert store.data["20240105"] == []
        assert store.data[LATEST_ARTIFACT] == {"date": "20240105", "updatedAt": UPDATED_AT, "stocks": []}
        assert store.data[HISTORY_ARTIFACT] == ["20240105"]

    def test_invalid_date_writes_nothing(self):
        store = MemoryStore()
        with pytest.raises(ValueError):
            make_persister(store).persist([make_entry()], "2024-01-05")
        assert store.writes == []


class TestIdempotentRerun:
    """同日重跑"""

    def test_second_run_replaces_snapshot(self):
        store = MemoryStore()
        persister = make_persister(store)

        persister.persist([make_entry(close="30.80")], "20240105")
        persister.persist([make_entry(close="31.00"), make_entry("5880", "合庫金")], "20240105")

        snapshot = store.data["20240105"]
        assert len(snapshot) == 2
        assert snapshot[0]["close"] == 31.0
        assert store.data[HISTORY_ARTIFACT] == ["20240105"]

    def test_history_not_rewritten_when_date_present(self):
        store = MemoryStore()
        persister = make_persister(store)

        persister.persist([make_entry()], "20240105")
        persister.persist([make_entry()], "20240105")

        assert store.writes.count(HISTORY_ARTIFACT) == 1
        assert store.writes.count("20240105") == 2
        assert store.writes.count(LATEST_ARTIFACT) == 2


class TestHistoryIndex:
    """历史日期索引"""

    def test_sorted_descending(self):
        store = MemoryStore()
        persister = make_persister(store)

        for date in ("20240103", "20240101", "20240105"):
            persister.persist([make_entry()], date)

        assert store.data[HISTORY_ARTIFACT] == ["20240105", "20240103", "20240101"]
        assert persister.load_history() == ["20240105", "20240103", "20240101"]

    def test_existing_entries_kept(self):
        store = MemoryStore(initial={HISTORY_ARTIFACT: ["20231229", "20231228"]})
        make_persister(store).persist([make_entry()], "20240102")

        assert store.data[HISTORY_ARTIFACT] == ["20240102", "20231229", "20231228"]

    def test_unsorted_existing_index_is_sorted_and_deduplicated(self):
        store = MemoryStore(initial={HISTORY_ARTIFACT: ["20240101", "20240103", "20240101"]})
        make_persister(store).persist([make_entry()], "20240102")

        assert store.data[HISTORY_ARTIFACT] == ["20240103", "20240102", "20240101"]

    def test_missing_index_is_empty(self):
        assert make_persister(MemoryStore()).load_history() == []

    def test_corrupt_index_fails_at_history_step(self):
        store = MemoryStore(initial={HISTORY_ARTIFACT: {"not": "a list"}})

        with pytest.raises(PersistenceError) as exc_info:
            make_persister(store).persist([make_entry()], "20240105")

        assert exc_info.value.step == PersistStep.HISTORY
        assert store.writes == ["20240105", LATEST_ARTIFACT]


class TestFailFast:
    """写入失败立即中止"""

    def test_latest_failure_skips_history(self):
        store = MemoryStore(fail_on={LATEST_ARTIFACT})

        with pytest.raises(PersistenceError) as exc_info:
            make_persister(store).persist([make_entry()], "20240105")

        assert exc_info.value.step == PersistStep.LATEST
        assert "20240105" in store.data
        assert HISTORY_ARTIFACT not in store.data
        assert store.writes == ["20240105"]

    def test_snapshot_failure_skips_everything(self):
        store = MemoryStore(fail_on={"20240105"})

        with pytest.raises(PersistenceError) as exc_info:
            make_persister(store).persist([make_entry()], "20240105")

        assert exc_info.value.step == PersistStep.SNAPSHOT
        assert store.writes == []

    def test_history_failure(self):
        store = MemoryStore(fail_on={HISTORY_ARTIFACT})

        with pytest.raises(PersistenceError) as exc_info:
            make_persister(store).persist([make_entry()], "20240105")

        assert exc_info.value.step == PersistStep.HISTORY
        assert store.writes == ["20240105", LATEST_ARTIFACT]

    def test_error_chains_original_cause(self):
        store = MemoryStore(fail_on={LATEST_ARTIFACT})

        with pytest.raises(PersistenceError) as exc_info:
            make_persister(store).persist([], "20240105")

        assert isinstance(exc_info.value.__cause__, OSError)


class TestJSONFileStore:
    """JSON 文件存储"""

    def test_creates_directory_on_first_write(self, tmp_path):
        directory = tmp_path / "public" / "stock-data"
        store = JSONFileStore(directory)
        assert not directory.exists()

        store.write("latest", {"date": "20240105"})

        assert (directory / "latest.json").is_file()
        assert store.read("latest") == {"date": "20240105"}

    def test_read_missing_returns_none(self, tmp_path):
        assert JSONFileStore(tmp_path / "nope").read("history") is None

    def test_keeps_unicode_and_indent(self, tmp_path):
        store = JSONFileStore(tmp_path)
        store.write("20240105", [{"name": "大華優利高填息30"}])

        text = (tmp_path / "20240105.json").read_text(encoding="utf-8")
        assert "大華優利高填息30" in text
        assert '\n  {\n    "name"' in text

    def test_overwrite(self, tmp_path):
        store = JSONFileStore(tmp_path)
        store.write("history", ["20240101"])
        store.write("history", ["20240102", "20240101"])
        assert store.read("history") == ["20240102", "20240101"]

    def test_failed_write_leaves_no_partial_file(self, tmp_path):
        store = JSONFileStore(tmp_path)
        store.write("latest", {"date": "20240104"})

        with pytest.raises(TypeError):
            store.write("latest", {"bad": object()})

        assert store.read("latest") == {"date": "20240104"}
        assert sorted(p.name for p in tmp_path.iterdir()) == ["latest.json"]

    def test_names_and_exists(self, tmp_path):
        store = JSONFileStore(tmp_path / "data")
        assert store.names() == []

        store.write("20240105", [])
        store.write("latest", {})

        assert store.names() == ["20240105", "latest"]
        assert store.exists("latest")
        assert not store.exists("history")

    @pytest.mark.parametrize("name", ["", "../etc", "a/b", ".."])
    def test_invalid_names(self, tmp_path, name):
        with pytest.raises(ValueError):
            JSONFileStore(tmp_path).path_for(name)

    def test_persist_to_files(self, tmp_path):
        """端到端：持久化到真实目录"""
        persister = SnapshotPersister(JSONFileStore(tmp_path / "out"), clock=lambda: UPDATED_AT)
        persister.persist([make_entry()], "20240105")

        out = tmp_path / "out"
        assert sorted(p.name for p in out.iterdir()) == ["20240105.json", "history.json", "latest.json"]
        assert json.loads((out / "history.json").read_text(encoding="utf-8")) == ["20240105"]
        assert persister.load_latest()["date"] == "20240105"
        assert persister.load_snapshot("20240105")[0]["code"] == "2324"

    def test_unwritable_directory_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        persister = SnapshotPersister(JSONFileStore(blocker / "out"))

        with pytest.raises(PersistenceError) as exc_info:
            persister.persist([make_entry()], "20240105")

        assert exc_info.value.step == PersistStep.SNAPSHOT

    def test_corrupt_json_read_raises_persistence_error(self, tmp_path):
        (tmp_path / "history.json").write_text("{oops", encoding="utf-8")
        persister = SnapshotPersister(JSONFileStore(tmp_path))

        with pytest.raises(PersistenceError) as exc_info:
            persister.load_history()

        assert exc_info.value.step == PersistStep.HISTORY

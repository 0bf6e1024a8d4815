"""
日志配置测试
"""

import sys

import pytest
from loguru import logger

from stockdaily.data.models import Market, WatchListEntry
from stockdaily.utils.logger import security_logger, setup_logger


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def read_log(path) -> str:
    # 移除处理器以关闭文件
    logger.remove()
    return path.read_text(encoding="utf-8")


class TestSetupLogger:
    """终端与文件输出"""

    def test_file_sink_created(self, tmp_path):
        log_file = tmp_path / "logs" / "stockdaily.log"

        setup_logger(level="info", log_file=str(log_file))
        logger.info("抓取完成: 2/3 档")

        assert "INFO     | 抓取完成: 2/3 档" in read_log(log_file)

    def test_security_prefix(self, tmp_path):
        log_file = tmp_path / "stockdaily.log"
        setup_logger(log_file=str(log_file))

        security_logger(WatchListEntry("5410", "國眾", Market.OTC)).warning("⚠️ 跳过: 无资料")

        content = read_log(log_file)
        assert "[otc:5410] ⚠️ 跳过: 无资料" in content
        assert "<cyan>" not in content

    def test_level_filters_file(self, tmp_path):
        log_file = tmp_path / "stockdaily.log"
        setup_logger(level="WARNING", log_file=str(log_file))

        logger.info("hidden")
        logger.warning("shown")

        content = read_log(log_file)
        assert "hidden" not in content
        assert "shown" in content

    def test_custom_format(self, tmp_path):
        log_file = tmp_path / "stockdaily.log"
        setup_logger(log_file=str(log_file), format_string="{level}:{message}")

        logger.error("boom")

        assert read_log(log_file).splitlines()[-1] == "ERROR:boom"

    def test_console_only(self, capsys):
        setup_logger(level="DEBUG")
        security_logger(WatchListEntry("2324", "仁寶", Market.TSE)).info("🔍 仁寶")

        assert "[tse:2324]" in capsys.readouterr().err

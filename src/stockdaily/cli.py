"""
命令行工具

使用方法:
    stockdaily fetch                     # 抓取最近交易日（台湾时间，周末退回周五）
    stockdaily fetch --date 20240105     # 指定日期
    stockdaily fetch --config config/config.yaml --output-dir ./public/stock-data
    stockdaily show                      # 显示最新快照
    stockdaily show --date 20240105
    stockdaily history
    stockdaily watchlist
"""

import asyncio
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from stockdaily.assembler import AssemblyReport, SnapshotAssembler
from stockdaily.data.providers import create_providers
from stockdaily.errors import PersistenceError
from stockdaily.storage import JSONFileStore, SnapshotPersister
from stockdaily.utils.config import Config, load_config
from stockdaily.utils.logger import setup_logger
from stockdaily.utils.trading_date import resolve_trade_date, validate_trade_date

app = typer.Typer(help="台股每日收盘行情快照工具")
console = Console()


def _load(config_file: Optional[str], output_dir: Optional[str] = None) -> Config:
    """加载配置，命令行参数优先"""
    try:
        config = load_config(config_file)
    except ValueError as e:
        console.print(f"[red]配置错误: {e}[/red]")
        raise typer.Exit(2)
    if output_dir:
        config.storage.output_dir = output_dir
    return config


def _persister(config: Config) -> SnapshotPersister:
    return SnapshotPersister(JSONFileStore(config.storage.output_dir))


async def run_fetch(config: Config, trade_date: str) -> AssemblyReport:
    """按监控清单抓取一次"""
    assembler = SnapshotAssembler(
        create_providers(config.provider.user_agent),
        request_delay=config.provider.request_delay,
    )
    try:
        return await assembler.assemble_report(config.watch_list, trade_date)
    finally:
        await assembler.close()


def display_stocks(title: str, stocks: List[Dict[str, Any]]) -> None:
    """以表格显示快照"""
    table = Table(title=title)
    table.add_column("代码", style="cyan")
    table.add_column("名称")
    table.add_column("市场")
    table.add_column("日期")
    table.add_column("收盘", justify="right", style="yellow")
    table.add_column("涨跌", justify="right")
    table.add_column("涨停", justify="right", style="red")
    table.add_column("跌停", justify="right", style="green")

    for stock in stocks:
        table.add_row(
            str(stock.get("code", "")),
            str(stock.get("name", "")),
            str(stock.get("market", "")),
            str(stock.get("date", "")),
            str(stock.get("close", "")),
            str(stock.get("change", "")),
            str(stock.get("limitUp", "")),
            str(stock.get("limitDown", "")),
        )

    console.print(table)


def display_report(report: AssemblyReport) -> None:
    """显示抓取结果"""
    display_stocks(
        f"\n{report.trade_date} 抓取结果 ({len(report.entries)}/{report.total})",
        [entry.to_dict() for entry in report.entries],
    )
    for result in report.skipped:
        console.print(f"[yellow]⚠️ {result.entry.code} {result.entry.name}: {result.error}[/yellow]")


@app.command()
def fetch(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="查询日期 YYYYMMDD（默认最近交易日）"),
    config_file: Optional[str] = typer.Option(None, "--config", help="配置文件路径"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="输出目录"),
    delay: Optional[float] = typer.Option(None, "--delay", help="每档之间的等待秒数"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="日志级别"),
):
    """抓取监控清单的收盘行情并储存"""
    config = _load(config_file, output_dir)
    if delay is not None:
        config.provider.request_delay = delay

    setup_logger(
        level=log_level or config.logging.level,
        log_file=config.logging.file or None,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
    )

    try:
        trade_date = validate_trade_date(date) if date else resolve_trade_date()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)

    console.print(f"📈 开始抓取股价资料，📅 查询日期: {trade_date}")
    report = asyncio.run(run_fetch(config, trade_date))
    display_report(report)

    try:
        _persister(config).persist(report.entries, trade_date)
    except PersistenceError as e:
        console.print(f"[bold red]❌ 储存失败 ({e.step.value}): {e.message}[/bold red]")
        raise typer.Exit(1)

    console.print(f"[bold green]✅ 完成！已储存至 {config.storage.output_dir}[/bold green]")


@app.command()
def show(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="快照日期 YYYYMMDD（默认最新）"),
    config_file: Optional[str] = typer.Option(None, "--config", help="配置文件路径"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="输出目录"),
):
    """显示已储存的快照"""
    persister = _persister(_load(config_file, output_dir))

    try:
        if date:
            stocks = persister.load_snapshot(date)
            title = date
        else:
            latest = persister.load_latest()
            stocks = latest.get("stocks") if latest else None
            title = f"最新 {latest.get('date')} (更新于 {latest.get('updatedAt')})" if latest else ""
    except (ValueError, PersistenceError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if stocks is None:
        console.print("[red]找不到快照[/red]")
        raise typer.Exit(1)

    display_stocks(title, stocks)


@app.command()
def history(
    config_file: Optional[str] = typer.Option(None, "--config", help="配置文件路径"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="输出目录"),
):
    """列出已储存的日期"""
    try:
        dates = _persister(_load(config_file, output_dir)).load_history()
    except PersistenceError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not dates:
        console.print("[yellow]尚无历史资料[/yellow]")
        return

    for d in dates:
        console.print(d)


@app.command()
def watchlist(
    config_file: Optional[str] = typer.Option(None, "--config", help="配置文件路径"),
):
    """显示监控清单"""
    config = _load(config_file)

    table = Table(title="监控清单")
    table.add_column("代码", style="cyan")
    table.add_column("名称")
    table.add_column("市场")
    for entry in config.watch_list:
        table.add_row(entry.code, entry.name, entry.market.value)

    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()

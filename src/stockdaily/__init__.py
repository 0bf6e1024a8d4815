"""
台股每日收盘行情快照

模块:
- data: 行情模型、数据源、标准化、涨跌停计算
- assembler: 按监控清单组装当日快照
- storage: 快照、最新指针与历史索引的持久化
- utils: 配置、日志、日期工具
"""

__version__ = "0.1.0"

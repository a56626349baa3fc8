"""
日志配置
控制台 + 按日期分割的运行日志/错误日志，以及错误上报入口
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 这些库的 INFO 日志太多
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "apscheduler")

_error_logger = logging.getLogger("parts_billing.errors")


class ColoredFormatter(logging.Formatter):
    """级别名着色（仅用于终端）"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # 复制一份，文件处理器拿到的仍是原始级别名
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{self.COLORS.get(record.levelname, '')}{record.levelname}{self.RESET}"
        return super().format(record)


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    配置根日志器

    Args:
        log_level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: 日志目录，生成 app_<日期>.log 和 error_<日期>.log
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y-%m-%d")

    console_handler = logging.StreamHandler(sys.stdout)
    formatter_cls = ColoredFormatter if sys.stdout.isatty() else logging.Formatter
    console_handler.setFormatter(formatter_cls(LOG_FORMAT, DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_file_handler(log_path / f"app_{today}.log", logging.INFO))
    root_logger.addHandler(_file_handler(log_path / f"error_{today}.log", logging.ERROR))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"📋 日志系统初始化完成: {log_path}")


def report_error(error: BaseException) -> None:
    """上报错误（带堆栈写入错误日志，不抛出）"""
    _error_logger.error(
        f"❌ {type(error).__name__}: {error}",
        exc_info=(type(error), error, error.__traceback__)
    )

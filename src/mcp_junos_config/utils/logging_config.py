"""Logging setup for the junoscraft MCP server.

- Console output plus a rotating log file
- A separate `junoscraft.perf` logger for operation timings
- Timing helpers that also feed a process-wide PerfStats

Environment Variables:
    JUNOSCRAFT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    JUNOSCRAFT_LOG_FILE: Path to log file (default: ~/.junoscraft/junoscraft.log)
    JUNOSCRAFT_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    JUNOSCRAFT_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from mcp_junos_config.utils.logging_config import setup_logging, timed

    setup_logging()

    @timed("commit")
    async def commit(self, message):
        ...

    async with timed_section("tool:create_resource", device_id="srx-edge"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import asynccontextmanager, contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

perf_logger = logging.getLogger("junoscraft.perf")
main_logger = logging.getLogger("junoscraft")

PACKAGE_LOGGERS = ("junoscraft", "mcp_junos_config")


def get_log_level() -> int:
    level_str = os.environ.get("JUNOSCRAFT_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    default_path = Path.home() / ".junoscraft" / "junoscraft.log"
    return Path(os.environ.get("JUNOSCRAFT_LOG_FILE", str(default_path)))


def _rotating_handler(path: Path, formatter: logging.Formatter) -> RotatingFileHandler:
    max_size_mb = int(os.environ.get("JUNOSCRAFT_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("JUNOSCRAFT_LOG_BACKUPS", "5"))
    handler = RotatingFileHandler(
        path,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """Configure logging for the application.

    The console follows JUNOSCRAFT_LOG_LEVEL; the log files always get
    DEBUG so codec traces (ignored lines, line counts) are kept.
    """
    log_level = get_log_level()
    log_file = get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-32s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # MCP stdio owns stdout, so the console handler writes to stderr
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = _rotating_handler(log_file, main_format)
    perf_log_file = log_file.parent / "junoscraft-perf.log"
    perf_handler = _rotating_handler(perf_log_file, perf_format)

    for name in PACKAGE_LOGGERS:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(logging.DEBUG)
        package_logger.addHandler(console_handler)
        package_logger.addHandler(file_handler)

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.propagate = False
    perf_logger.addHandler(perf_handler)
    perf_logger.addHandler(console_handler)

    main_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _report(operation: str, device_id: Optional[str], start: float,
            error: Optional[BaseException] = None, extra: Optional[dict] = None) -> None:
    elapsed = (time.perf_counter() - start) * 1000
    global_stats.record(operation, elapsed)
    status = "OK" if error is None else f"FAIL: {error}"
    msg = f"{operation:24s} | {device_id or 'N/A':15s} | {elapsed:8.2f}ms | {status}"
    if extra:
        msg += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())
    if error is None:
        perf_logger.info(msg)
    else:
        perf_logger.warning(msg)


def timed(operation: str, device_id: Optional[str] = None):
    """Decorator logging execution time of a sync or async function.

    The device id defaults to `self.device_id` when the wrapped function is
    a method of an object that has one.
    """
    def decorator(func: Callable) -> Callable:
        def resolve_device(args: tuple) -> Optional[str]:
            if device_id is None and args and hasattr(args[0], "device_id"):
                return args[0].device_id
            return device_id

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _report(operation, resolve_device(args), start, error=e)
                raise
            _report(operation, resolve_device(args), start)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(operation, resolve_device(args), start, error=e)
                raise
            _report(operation, resolve_device(args), start)
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Async context manager timing a block of code.

    Usage:
        async with timed_section("tool:read_resource", device_id="srx-edge",
                                 resource_type="security_policy"):
            ...
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, device_id, start, error=e, extra=extra)
        raise
    _report(operation, device_id, start, extra=extra)


@contextmanager
def timed_section_sync(operation: str, device_id: Optional[str] = None, **extra):
    """Sync counterpart of `timed_section`."""
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, device_id, start, error=e, extra=extra)
        raise
    _report(operation, device_id, start, extra=extra)


class PerfStats:
    """Aggregate timings per operation.

    Usage:
        stats = PerfStats()
        stats.record("commit", 850.2)
        print(stats.summary())
    """

    def __init__(self):
        self._data: dict[str, list[float]] = {}

    def record(self, operation: str, duration_ms: float) -> None:
        self._data.setdefault(operation, []).append(duration_ms)

    def operations(self) -> list[str]:
        return sorted(self._data)

    def summary(self) -> str:
        lines = ["Performance Summary", "=" * 60]
        for op, times in sorted(self._data.items()):
            if not times:
                continue
            count = len(times)
            lines.append(
                f"{op:24s} | count={count:4d} | avg={sum(times) / count:8.2f}ms | "
                f"min={min(times):8.2f}ms | max={max(times):8.2f}ms"
            )
        return "\n".join(lines)

    def clear(self) -> None:
        self._data.clear()


global_stats = PerfStats()

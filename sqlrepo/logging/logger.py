import sys
from pathlib import Path
from typing import Optional
from loguru import logger
from fastapi import Request
from sqlrepo.config import settings

# Default trace id until a request (or setup_logging) provides one
logger.configure(extra={"trace_id": "system"})


class LogConfig:
    """Global logging configuration using Loguru."""
    @classmethod
    def setup_logging(cls, level: Optional[str] = None, log_dir: Optional[str] = None):
        level = level or settings.LOG_LEVEL
        log_path = Path(log_dir or settings.LOG_DIR)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.remove()

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
            ),
            level=level,
        )

        logger.add(
            log_path / "repository_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            compression="zip",
            enqueue=True,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | Trace:{extra[trace_id]} - {message}",
            level="DEBUG",
        )

        logger.add(
            log_path / "error_{time:YYYY-MM-DD}.log",
            level="ERROR",
            rotation="100 MB",
            enqueue=True,
        )

        logger.configure(extra={"trace_id": "system"})


def get_logger(name: str = None, request: Optional[Request] = None):
    """Get logger instance; pass the request to tag records with its trace_id."""
    if request is not None:
        trace_id = getattr(request.state, "trace_id", "unknown")
    else:
        trace_id = "system"

    if name:
        return logger.bind(name=name, trace_id=trace_id)
    else:
        return logger.bind(trace_id=trace_id)

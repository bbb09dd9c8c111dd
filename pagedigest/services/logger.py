"""Process-wide loguru setup plus structured log helpers for the pipeline stages."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from pagedigest.config import Settings, get_settings

LOG_DIR = Path("logs")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "openai._base_client",
    "anthropic._base_client",
    "asyncpg",
    "asyncio",
)


def configure_logging(settings: Settings) -> None:
    """Console sink at the app level, daily-rotated debug file under logs/."""
    LOG_DIR.mkdir(exist_ok=True)
    logger.remove()
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=settings.app_log_level.upper(),
        colorize=True,
    )
    logger.add(
        LOG_DIR / "pagedigest_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(settings.noisy_log_level.upper())


configure_logging(get_settings())


def _payload(**fields: Any) -> dict[str, Any]:
    return {"timestamp": datetime.now(timezone.utc).isoformat(), **fields}


def log_llm_call(
    model: str,
    caller: str,
    input_tokens: int = 0,
    output_tokens: int = 0,
    duration_ms: int = 0,
    status: str = "success",
    error: Optional[str] = None,
) -> None:
    """Log a summarization or rephrasing call with its token usage."""
    data = _payload(
        model=model,
        caller=caller,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
        duration_ms=duration_ms,
        status=status,
        error=error,
    )
    if error:
        logger.error(f"LLM_CALL_FAILED: {data}")
    else:
        logger.info(f"LLM_CALL: {data}")


def log_fetch(
    url: str,
    strategy: str,
    status: str,
    duration_ms: int = 0,
    word_count: int = 0,
    error: Optional[str] = None,
) -> None:
    """Log a page render + extraction. Rejections and failures go out as warnings."""
    data = _payload(
        url=url,
        strategy=strategy,
        status=status,
        duration_ms=duration_ms,
        word_count=word_count,
        error=error,
    )
    if error:
        logger.warning(f"FETCH_FAILED: {data}")
    else:
        logger.info(f"FETCH: {data}")


def log_db_operation(
    operation: str,
    table: str,
    status: str,
    details: Optional[str] = None,
    error: Optional[str] = None,
) -> None:
    data = _payload(operation=operation, table=table, status=status, details=details, error=error)
    if error:
        logger.error(f"DB_OPERATION_FAILED: {data}")
    else:
        logger.debug(f"DB_OPERATION: {data}")


def log_event(event_type: str, message: str, **kwargs) -> None:
    logger.info(f"EVENT: {_payload(event_type=event_type, message=message, **kwargs)}")

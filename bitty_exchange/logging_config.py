"""
structlog setup for the exchange API.

Every record, whether emitted through structlog or a plain
``logging.getLogger(__name__)`` logger, goes through the same processor chain
and is tagged with ``service``. Output is JSON lines unless running at DEBUG
(or ``json_logs=False``), where the colored console renderer is used.
"""

import logging
import sys
from typing import List, Optional

import structlog

from .config import settings

SERVICE_NAME = "bitty-exchange"

NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "redis")


def _add_service(_: logging.Logger, __: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _pre_chain(use_json: bool) -> List[structlog.types.Processor]:
    chain: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if use_json:
        chain.append(structlog.processors.format_exc_info)
    return chain


def setup_logging(log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Install the structlog pipeline on the root logger.

    Args:
        log_level: Level name; defaults to ``settings.log_level``
        json_logs: Force JSON (True) or console (False) output
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    use_json = level != logging.DEBUG if json_logs is None else json_logs
    pre_chain = _pre_chain(use_json)
    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

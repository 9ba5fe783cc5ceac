from __future__ import annotations

import copy
import logging.config
from typing import Any

import structlog

from debridplay.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

BASE_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "debridplay": {"handlers": ["default"], "level": "INFO", "propagate": False},
    },
}


def _drop_color_message(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # Some libraries attach "color_message"; it duplicates "event".
    event_dict.pop("color_message", None)
    return event_dict


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """
    Build a logging config dict (dictConfig) rendered through structlog.
    """
    cfg = copy.deepcopy(BASE_LOGGING_CONFIG)

    if config.log_format == "json":
        renderer: structlog.typing.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    # foreign_pre_chain runs for plain stdlib records (third-party libraries)
    cfg["formatters"]["structlog"] = {
        "()": structlog.stdlib.ProcessorFormatter,
        "foreign_pre_chain": [
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    }
    cfg["handlers"]["default"]["formatter"] = "structlog"

    level = config.log_level
    for logger_cfg in cfg["loggers"].values():
        if isinstance(logger_cfg, dict):
            logger_cfg["level"] = level

    # Root controls everything else (libraries not configured explicitly)
    cfg["root"] = {"handlers": ["default"], "level": level}

    return cfg


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """
    Configure structlog + stdlib logging and return the applied dictConfig.
    """
    structlog.configure(
        processors=[
            _drop_color_message,
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    cfg = build_logging_config(config)
    logging.config.dictConfig(cfg)
    log.info(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )
    return cfg

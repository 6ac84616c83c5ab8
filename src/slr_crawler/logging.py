"""Logging configuration for the SLR crawler."""

import logging
import sys

import structlog
from structlog.types import FilteringBoundLogger

from .config import AppConfig


def configure_logging(app_config: AppConfig) -> FilteringBoundLogger:
    """Configure structured logging for the application."""
    level = getattr(logging, app_config.log_level.upper(), logging.INFO)
    
    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )
    
    # Configure structlog
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    
    if app_config.log_format == "json":
        processors.extend([
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ])
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        ])
    
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    
    return structlog.get_logger()


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a logger instance for the given name."""
    return structlog.get_logger(name)

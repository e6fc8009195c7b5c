"""
Structured logging setup.

Log records go through the stdlib logging module so Flask, werkzeug and
SQLAlchemy share the same handler; structlog renders our own events as JSON.
"""

import logging
import sys

import structlog


def configure_logging(level='INFO'):
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stdout,
        level=getattr(logging, str(level).upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name=None):
    return structlog.get_logger(name)

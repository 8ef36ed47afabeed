"""
Structured logging configuration for the log normalizer services
Provides JSON logging with audit trails for the HTTP front end, the CLI and forwarders
"""
import logging
import os
import sys
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger


def setup_logging(
    service_name: str,
    log_level: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure structured JSON logging for a service

    Args:
        service_name: Name of the service (e.g., 'log_normalizer', 'log_normalizer.cli')
        log_level: Optional log level override (default: INFO, or from LOG_LEVEL env)
        stream: Console stream (default stdout). The CLI passes stderr so that
            stdout carries only normalised events.

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(service_name)
    logger.setLevel(numeric_level)

    # Clear any existing handlers
    logger.handlers = []

    log_format = '%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d'
    formatter = jsonlogger.JsonFormatter(
        log_format,
        rename_fields={
            'levelname': 'level',
            'asctime': 'timestamp',
            'pathname': 'file',
            'lineno': 'line'
        }
    )

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler if LOG_FILE is set
    log_file = os.getenv('LOG_FILE')
    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not create file handler: {e}")

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def log_audit_event(logger: logging.Logger, event_type: str, **kwargs):
    """
    Log an audit event with standard structure

    Args:
        logger: Logger instance
        event_type: Type of audit event (e.g., 'batch_processed', 'event_forwarded')
        **kwargs: Additional fields to include in audit log
    """
    audit_data = {
        'audit': True,
        'event_type': event_type,
        **kwargs
    }
    logger.info('AUDIT_EVENT', extra=audit_data)

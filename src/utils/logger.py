import logging
from datetime import datetime, timezone
from typing import Any, Dict
import sys
from pythonjsonlogger import jsonlogger

from src.config.settings import settings

class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname

        # Add module/function info
        log_record['module'] = record.module
        log_record['function'] = record.funcName

def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance"""
    logger = logging.getLogger(name)

    # Only add handlers if they haven't been added yet
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)

        formatter = CustomJsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(module)s %(function)s %(message)s'
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    return logger

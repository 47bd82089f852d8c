"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args, service_name: str = "finance-tracker", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "finance-tracker") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_parse(
    request_id: str,
    user_id: str,
    backend: str,
    category: str,
    confidence: float,
    duration_ms: float,
) -> None:
    """Log structured parse outcome; the raw text is not logged"""
    logging.info(
        "Transaction parsed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "parse_complete",
            "parser_backend": backend,
            "category": category,
            "confidence": confidence,
            "duration_ms": duration_ms,
        },
    )


def log_transaction_event(
    request_id: str,
    user_id: str,
    operation: str,
    transaction_id: Optional[str] = None,
) -> None:
    """Log create/update/delete of a transaction"""
    logging.info(
        f"Transaction {operation}",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": f"transaction_{operation}",
            "transaction_id": transaction_id,
        },
    )

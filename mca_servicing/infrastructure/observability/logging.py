"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger

from mca_servicing.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def log_paybacks_generated(
    request_id: str,
    plan_id: str,
    payback_ids: List[str],
    plan_status: str,
    duration_ms: float,
) -> None:
    """Log structured payback generation outcome for reconciliation"""
    logging.info(
        "Paybacks generated",
        extra={
            "request_id": request_id,
            "payback_plan_id": plan_id,
            "step": "paybacks_generated",
            "payback_count": len(payback_ids),
            "payback_ids": payback_ids,
            "plan_status": plan_status,
            "duration_ms": duration_ms,
        },
    )

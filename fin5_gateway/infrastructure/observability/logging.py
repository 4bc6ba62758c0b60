"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from fin5_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Replace handlers so repeated app creation (tests) doesn't duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_prescreening(
    request_id: str,
    check: str,
    outcome: str,
    score: float | None,
    duration_ms: float,
) -> None:
    """Log structured prescreening outcome for analysis"""
    logging.info(
        "Prescreening check completed",
        extra={
            "request_id": request_id,
            "step": f"prescreening_{check}",
            "outcome": outcome,
            "score": score,
            "duration_ms": duration_ms,
        },
    )


def log_commission(
    request_id: str,
    dealer_id: str,
    lender_id: str,
    total_commission: float,
    used_default_rate: bool,
) -> None:
    """Log structured commission calculation"""
    logging.info(
        "Commission calculated",
        extra={
            "request_id": request_id,
            "dealer_id": dealer_id,
            "lender_id": lender_id,
            "step": "commission_calculated",
            "total_commission": total_commission,
            "used_default_rate": used_default_rate,
        },
    )

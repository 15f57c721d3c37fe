"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger

from ledgerly.config import settings
from ledgerly.domain.models import ItemResult


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


def _outcome_counts(results: List[ItemResult]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for result in results:
        counts[result.outcome] = counts.get(result.outcome, 0) + 1
    return counts


def log_catch_up(request_id: str, user_id: str, results: List[ItemResult], duration_ms: float) -> None:
    """Log structured catch-up outcome for analysis"""
    logging.info(
        "Catch-up completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "catch_up_complete",
            "debts_visited": len(results),
            "updates_created": sum(r.updates_created for r in results),
            "outcomes": _outcome_counts(results),
            "duration_ms": duration_ms,
        },
    )


def log_payoff(request_id: str, user_id: str, debt_id: str, amount_cents: int) -> None:
    """Log early payoff of a debt"""
    logging.info(
        "Debt paid off",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "payoff_complete",
            "debt_id": debt_id,
            "amount_cents": amount_cents,
        },
    )


def log_repayment(
    request_id: str,
    user_id: str,
    debt_id: str,
    amount_cents: int,
    adjustment_cents: int,
    balance_cents: int,
) -> None:
    """Log a single partial repayment"""
    logging.info(
        "Repayment recorded",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "repayment_complete",
            "debt_id": debt_id,
            "amount_cents": amount_cents,
            "adjustment_cents": adjustment_cents,
            "balance_cents": balance_cents,
        },
    )


def log_batch_repayment(request_id: str, user_id: str, amount_cents: int, results: List[ItemResult]) -> None:
    """Log structured batch repayment outcome"""
    logging.info(
        "Batch repayment completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "batch_repayment_complete",
            "amount_cents": amount_cents,
            "applied_cents": sum(r.amount_cents for r in results if r.outcome == "applied"),
            "outcomes": _outcome_counts(results),
        },
    )

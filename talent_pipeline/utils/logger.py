"""
Logging for Talent Pipeline, built on Loguru.

Three sinks are configured from LoggingSettings: a colored console, a
rotating application log and ``audit.log``. The audit file only receives
records bound with an ``audit_type``, which is what :func:`audit_log`
does for every stage decision, lost concurrent update and match score.
Candidate contact details and credentials are masked before they are
written anywhere.
"""

import sys
from pathlib import Path
from typing import Any, Literal

from loguru import logger

from talent_pipeline.utils.config import LoggingSettings, get_settings

AuditType = Literal["DECISION", "CONFLICT", "SCORING"]

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[audit_type]: <8} | {message}"
AUDIT_FILE_NAME = "audit.log"

REDACTED = "***REDACTED***"

# Matched as substrings of lower-cased field names
MASKED_FIELDS = (
    "password",
    "secret",
    "token",
    "api_key",
    "apikey",
    "credential",
    "private_key",
    "email",
    "phone",
)


def _is_audit_record(record: dict[str, Any]) -> bool:
    return "audit_type" in record["extra"]


def _add_console_sink(level: str, diagnose: bool) -> None:
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=diagnose,
    )


def _add_file_sinks(log_settings: LoggingSettings, diagnose: bool) -> Path:
    """Add the application and audit files; returns the log directory."""
    log_dir = log_settings.file_path.parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_settings.file_path,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=diagnose,
        enqueue=True,
    )
    # Hiring decisions are kept for a year regardless of the application log policy
    logger.add(
        log_dir / AUDIT_FILE_NAME,
        format=AUDIT_FORMAT,
        level="INFO",
        filter=_is_audit_record,
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )
    return log_dir


def setup_logging() -> None:
    """Replace Loguru's default handler with the configured sinks."""
    settings = get_settings()
    log_settings = settings.logging

    logger.remove()

    # Variable values in tracebacks can contain candidate data
    diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        _add_console_sink(log_settings.level, diagnose)
    if log_settings.file_output:
        log_dir = _add_file_sinks(log_settings, diagnose)
        logger.debug(f"Writing logs to {log_dir}")

    logger.info(
        f"{settings.name} logging at {log_settings.level} ({settings.environment})"
    )


def get_logger(name: str) -> Any:
    return logger.bind(name=name)


def _is_masked(key: Any) -> bool:
    lowered = str(key).lower()
    return any(fragment in lowered for fragment in MASKED_FIELDS)


def mask_sensitive(data: Any) -> Any:
    """
    Copy `data` with credential and contact fields replaced by REDACTED.

    Nested dicts and lists are walked; other values are returned as is.
    """
    if isinstance(data, dict):
        return {
            key: REDACTED if _is_masked(key) else mask_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [mask_sensitive(item) for item in data]
    return data


def audit_log(
    action: str,
    details: dict[str, Any],
    audit_type: AuditType = "DECISION",
) -> None:
    """
    Write one entry to the audit sink.

    The message reads ``<action> | key=value ...``; the masked details are
    also bound as ``extra["audit_details"]`` for structured sinks.

    Args:
        action: AuditAction value, e.g. "application_rejected"
        details: Ids and descriptions of the decision
        audit_type: DECISION for committed moves, CONFLICT for lost
            concurrent updates, SCORING for match scores
    """
    masked = mask_sensitive(details)
    fields = " ".join(f"{key}={value}" for key, value in masked.items())
    logger.bind(audit_type=audit_type, audit_details=masked).info(f"{action} | {fields}")


class LoggerMixin:
    """Gives a class a ``logger`` bound to its class name."""

    @property
    def logger(self) -> Any:
        try:
            return self._logger
        except AttributeError:
            self._logger = get_logger(type(self).__name__)
            return self._logger

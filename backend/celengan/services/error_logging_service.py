"""Error logging with PII redaction.

Emails, IPs, Indonesian mobile numbers, passwords and bearer tokens are
masked before an unhandled error reaches the log, including inside the
traceback and nested request payloads.
"""

import logging
import re
import traceback
from typing import Any, Dict, List, Optional, Pattern, Tuple

_PII_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[REDACTED_EMAIL]"),
    (re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b"), "[REDACTED_IP]"),
    # 08xx / +628xx mobile numbers
    (re.compile(r"(?:\+62|\b0)8\d{8,11}\b"), "[REDACTED_PHONE]"),
    (
        re.compile(r"(password|passwd|pwd)[\"']?\s*[:=]\s*[\"']?([^\"'\s,}]+)", re.IGNORECASE),
        r"\1=[REDACTED_PASSWORD]",
    ),
    (
        re.compile(r"(token|jwt|bearer)[\"']?\s*[:=\s]\s*[\"']?([A-Za-z0-9_.-]{20,})", re.IGNORECASE),
        r"\1=[REDACTED_TOKEN]",
    ),
]


class ErrorLoggingService:
    """Redacts and logs unexpected errors."""

    SENSITIVE_KEYS = {"password", "current_password", "new_password", "token", "access_token"}

    @staticmethod
    def redact_pii(text: str) -> str:
        if not text:
            return text

        for pattern, replacement in _PII_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    @staticmethod
    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in ErrorLoggingService.SENSITIVE_KEYS:
            return "[REDACTED]"
        if isinstance(value, dict):
            return ErrorLoggingService.sanitize_request_data(value)
        if isinstance(value, (list, tuple)):
            return [ErrorLoggingService._sanitize_value(key, item) for item in value]
        return ErrorLoggingService.redact_pii(str(value))

    @staticmethod
    def sanitize_request_data(data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask secrets by key and redact PII in every other value, recursively."""
        if not data:
            return {}
        return {
            key: ErrorLoggingService._sanitize_value(key, value) for key, value in data.items()
        }

    @staticmethod
    def log_error(
        logger: logging.Logger,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """
        Log an unexpected error as a single redacted record.

        Args:
            logger: Logger to write to
            error: The exception
            context: Request details; secrets are masked
            user_id: Acting user, if known (an id, not PII)
        """
        headline = f"Unhandled {type(error).__name__}"
        if user_id:
            headline += f" for user {user_id}"

        lines = [f"{headline}: {ErrorLoggingService.redact_pii(str(error))}"]
        if context:
            lines.append(f"context={ErrorLoggingService.sanitize_request_data(context)}")
        lines.append(
            ErrorLoggingService.redact_pii(
                "".join(traceback.format_exception(type(error), error, error.__traceback__))
            )
        )

        logger.error("\n".join(lines))


error_logging_service = ErrorLoggingService()

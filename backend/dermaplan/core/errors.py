"""Error Hierarchy — typed, categorized exceptions for Dermaplan failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Data-quality problems (unknown strings, missing answers, absent prior profile)
      never raise: they degrade to neutral defaults and trace warnings
    - Hard failures are reserved for configuration bugs (malformed rule documents,
      missing catch-all template) and for infrastructure adapters
    - CacheBackendError never escapes DecisionCache: the pipeline must run without a cache

Design Decisions:
    - Single hierarchy with DermaplanError base: callers catch one type (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    CACHE = "cache"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    profile_version: int | None = None
    rule_id: str | None = None
    topic_id: str | None = None
    debug_info: dict[str, Any] | None = None


class DermaplanError(Exception):
    """Base exception for all Dermaplan errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to a flat, JSON-serializable error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "profile_version": self.context.profile_version,
                    "rule_id": self.context.rule_id,
                    "topic_id": self.context.topic_id,
                },
            }
        }


# ─── Configuration Errors ───────────────────────────────────────

class RuleDocumentError(DermaplanError):
    """A recommendation rule or template document is malformed."""
    def __init__(
        self, message: str, document_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "RULE_DOCUMENT_INVALID", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )
        self.document_id = document_id


class TemplateConfigurationError(DermaplanError):
    """The care plan template set cannot cover every profile."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TEMPLATE_CONFIGURATION_INVALID", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )


# ─── Infrastructure Errors ──────────────────────────────────────

class CacheBackendError(DermaplanError):
    """Cache backend operation failed."""
    def __init__(
        self, message: str, operation: str, key: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CACHE_BACKEND_ERROR", ErrorCategory.CACHE,
            ErrorSeverity.WARNING, context,
        )
        self.operation = operation
        self.key = key

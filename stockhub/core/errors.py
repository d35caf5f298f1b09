"""Error Hierarchy — typed, categorized exceptions for every stockhub failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400/404/409) are terminal for the call; the core never retries them
    - ConflictError always carries a ConflictReason; only STALE_VERSION is retryable
    - to_response() produces the REST envelope consumed by api/error_handlers.py

Design Decisions:
    - Single hierarchy with StockhubError base: one global handler catches all
    - Conflict sub-kinds as an enum on ConflictError instead of parsing messages, so a
      caller can retry a lost optimistic race but not a name collision
    - MembershipTargetMissingError is a BusinessRuleError, not a ResourceNotFoundError:
      add_member reports missing ids with the rule-violation kind
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


class ConflictReason(str, Enum):
    """Why a write conflicted — lets callers tell retryable races from collisions."""
    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_MEMBERSHIP = "duplicate_membership"
    STALE_VERSION = "stale_version"
    INTEGRITY = "integrity"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stock_id: int | None = None
    exchange_id: int | None = None
    debug_info: dict[str, Any] | None = None


class StockhubError(Exception):
    """Base exception for all stockhub errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "stock_id": self.context.stock_id,
                    "exchange_id": self.context.exchange_id,
                },
            }
        }


# ─── Validation Errors (400) ────────────────────────────────────

class FieldValidationError(StockhubError):
    """A required field is blank or a field exceeds its bounds."""
    def __init__(
        self,
        message: str,
        field: str,
        context: ErrorContext | None = None,
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class PriceValidationError(FieldValidationError):
    """Price is not a finite, strictly positive fixed-point amount."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "price", context, "INVALID_PRICE")


# ─── Business Rule Errors (400) ─────────────────────────────────

class BusinessRuleError(StockhubError):
    """A domain rule rejected the requested transition."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class LiveThresholdError(BusinessRuleError):
    """Exchange cannot be live with fewer members than the threshold."""
    def __init__(self, threshold: int, context: ErrorContext | None = None):
        super().__init__(
            f"Exchange must have at least {threshold} stocks to be live",
            "LIVE_THRESHOLD_NOT_MET", context,
        )
        self.threshold = threshold


class MembershipTargetMissingError(BusinessRuleError):
    """add_member referenced an exchange or stock that does not exist."""
    def __init__(self, resource_type: str, context: ErrorContext | None = None):
        super().__init__(
            f"{resource_type} not found", "MEMBERSHIP_TARGET_MISSING", context,
        )
        self.resource_type = resource_type


# ─── Not Found (404) ────────────────────────────────────────────

class ResourceNotFoundError(StockhubError):
    """Requested resource does not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_id: object,
        context: ErrorContext | None = None,
        message: str | None = None,
    ):
        super().__init__(
            message or f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Conflicts (409) ────────────────────────────────────────────

class ConflictError(StockhubError):
    """Write collided with existing state or with a concurrent writer."""
    def __init__(
        self,
        message: str,
        reason: ConflictReason,
        code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.reason = reason

    @property
    def retryable(self) -> bool:
        return self.reason is ConflictReason.STALE_VERSION

    def to_response(self) -> dict:
        body = super().to_response()
        body["error"]["reason"] = self.reason.value
        body["error"]["retryable"] = self.retryable
        return body


class DuplicateNameError(ConflictError):
    """Another entity of the same type already uses this name."""
    def __init__(self, resource_type: str, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"{resource_type} name already exists: {name}",
            ConflictReason.DUPLICATE_NAME, "DUPLICATE_NAME", context,
        )
        self.name = name


class DuplicateMembershipError(ConflictError):
    """Stock is already a member of the exchange."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Stock already exists in this exchange",
            ConflictReason.DUPLICATE_MEMBERSHIP, "DUPLICATE_MEMBERSHIP", context,
        )


class ConcurrencyError(ConflictError):
    """Concurrent modification detected by the optimistic version check."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, ConflictReason.STALE_VERSION, "CONCURRENCY_CONFLICT", context,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(StockhubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

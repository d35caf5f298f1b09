"""Error Hierarchy — tests for codes, HTTP statuses and the REST envelope.

Tests cover:
    - each error kind maps to its HTTP status and category
    - ConflictError.retryable only for stale versions
    - to_response carries code, message and context ids
"""

from stockhub.core.errors import (
    BusinessRuleError, ConcurrencyError, ConflictError, ConflictReason,
    DatabaseError, DuplicateMembershipError, DuplicateNameError, ErrorCategory,
    ErrorContext, LiveThresholdError, MembershipTargetMissingError,
    PriceValidationError, ResourceNotFoundError,
)


def test_not_found_default_message_and_status():
    error = ResourceNotFoundError("Stock", 42)
    assert error.message == "Stock not found: 42"
    assert error.http_status == 404
    assert error.category is ErrorCategory.RESOURCE_NOT_FOUND


def test_not_found_custom_message():
    error = ResourceNotFoundError("Stock", 1, message="Stock not linked to exchange")
    assert str(error) == "Stock not linked to exchange"


def test_membership_target_missing_is_business_rule():
    error = MembershipTargetMissingError("Exchange")
    assert isinstance(error, BusinessRuleError)
    assert error.message == "Exchange not found"
    assert error.http_status == 400


def test_live_threshold_error_is_business_rule():
    error = LiveThresholdError(10)
    assert error.category is ErrorCategory.BUSINESS_RULE
    assert error.threshold == 10


def test_price_validation_error():
    error = PriceValidationError("Price must be greater than 0")
    assert error.code == "INVALID_PRICE"
    assert error.http_status == 400


# ─── Conflicts ───────────────────────────────────────────────────

def test_only_stale_version_is_retryable():
    assert ConcurrencyError("stale").retryable
    assert not DuplicateNameError("Stock", "ACME").retryable
    assert not DuplicateMembershipError().retryable
    assert not ConflictError("x", ConflictReason.INTEGRITY).retryable


def test_conflict_response_carries_reason():
    body = DuplicateNameError("Exchange", "NYSE").to_response()["error"]
    assert body["code"] == "DUPLICATE_NAME"
    assert body["reason"] == "duplicate_name"
    assert body["retryable"] is False
    assert body["message"] == "Exchange name already exists: NYSE"


def test_duplicate_membership_message():
    error = DuplicateMembershipError()
    assert error.message == "Stock already exists in this exchange"
    assert error.http_status == 409


# ─── Envelope ────────────────────────────────────────────────────

def test_to_response_includes_context_ids():
    error = ResourceNotFoundError(
        "Exchange", 3, ErrorContext(exchange_id=3, stock_id=9),
    )
    body = error.to_response()["error"]
    assert body["context"] == {"stock_id": 9, "exchange_id": 3}
    assert body["category"] == "resource_not_found"
    assert body["severity"] == "error"
    assert "timestamp" in body


def test_database_error_is_503():
    error = DatabaseError("Connection or operational error", "execute")
    assert error.http_status == 503
    assert error.to_response()["error"]["severity"] == "critical"

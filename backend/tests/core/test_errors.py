"""Error Hierarchy — codes, categories, statuses and the REST envelope."""

from roomstate.core.errors import (
    ConcurrencyError, ConsistencyError, DatabaseError, ErrorCategory, ErrorContext,
    ResourceNotFoundError, SerializationError, TransactionConflictError,
    UnauthorizedError,
)


def test_unauthorized_is_403_forbidden():
    err = UnauthorizedError("You are not invited to this room.")
    assert err.http_status == 403
    assert err.code == "M_FORBIDDEN"
    assert err.category == ErrorCategory.AUTHORIZATION


def test_transaction_conflict_records_path():
    err = TransactionConflictError("/send/txn1")
    assert err.http_status == 409
    assert err.context.path == "/send/txn1"
    assert not err.retryable


def test_concurrency_error_is_retryable():
    err = ConcurrencyError("raced")
    assert err.retryable
    assert err.to_response()["error"]["retryable"] is True


def test_integrity_errors_are_critical_500s():
    for err in (SerializationError("bad"), ConsistencyError("dangling")):
        assert err.http_status == 500
        assert err.severity.value == "critical"


def test_database_error_names_operation():
    err = DatabaseError("Connection or operational error", "create_membership")
    assert err.operation == "create_membership"
    assert err.http_status == 503
    assert "create_membership" in err.message


def test_to_response_envelope():
    err = ResourceNotFoundError(
        "Join rules of room", "!r:example.org",
        ErrorContext(room_id="!r:example.org", user_id="@a:example.org"),
    )
    body = err.to_response()["error"]
    assert body["code"] == "M_NOT_FOUND"
    assert body["category"] == "resource_not_found"
    assert body["context"]["room_id"] == "!r:example.org"
    assert body["context"]["user_id"] == "@a:example.org"
    assert "timestamp" in body

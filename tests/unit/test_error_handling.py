"""Unit tests for error handling middleware and PII filtering."""

import json
import logging
from unittest.mock import Mock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from spendwise.api.middleware.error_handler import (
    handle_generic_error,
    handle_integrity_error,
    handle_ledger_error,
    handle_validation_error,
)
from spendwise.api.middleware.logging import JSONLogFormatter, filter_pii
from spendwise.core.errors import ERROR_CATALOG, get_error
from spendwise.core.exceptions import (
    CategoryTypeMismatchError,
    InvalidSpecError,
    InvitationNotFoundError,
    LastOwnerError,
    LedgerError,
    NotFoundError,
    StorageConflictError,
    TransactionAlreadyReversedError,
)


def _request(path: str = "/api/test", method: str = "GET") -> Mock:
    request = Mock(spec=Request)
    request.url.path = path
    request.method = method
    return request


class TestLedgerErrorHandler:
    """Test custom exception handling."""

    @pytest.mark.asyncio
    async def test_uses_exception_status_and_code(self):
        exc = CategoryTypeMismatchError(details={"category_type": "income"})

        response = await handle_ledger_error(_request("/api/transactions", "POST"), exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 400
        body = json.loads(response.body)
        assert body["error_code"] == "LEDGER_001"

    @pytest.mark.asyncio
    async def test_error_includes_all_fields(self):
        response = await handle_ledger_error(_request(), LastOwnerError())

        body = json.loads(response.body)
        assert response.status_code == 409
        assert set(body) == {"error_code", "message", "user_message", "suggestion", "retry_allowed"}
        assert body["user_message"] == ERROR_CATALOG["RBAC_004"]["user_message"]

    @pytest.mark.asyncio
    async def test_explicit_code_and_status_override_defaults(self):
        exc = InvitationNotFoundError("INV_004", http_status=409)

        response = await handle_ledger_error(_request(), exc)

        assert response.status_code == 409
        assert json.loads(response.body)["error_code"] == "INV_004"

    @pytest.mark.asyncio
    async def test_details_not_exposed(self):
        exc = NotFoundError("API_006", details={"transaction_id": "secret-id"})

        response = await handle_ledger_error(_request(), exc)

        assert "secret-id" not in response.body.decode()


class TestValidationErrorHandler:
    @pytest.mark.asyncio
    async def test_lists_fields(self):
        exc = RequestValidationError(
            [{"loc": ("body", "amount"), "msg": "Input should be a valid decimal", "type": "decimal_parsing"}]
        )

        response = await handle_validation_error(_request(method="POST"), exc)

        assert response.status_code == 400
        body = json.loads(response.body)
        assert body["error_code"] == "VAL_001"
        assert "body.amount" in body["message"]


class TestIntegrityErrorHandler:
    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(self):
        exc = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed: wallet_members"))

        response = await handle_integrity_error(_request(method="POST"), exc)

        assert response.status_code == 409
        assert json.loads(response.body)["error_code"] == "DB_002"

    @pytest.mark.asyncio
    async def test_other_integrity_error_is_500(self):
        exc = IntegrityError("INSERT ...", {}, Exception("FOREIGN KEY constraint failed"))

        response = await handle_integrity_error(_request(method="POST"), exc)

        assert response.status_code == 500
        assert json.loads(response.body)["error_code"] == "DB_001"


class TestGenericErrorHandler:
    @pytest.mark.asyncio
    async def test_hides_internal_details(self):
        response = await handle_generic_error(_request(), RuntimeError("connection string leaked"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "SYS_001"
        assert "leaked" not in response.body.decode()


class TestExceptionHierarchy:
    def test_all_defaults_are_in_catalog(self):
        for cls in LedgerError.__subclasses__() + InvalidSpecError.__subclasses__():
            assert cls.default_code in ERROR_CATALOG, cls.__name__

    def test_already_reversed_is_invalid_spec_family(self):
        assert issubclass(TransactionAlreadyReversedError, InvalidSpecError)

    def test_storage_conflict_is_retryable(self):
        assert get_error(StorageConflictError().error_code)["retry_allowed"]

    def test_unknown_code_maps_to_generic(self):
        assert get_error("NOPE_999")["code"] == "UNKNOWN"


class TestPIIFiltering:
    def test_filters_email(self):
        assert filter_pii("invite sent to bob@example.com") == "invite sent to [EMAIL]"

    def test_filters_url_encoded_email(self):
        assert "[EMAIL]" in filter_pii("/api/invitations?email=bob%40example.com")

    def test_filters_card_number(self):
        assert "[CARD]" in filter_pii("paid with 4111 1111 1111 1111")

    def test_keeps_uuid_paths(self):
        path = "/api/wallets/6f1c2a3e-8d4b-4c2a-9e1f-0a1b2c3d4e5f/transactions"
        assert filter_pii(path) == path

    def test_empty_text(self):
        assert filter_pii("") == ""


class TestJSONLogFormatter:
    def test_includes_context_and_filters_message(self):
        record = logging.LogRecord(
            "spendwise.test", logging.INFO, __file__, 1, "hello bob@example.com", None, None
        )
        record.wallet_id = "w-1"
        record.request_id = "r-1"

        data = json.loads(JSONLogFormatter().format(record))

        assert data["message"] == "hello [EMAIL]"
        assert data["wallet_id"] == "w-1"
        assert data["request_id"] == "r-1"
        assert data["level"] == "INFO"

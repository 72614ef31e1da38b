from __future__ import annotations

from restock_sync.shared.exceptions.base import AppException
from restock_sync.shared.exceptions.domain import (
    DomainException,
    InvalidLocationException,
    UnknownSyncCommandException,
)


def test_domain_exceptions_are_app_exceptions_with_400() -> None:
    exc = InvalidLocationException("bondi", ["newtown", "paddington"])
    assert isinstance(exc, DomainException)
    assert isinstance(exc, AppException)
    assert exc.status_code == 400
    assert exc.error_code == "INVALID_LOCATION"
    assert "bondi" in exc.message


def test_unknown_command_maps_to_404() -> None:
    exc = UnknownSyncCommandException("invoices", ["sales"])
    assert exc.status_code == 404
    assert exc.details == {"command": "invoices", "valid_commands": ["sales"]}


def test_to_response_matches_relay_failure_shape() -> None:
    body = InvalidLocationException("bondi", ["newtown"]).to_response()
    assert body["success"] is False
    assert body["error"] == "INVALID_LOCATION"
    assert body["details"]["location_provided"] == "bondi"

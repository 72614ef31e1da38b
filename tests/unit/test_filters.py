from __future__ import annotations

from datetime import date

import pytest

from restock_sync.infrastructure.external.cin7_sync.filters import (
    filter_by_location,
    filter_by_window,
    location_for_reference,
    resolve_location,
)
from restock_sync.infrastructure.external.cin7_sync.types import SaleRecord
from restock_sync.shared.exceptions.domain import InvalidLocationException


def _sale(id_: int, reference=None, created=None) -> SaleRecord:
    return SaleRecord.from_payload({"id": id_, "reference": reference, "createdDate": created})


class TestFilterByWindow:
    def test_late_utc_timestamp_stays_on_its_calendar_day(self) -> None:
        sale = _sale(1, created="2024-05-01T23:59:59Z")
        assert filter_by_window([sale], date(2024, 5, 1)) == [sale]
        assert filter_by_window([sale], date(2024, 5, 2)) == []

    def test_records_without_date_are_dropped(self) -> None:
        assert filter_by_window([_sale(1)], date(2024, 5, 1)) == []

    def test_order_is_preserved(self) -> None:
        sales = [_sale(i, created="2024-05-01T10:00:00Z") for i in (3, 1, 2)]
        sales.insert(1, _sale(9, created="2024-04-30T10:00:00Z"))
        assert [s.id for s in filter_by_window(sales, date(2024, 5, 1))] == [3, 1, 2]


class TestFilterByLocation:
    def test_matches_prefix_before_first_separator(self) -> None:
        sales = [_sale(1, "279-0001"), _sale(2, "255c-0002"), _sale(3, "2790-3"), _sale(4, None)]
        assert [s.id for s in filter_by_location(sales, "279")] == [1]
        assert [s.id for s in filter_by_location(sales, "255c")] == [2]

    def test_location_for_reference(self) -> None:
        assert location_for_reference("255c-12") == "paddington"
        assert location_for_reference("999-1") is None
        assert location_for_reference(None) is None


class TestResolveLocation:
    def test_known_locations_are_case_insensitive(self) -> None:
        assert resolve_location("newtown") == "279"
        assert resolve_location(" Paddington ") == "255c"

    def test_unknown_location_raises_domain_error(self) -> None:
        with pytest.raises(InvalidLocationException) as exc:
            resolve_location("bondi")
        assert exc.value.status_code == 400
        assert exc.value.details["valid_locations"] == ["newtown", "paddington"]

"""
Order-history adapter and end-of-day report payload.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from cashdesk.services import cash_session_service, report_service, session_store
from cashdesk.time_utils import to_naive_utc
from cashdesk.validation import ValidationError


ORDERS = [
    {"id": "o1", "order_number": 1, "total": "120.00", "payment_method": "cash",
     "status": "completed", "created_at": "2026-10-17T10:00:00Z"},
    {"id": "o2", "order_number": 2, "total": "80.50", "subtotal": "70.00", "payment_method": "card",
     "status": "completed", "created_at": "2026-10-17T11:00:00Z"},
    {"id": "o3", "order_number": 3, "total": "15.00", "payment_method": "transfer",
     "status": "completed", "created_at": "2026-10-17T12:00:00+02:00"},
    {"id": "o4", "order_number": 4, "total": "999.00", "payment_method": "cash",
     "status": "pending", "created_at": "2026-10-17T12:30:00Z"},
    {"id": "o5", "order_number": 5, "total": "40.00", "payment_method": "cash",
     "status": "completed", "created_at": "2026-10-16T23:00:00Z"},
]


class TestSummarizeSales:

    def test_all_completed_orders(self):
        summary = report_service.summarize_sales(ORDERS)
        assert summary.cash_sales == Decimal("160.00")
        assert summary.card_sales == Decimal("95.50")
        assert summary.total_sales == Decimal("255.50")
        assert [o["order_id"] for o in summary.orders] == ["o1", "o2", "o3", "o5"]

    def test_since_session_start(self):
        summary = report_service.summarize_sales(ORDERS, since="2026-10-17T09:30:00Z")
        # o3 is 10:00 UTC, o5 is the previous day
        assert summary.cash_sales == Decimal("120.00")
        assert summary.card_sales == Decimal("95.50")
        assert [o["order_id"] for o in summary.orders] == ["o1", "o2", "o3"]

    def test_non_cash_methods_count_as_card(self):
        summary = report_service.summarize_sales([ORDERS[2]])
        assert summary.orders[0]["payment_method"] == "card"
        assert summary.orders[0]["subtotal"] == "15.00"

    @pytest.mark.parametrize("created_at", [12345, ["2026-10-17"], "yesterday"])
    def test_unusable_created_at_is_a_validation_error(self, created_at):
        order = {**ORDERS[0], "created_at": created_at}
        with pytest.raises(ValidationError):
            report_service.summarize_sales([order], since="2026-10-17T09:30:00Z")


def test_to_naive_utc_rejects_non_timestamp_types():
    with pytest.raises(TypeError):
        to_naive_utc(12345)


class TestEndOfDayReport:

    def test_payload_uses_persisted_numbers(self, db_session, opening_count):
        opened = cash_session_service.open_session(db_session, user_id="cashier-1", counts=opening_count)
        cash_session_service.close_session(
            db_session, opened.id,
            ending_cash="1750", cash_sales="500", card_sales="80.50",
            expenses="50", tips="20",
        )
        closed = cash_session_service.describe_closed_session(session_store.get_session(db_session, opened.id))

        payload = report_service.build_end_of_day_report(
            closed,
            orders=[],
            business_name="Taqueria",
            generated_at=datetime(2026, 10, 17, 22, 0, 0),
        )

        assert payload["business_name"] == "Taqueria"
        assert payload["report_date"] == "2026-10-17T22:00:00Z"
        assert payload["user"] == "cashier-1"
        assert payload["starting_cash"] == "1320.00"
        assert payload["cash_sales"] == "500.00"
        assert payload["card_sales"] == "80.50"
        assert payload["expected_cash_in_register"] == "1790.00"
        assert payload["calculated_difference"] == "-40.00"
        assert payload["variance"] == "shortage"
        assert payload["variance_summary"] == "Shortage of $40.00"
        assert payload["loans_withdrawals_reason"] == ""
        assert payload["sales_history"] == []
        assert payload["total_sales"] == "0.00"

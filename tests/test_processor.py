# tests/test_processor.py
from decimal import Decimal

from backend.lib.consumption_core.models import ConsumptionRecord, Prediction, INSUFFICIENT_DATA
from backend.lib.consumption_core.processor import Account, StatementBuilder, NOT_AVAILABLE

ACCOUNT = Account(number="1", name="Test Customer", address="1 Main Street")

def make_records():
    return [
        ConsumptionRecord(1, "2025-11-01", 10.0),
        ConsumptionRecord(2, "2025-11-02", 20.0),
        ConsumptionRecord(3, "2025-11-03", 30.0),
    ]

def test_line_items_and_charges():
    builder = StatementBuilder(7.5, "₹", ACCOUNT)
    bill = builder.build(make_records(), Prediction(4500.0, "₹4500.00"))
    assert [i.date for i in bill.items] == ["11/01/2025", "11/02/2025", "11/03/2025"]
    assert [i.amount for i in bill.items] == [Decimal("75.00"), Decimal("150.00"), Decimal("225.00")]
    assert all(i.unit_cost == 7.5 for i in bill.items)
    # latest line is the current charge, the rest carry over
    assert bill.current_charges == Decimal("225.00")
    assert bill.previous_charges == Decimal("225.00")
    assert bill.total_amount == Decimal("450.00")
    assert bill.predicted_bill == "₹4500.00"

def test_dates_hang_off_latest_record():
    builder = StatementBuilder(7.5, "₹", ACCOUNT)
    bill = builder.build(make_records(), Prediction(4500.0, "₹4500.00"))
    assert bill.statement_date == "November 03, 2025"
    assert bill.period_until == "November 03, 2025"
    assert bill.period_from == "October 04, 2025"
    assert bill.due_date == "November 18, 2025"

def test_single_record_has_no_previous_charges():
    builder = StatementBuilder(7.5, "₹", ACCOUNT)
    bill = builder.build([ConsumptionRecord(1, "2025-12-31", 4.0)], Prediction(None, INSUFFICIENT_DATA))
    assert bill.previous_charges == Decimal("0.00")
    assert bill.current_charges == Decimal("30.00")
    assert bill.due_date == "January 15, 2026"
    assert bill.predicted_bill == INSUFFICIENT_DATA

def test_empty_statement():
    builder = StatementBuilder(7.5, "₹", ACCOUNT)
    bill = builder.build([], Prediction(None, INSUFFICIENT_DATA))
    assert bill.items == []
    assert bill.total_amount == Decimal("0.00")
    assert bill.statement_date == NOT_AVAILABLE
    assert bill.due_date == NOT_AVAILABLE

def test_unparseable_date_is_kept_verbatim():
    builder = StatementBuilder(7.5, "₹", ACCOUNT)
    bill = builder.build([ConsumptionRecord(1, "last week", 2.0)], Prediction(None, INSUFFICIENT_DATA))
    assert bill.items[0].date == "last week"
    assert bill.period_from == NOT_AVAILABLE
    assert bill.current_charges == Decimal("15.00")

def test_large_readings_sum_exactly():
    builder = StatementBuilder(7.5, "₹", ACCOUNT)
    records = [ConsumptionRecord(i, f"2025-11-0{i}", 1e24) for i in (1, 2, 3)]
    bill = builder.build(records, Prediction(None, INSUFFICIENT_DATA))
    line = Decimal(1e24 * 7.5)
    assert bill.current_charges == line
    assert bill.previous_charges == line * 2
    assert bill.total_amount == line * 3

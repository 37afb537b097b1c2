from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, localcontext
from typing import List, Optional, Sequence
from .models import ConsumptionRecord, Prediction
from .estimator import round_currency, QUANTIZE_PRECISION

PERIOD_DAYS = 30
DUE_IN_DAYS = 15
LONG_DATE = "%B %d, %Y"
SHORT_DATE = "%m/%d/%Y"
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class Account:
    number: str
    name: str
    address: str


@dataclass(frozen=True)
class LineItem:
    date: str
    usage: float
    unit_cost: float
    amount: Decimal


@dataclass
class BillStatement:
    account: Account
    predicted_bill: str
    currency_symbol: str
    statement_date: str = NOT_AVAILABLE
    period_from: str = NOT_AVAILABLE
    period_until: str = NOT_AVAILABLE
    due_date: str = NOT_AVAILABLE
    items: List[LineItem] = field(default_factory=list)
    previous_charges: Decimal = Decimal('0.00')
    current_charges: Decimal = Decimal('0.00')

    @property
    def total_amount(self) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = QUANTIZE_PRECISION
            return self.previous_charges + self.current_charges


def parse_day(text: str) -> Optional[date]:
    """Parse an ISO 8601 date (or date-time) string; None if it is not one."""
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


class StatementBuilder:
    def __init__(self, tariff_per_unit: float, currency_symbol: str, account: Account):
        self.rate = float(tariff_per_unit)
        self.currency_symbol = currency_symbol
        self.account = account

    def build(self, records: Sequence[ConsumptionRecord], prediction: Prediction) -> BillStatement:
        """
        records: the full table, ascending by date (ConsumptionStore.list_all).

        Every record becomes a line item charged at the flat rate. The latest
        record's line is the current charge, everything before it is carried
        as previous charges. Statement dates hang off the latest record's date.
        """
        statement = BillStatement(
            account=self.account,
            predicted_bill=prediction.display,
            currency_symbol=self.currency_symbol,
        )
        if not records:
            return statement

        for r in records:
            day = parse_day(r.date)
            statement.items.append(LineItem(
                date=day.strftime(SHORT_DATE) if day else r.date,
                usage=r.consumption,
                unit_cost=self.rate,
                amount=round_currency(r.consumption * self.rate),
            ))

        *earlier, latest = statement.items
        with localcontext() as ctx:
            # exact cents even for very large readings
            ctx.prec = QUANTIZE_PRECISION
            statement.previous_charges = sum((i.amount for i in earlier), Decimal('0.00'))
        statement.current_charges = latest.amount

        latest_day = parse_day(records[-1].date)
        if latest_day:
            statement.statement_date = latest_day.strftime(LONG_DATE)
            statement.period_until = latest_day.strftime(LONG_DATE)
            statement.period_from = (latest_day - timedelta(days=PERIOD_DAYS)).strftime(LONG_DATE)
            statement.due_date = (latest_day + timedelta(days=DUE_IN_DAYS)).strftime(LONG_DATE)
        return statement

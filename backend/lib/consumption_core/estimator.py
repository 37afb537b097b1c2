# backend/lib/consumption_core/estimator.py
from typing import Sequence
from decimal import Decimal, ROUND_HALF_UP, localcontext
from .models import ConsumptionRecord, Prediction, INSUFFICIENT_DATA

WINDOW_SIZE = 3
# enough digits for the integer part of any finite float plus the cents
QUANTIZE_PRECISION = 400
BILLING_DAYS = 30
DEFAULT_TARIFF_PER_UNIT = 7.5
DEFAULT_CURRENCY_SYMBOL = "₹"


def round_currency(value: float) -> Decimal:
    # Decimal(float) keeps the exact binary value, so half-up rounding here
    # gives the same digits as JavaScript's toFixed(2) for positive amounts
    with localcontext() as ctx:
        ctx.prec = QUANTIZE_PRECISION
        return Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def format_currency(value: float, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return f"{symbol}{round_currency(value)}"


class BillPredictor:
    def __init__(self, tariff_per_unit: float = DEFAULT_TARIFF_PER_UNIT,
                 currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
                 window_size: int = WINDOW_SIZE):
        """
        tariff_per_unit: flat price per consumption unit (e.g. INR/kWh)
        window_size: how many of the most recent records are averaged
        """
        self.rate = float(tariff_per_unit)
        self.currency_symbol = currency_symbol
        self.window_size = window_size

    def predict(self, recent: Sequence[ConsumptionRecord]) -> Prediction:
        """
        recent: records ordered most recent first, as returned by
        ConsumptionStore.list_recent. Only the first window_size are used.

        Each record is taken to be one day's consumption, so the window
        average is projected onto a BILLING_DAYS cycle.
        """
        window = list(recent)[:self.window_size]
        if len(window) < self.window_size:
            return Prediction(amount=None, display=INSUFFICIENT_DATA)
        total = sum(r.consumption for r in window)
        average = total / self.window_size
        amount = average * self.rate * BILLING_DAYS
        return Prediction(amount=amount, display=format_currency(amount, self.currency_symbol))

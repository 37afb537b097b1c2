# backend/lib/consumption_core/models.py
from dataclasses import dataclass, asdict
from typing import Optional

INSUFFICIENT_DATA = "Not enough data to predict."
# three readings at this bound, times any sane tariff and 30 days, stay finite
MAX_CONSUMPTION = 1e300


@dataclass(frozen=True)
class ConsumptionRecord:
    id: int
    date: str
    consumption: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Prediction:
    """
    amount is None when there were not enough records to average.
    display is what the API and the bill show: '₹4500.00' or the sentinel text.
    """
    amount: Optional[float]
    display: str

    @property
    def sufficient(self) -> bool:
        return self.amount is not None

# backend/lib/consumption_core/io.py
import csv
import math
from datetime import date
from typing import List, Tuple
from io import StringIO
from .models import MAX_CONSUMPTION

def parse_csv_string(csv_text: str) -> List[Tuple[str, float]]:
    """
    Parse CSV text with header: date,consumption
    Dates should be ISO8601 calendar dates, e.g. 2025-11-01
    Returns (date, consumption) pairs in file order, ready for ConsumptionStore.append.
    """
    f = StringIO(csv_text.strip())
    reader = csv.DictReader(f)
    rows = []
    for row in reader:
        if not row.get('date') or not row.get('consumption'):
            raise ValueError(f"Missing field in row: {row}")
        day = row['date'].strip()
        # format check only; the text as written is what gets stored
        date.fromisoformat(day)
        consumption = float(row['consumption'])
        if not math.isfinite(consumption):
            raise ValueError(f"consumption must be a finite number: {row}")
        if consumption < 0:
            raise ValueError("consumption must be >= 0")
        if consumption > MAX_CONSUMPTION:
            raise ValueError(f"consumption must be <= {MAX_CONSUMPTION:g}")
        rows.append((day, consumption))
    return rows

# backend/run_local.py
"""
Bulk-load readings from a CSV file into the consumption store.

    python -m backend.run_local readings.csv

CSV header: date,consumption
"""
from backend.lib.consumption_core.io import parse_csv_string
from backend.lib.sqlite_service import ConsumptionStore, DEFAULT_DATABASE_PATH
from dotenv import load_dotenv
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

def main(csv_path, database_path=None):
    text = Path(csv_path).read_text(encoding="utf-8")
    # every row is validated before anything is written
    rows = parse_csv_string(text)
    store = ConsumptionStore(database_path or os.getenv("DATABASE_PATH", DEFAULT_DATABASE_PATH))
    try:
        ids = [store.append(day, consumption) for day, consumption in rows]
    finally:
        store.close()
    logger.info("Imported %d readings from %s", len(ids), csv_path)
    print(f"Imported {len(ids)} readings into {store.path}:")
    for new_id, (day, consumption) in zip(ids, rows):
        print(f" - #{new_id} {day} : {consumption}")
    return ids

if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    if len(sys.argv) < 2:
        sys.exit("usage: python -m backend.run_local <readings.csv>")
    main(sys.argv[1])

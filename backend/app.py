"""
=============================================================================
ELECTRICITY CONSUMPTION TRACKER - MAIN FLASK APPLICATION
=============================================================================

This is the backend server for the consumption tracker web page.
It provides REST API endpoints for:
- Recording a consumption reading (date + units consumed)
- Listing every stored reading for the chart
- Predicting the next bill from the three most recent readings
- Downloading a printable HTML bill

It also serves the web page itself (frontend/index.html and its assets).

How to run:
    python -m backend.app

Then visit: http://127.0.0.1:3000
=============================================================================
"""

# =============================================================================
# IMPORTS
# =============================================================================

# Flask - web framework: app object, request data, JSON and file responses
from flask import Flask, request, jsonify, send_from_directory, render_template, make_response

# Flask-CORS - lets the page (or any other origin) call the API
from flask_cors import CORS

import logging
import os
from pathlib import Path

# dotenv - Load environment variables from .env file
from dotenv import load_dotenv

# Must run before any os.getenv below
load_dotenv()

# =============================================================================
# CUSTOM LIBRARY IMPORTS
# =============================================================================

# ConsumptionStore: SQLite table of readings; StoreError: any storage failure
from backend.lib.sqlite_service import ConsumptionStore, StoreError, DEFAULT_DATABASE_PATH

# BillPredictor: moving average over the most recent readings -> predicted bill
from backend.lib.consumption_core.estimator import BillPredictor, WINDOW_SIZE

# StatementBuilder: line items and charges summary for the bill document
from backend.lib.consumption_core.processor import Account, StatementBuilder

# =============================================================================
# CONFIGURATION
# =============================================================================

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# SQLite file holding the readings (":memory:" for a throwaway store)
DATABASE_PATH = os.getenv("DATABASE_PATH", DEFAULT_DATABASE_PATH)

# Flat price per consumption unit, used by the prediction and the bill
TARIFF_PER_UNIT = float(os.getenv("TARIFF_PER_UNIT", "7.5"))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")

# Account block printed on the bill
ACCOUNT = Account(
    number=os.getenv("BILL_ACCOUNT_NO", "12345678910"),
    name=os.getenv("BILL_ACCOUNT_NAME", "Priya Sharma"),
    address=os.getenv("BILL_ADDRESS", "123, Gandhi Road, Bandra West, Mumbai, Maharashtra, 400050"),
)

# Where index.html, script.js and friends live
FRONTEND_DIR = Path(os.getenv("FRONTEND_DIR", str(PROJECT_ROOT / "frontend"))).resolve()

PORT = int(os.getenv("PORT", "3000"))

BILL_FILENAME = "electricity_bill.html"

# =============================================================================
# FLASK APPLICATION INITIALIZATION
# =============================================================================

app = Flask(__name__)

# Open to any origin, no credentials.
# send_wildcard makes the header a literal "*" instead of echoing the Origin
CORS(app, send_wildcard=True)

# One store for the whole process; the predictor and bill builder are stateless
store = ConsumptionStore(DATABASE_PATH)
predictor = BillPredictor(TARIFF_PER_UNIT, CURRENCY_SYMBOL)
statement_builder = StatementBuilder(TARIFF_PER_UNIT, CURRENCY_SYMBOL, ACCOUNT)


@app.template_filter("format_number")
def format_number(value, decimals: int = 2) -> str:
    """Format a number with thousand separators, e.g. 3000 -> '3,000.00'."""
    return f"{value:,.{decimals}f}"

# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.errorhandler(StoreError)
def handle_store_error(e):
    """
    Any storage failure becomes a 500 carrying the engine's message verbatim.
    No retries.
    """
    logger.error("Store error on %s %s: %s", request.method, request.path, e)
    return jsonify({"error": str(e)}), 500

# =============================================================================
# API ROUTES
# =============================================================================

@app.route("/api/consumption", methods=["POST"])
def add_consumption():
    """
    Record one consumption reading.

    Request Body (JSON):
        {"date": "2025-11-01", "consumption": 12.5}

    Returns:
        201 {"id": <new id>}

    HTTP Status Codes:
        400: date or consumption missing or falsy. A consumption of exactly 0
             is rejected too, the page has always treated 0 as "missing".
        400: consumption is not a number, is negative, or is too large to
             store (see MAX_CONSUMPTION). The CSV import applies the same
             checks but accepts 0.
        500: the store failed
    """
    # silent=True: a missing or malformed JSON body reads as None, not a 415/400 page
    data = request.get_json(silent=True)
    # A JSON list or scalar has no fields to read
    if not isinstance(data, dict):
        data = {}
    date = data.get("date")
    consumption = data.get("consumption")

    # Truthiness check: empty date, missing key, null and 0 all land here
    if not date or not consumption:
        return jsonify({"error": "Please provide both date and consumption"}), 400

    # The store does the type and range checks; its ValueError is a client error
    try:
        new_id = store.append(date, consumption)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"id": new_id}), 201


@app.route("/api/consumption", methods=["GET"])
def list_consumption():
    """
    Every stored reading, ascending by date.

    Example Response:
        [
            {"id": 1, "date": "2025-11-01", "consumption": 12.5},
            {"id": 2, "date": "2025-11-02", "consumption": 9.0}
        ]
    """
    # Whole table, no pagination; the chart plots every reading
    return jsonify([r.to_dict() for r in store.list_all()])


@app.route("/api/prediction", methods=["GET"])
def prediction():
    """
    Predict the next bill from the three most recent readings.

    average = sum(last 3 consumptions) / 3
    predicted = average * TARIFF_PER_UNIT * 30

    Example Response:
        {"predictedBill": "₹4500.00"}
    or, with fewer than three readings stored:
        {"predictedBill": "Not enough data to predict."}
    """
    # Only the window is fetched; older readings never affect the prediction
    result = predictor.predict(store.list_recent(WINDOW_SIZE))
    # display is either the formatted amount or the sentinel text, never an error
    return jsonify({"predictedBill": result.display})


@app.route("/api/bill", methods=["GET"])
def download_bill():
    """
    Download the bill as a self-contained HTML document.

    Built from the full list of readings and the current prediction:
    one meter line per reading, previous/current/total charges, and
    statement dates taken from the latest reading (period starts 30 days
    before it, payment is due 15 days after it).
    """
    # Everything the bill needs is passed in explicitly: readings, prediction, account
    records = store.list_all()
    result = predictor.predict(store.list_recent(WINDOW_SIZE))
    statement = statement_builder.build(records, result)

    # Jinja2 template in backend/templates, autoescaped
    response = make_response(render_template("bill.html", bill=statement))
    # attachment: the browser saves the page instead of navigating to it
    response.headers["Content-Type"] = "text/html; charset=utf-8"
    response.headers["Content-Disposition"] = f"attachment; filename={BILL_FILENAME}"
    return response

# =============================================================================
# STATIC FILES - the web page
# =============================================================================

@app.route("/")
def home():
    """Serve the frontend HTML page."""
    return send_from_directory(FRONTEND_DIR, "index.html")


@app.route("/<path:filename>")
def frontend_asset(filename):
    """Serve script.js, style.css and anything else next to index.html."""
    return send_from_directory(FRONTEND_DIR, filename)

# =============================================================================
# RUN THE SERVER
# =============================================================================

if __name__ == "__main__":
    # Development server only; debug is off so the store is opened once
    logger.info("Server running at http://localhost:%s", PORT)
    app.run(port=PORT)

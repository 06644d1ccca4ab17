"""Flask JSON API backing the expense tracker widget."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS

from ledger.chart import build_pie_figure
from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.exporters import ExportResult
from ledger.filters import filter_expenses
from ledger.models import FilterCriteria, format_amount
from ledger.storage import FileStorage, PersistenceAdapter
from ledger.tracker import Ledger
from ledger.validators import parse_optional_date

EXPENSE_FIELDS = ("amount", "category", "date")
INCOME_FIELDS = ("amount", "date")
FILTER_FIELDS = ("category", "date")


def create_app(
    data_dir: Optional[Path] = None,
    export_dir: Optional[Path] = None,
    storage: Optional[PersistenceAdapter] = None,
) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("EXPENSE_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    if storage is None:
        storage = FileStorage(Path(data_dir or os.getenv("EXPENSE_TRACKER_DATA_DIR", "data")))
    reports_dir = Path(export_dir or os.getenv("EXPENSE_TRACKER_EXPORT_DIR", "exports")).resolve()
    # One ledger per app: the widget is a single-user session.
    ledger = Ledger(storage, export_dir=reports_dir)
    app.extensions["ledger"] = ledger

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _pick(payload: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
        return {key: payload[key] for key in fields if key in payload}

    def _input_state() -> Dict[str, Any]:
        return {**ledger.mode.to_dict(), "expense": ledger.expense_input.to_dict()}

    def _record_response(record, created_status: int = 200):
        if record is None:
            # Empty fields leave the ledger untouched; the form keeps its text.
            return _success({"item": None, "input": _input_state()})
        return _success({"item": record.to_dict(), "input": _input_state()}, created_status)

    def _send_export(result: ExportResult):
        if not result.ok:
            return _handle_error(Exception(result.error), 500, "Export failed")
        return send_file(result.path, as_attachment=True, download_name=result.path.name)

    @app.get("/state")
    def state():
        return _success(ledger.snapshot())

    @app.get("/expenses")
    def list_expenses():
        category = request.args.get("category")
        day = request.args.get("date")
        if category is None and day is None:
            items = ledger.filtered_expenses()
        else:
            criteria = FilterCriteria(category=category or None, date=parse_optional_date(day))
            items = filter_expenses(ledger.expenses, criteria)
        return _success({"items": [expense.to_dict() for expense in items]})

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        ledger.enter_expense(**_pick(payload, EXPENSE_FIELDS))
        return _record_response(ledger.add_expense(), 201)

    @app.put("/expenses/<int:expense_id>")
    def update_expense(expense_id: int):
        payload = _json_body()
        return _record_response(ledger.replace_expense(expense_id, **_pick(payload, EXPENSE_FIELDS)))

    @app.delete("/expenses/<int:expense_id>")
    def delete_expense(expense_id: int):
        ledger.delete_expense(expense_id)
        return _success({}, 204)

    @app.post("/expenses/<int:expense_id>/edit")
    def edit_expense(expense_id: int):
        if ledger.edit_expense(expense_id) is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return _success(_input_state())

    @app.patch("/input/expense")
    def type_expense():
        ledger.enter_expense(**_pick(_json_body(), EXPENSE_FIELDS))
        return _success(_input_state())

    @app.post("/input/expense/submit")
    def submit_expense():
        return _record_response(ledger.submit_expense())

    @app.delete("/input/expense/edit")
    def cancel_edit():
        ledger.cancel_edit()
        return _success(_input_state())

    @app.get("/incomes")
    def list_incomes():
        return _success({"items": [income.to_dict() for income in ledger.incomes]})

    @app.post("/incomes")
    def create_income():
        payload = _json_body()
        ledger.enter_income(**_pick(payload, INCOME_FIELDS))
        income = ledger.add_income()
        if income is None:
            return _success({"item": None, "input": ledger.income_input.to_dict()})
        return _success({"item": income.to_dict()}, 201)

    @app.get("/filters")
    def get_filters():
        return _success({**ledger.criteria.to_dict(), "categories": ledger.categories()})

    @app.put("/filters")
    def set_filters():
        criteria = ledger.set_filters(**_pick(_json_body(), FILTER_FIELDS))
        return _success(criteria.to_dict())

    @app.delete("/filters")
    def clear_filters():
        return _success(ledger.clear_filters().to_dict())

    @app.get("/summary")
    def summary():
        return _success(ledger.summary().to_dict())

    @app.get("/chart")
    def chart():
        data = ledger.chart_data()
        return _success({"labels": data["labels"], "values": [format_amount(v) for v in data["values"]]})

    @app.get("/chart.html")
    def chart_html():
        figure = build_pie_figure(ledger.chart_data())
        return figure.to_html(include_plotlyjs="cdn", full_html=True), 200, {"Content-Type": "text/html"}

    @app.get("/export/pdf")
    def export_pdf():
        return _send_export(ledger.export_document())

    @app.get("/export/xlsx")
    def export_xlsx():
        return _send_export(ledger.export_spreadsheet())

    return app

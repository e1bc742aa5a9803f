# Overview: Flask API routes for cash-drawer sessions; parses input and returns JSON responses.

# backend/cashdesk/routes/cash_sessions.py
"""
Cash Session API Routes

Opening count dialog, active-session lookup and the end-of-day close.
Authentication happens upstream; the operator arrives as an opaque
`user_id` in the request body.

STATUS CODES:
- 400 ValidationError (bad counts/amounts, policy violations)
- 404 NotFoundError (unknown session, or no longer open for close)
- 409 ConflictError (a session is already open)
- 500 PersistenceError / unexpected failure (transaction rolled back)
"""

from flask import Blueprint, request, jsonify, current_app

from ..denominations import DENOMINATIONS
from ..extensions import db
from ..services import cash_session_service, report_service, session_store
from ..validation import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    parse_amount,
    parse_cash_count,
    parse_text,
)


cash_sessions_bp = Blueprint("cash_sessions", __name__, url_prefix="/api/cash-sessions")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data


@cash_sessions_bp.get("/denominations")
def list_denominations_route():
    """Denomination catalog used to render count forms."""
    return jsonify({"denominations": [d.to_dict() for d in DENOMINATIONS]}), 200


@cash_sessions_bp.get("/active")
def get_active_session_route():
    """
    Current open session, or null when the opening count dialog should be shown.
    """
    session = cash_session_service.get_active_session(db.session)
    return jsonify({"session": session.to_dict() if session else None}), 200


@cash_sessions_bp.post("/open")
def open_session_route():
    """
    Open a cash session from an opening denomination count.

    Request body:
    {
        "user_id": "cashier-7",            (optional)
        "counts": {"500": 2, "100": 3, "20": 1}
    }

    Returns 409 if a session is already open.
    """
    try:
        data = _json_body()
        counts = parse_cash_count(data.get("counts"))
        user_id = parse_text(data.get("user_id"), "user_id", max_length=64)

        session = cash_session_service.open_session(
            db.session,
            user_id=user_id,
            counts=counts,
            require_positive_total=current_app.config.get("CASHDESK_REQUIRE_POSITIVE_OPENING", False),
        )

        current_app.logger.info(
            "Cash session %s opened by %s with %s", session.id, user_id or "-", session.starting_cash
        )
        return jsonify({"session": session.to_dict(include_details=True)}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        current_app.logger.warning("Refused to open cash session: %s", e)
        return jsonify({"error": str(e)}), 409
    except PersistenceError:
        current_app.logger.exception("Failed to open cash session")
        return jsonify({"error": "Could not open cash session"}), 500
    except Exception:
        current_app.logger.exception("Failed to open cash session")
        return jsonify({"error": "Internal server error"}), 500


@cash_sessions_bp.post("/<int:session_id>/close")
def close_session_route(session_id: int):
    """
    Close a session and reconcile the drawer.

    Request body (either "counts" or "ending_cash"):
    {
        "counts": {"500": 3, "100": 2, ...},
        "ending_cash": "1790.00",
        "total_cash_sales": "500.00",
        "total_card_sales": "250.00",
        "total_expenses": "50.00",
        "total_tips": "20.00",
        "loan_amount": "0",
        "loan_reason": null
    }

    Response carries the closed session plus expected cash, the signed
    difference (positive surplus, negative shortage) and its label.
    """
    try:
        data = _json_body()
        ending_counts = parse_cash_count(data["counts"]) if data.get("counts") is not None else None
        ending_cash = parse_amount(data.get("ending_cash"), "ending_cash", default=None)

        report = cash_session_service.close_session(
            db.session,
            session_id,
            ending_counts=ending_counts,
            ending_cash=ending_cash,
            cash_sales=data.get("total_cash_sales"),
            card_sales=data.get("total_card_sales"),
            expenses=data.get("total_expenses"),
            tips=data.get("total_tips"),
            loan_amount=data.get("loan_amount"),
            loan_reason=data.get("loan_reason"),
            require_end_count=current_app.config.get("CASHDESK_REQUIRE_END_COUNT", False),
            currency_symbol=current_app.config.get("CASHDESK_CURRENCY_SYMBOL", "$"),
        )

        current_app.logger.info(
            "Cash session %s closed: expected %s, counted %s, %s",
            session_id, report.expected_cash, report.session.ending_cash, report.summary,
        )
        return jsonify(report.to_dict()), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        current_app.logger.warning("Refused to close cash session %s: %s", session_id, e)
        return jsonify({"error": str(e)}), 404
    except PersistenceError:
        current_app.logger.exception("Failed to close cash session %s", session_id)
        return jsonify({"error": "Could not close cash session"}), 500
    except Exception:
        current_app.logger.exception("Failed to close cash session %s", session_id)
        return jsonify({"error": "Internal server error"}), 500


@cash_sessions_bp.get("/<int:session_id>")
def get_session_route(session_id: int):
    """Session with its start/end count detail rows."""
    try:
        session = session_store.get_session(db.session, session_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"session": session.to_dict(include_details=True)}), 200


@cash_sessions_bp.get("/")
@cash_sessions_bp.get("")
def list_sessions_route():
    """
    List sessions, most recent first.

    Query params:
    - status: open | closed
    - limit: Max number of sessions to return (default: 50)
    """
    status = request.args.get("status")
    limit = request.args.get("limit", 50, type=int)

    if status and status not in ("open", "closed"):
        return jsonify({"error": "status must be 'open' or 'closed'"}), 400
    if limit is None or limit < 1:
        return jsonify({"error": "limit must be a positive integer"}), 400

    sessions = session_store.list_sessions(db.session, status=status, limit=min(limit, 500))
    return jsonify({"sessions": [s.to_dict() for s in sessions]}), 200


@cash_sessions_bp.post("/<int:session_id>/report")
def end_of_day_report_route(session_id: int):
    """
    End-of-day report payload for a closed session (input to the PDF renderer).

    Request body:
    {
        "orders": [{"id": "...", "order_number": 12, "total": "120.00",
                    "payment_method": "cash", "status": "completed",
                    "created_at": "2026-10-17T14:02:00Z"}],
        "business_name": "Taqueria",   (optional)
        "operator": "maria"            (optional)
    }
    """
    try:
        data = _json_body()
        orders = data.get("orders") or []
        if not isinstance(orders, list) or not all(isinstance(o, dict) for o in orders):
            raise ValidationError("orders must be a list of objects")

        session = session_store.get_session(db.session, session_id)
        closed = cash_session_service.describe_closed_session(
            session, currency_symbol=current_app.config.get("CASHDESK_CURRENCY_SYMBOL", "$")
        )
        payload = report_service.build_end_of_day_report(
            closed,
            orders=orders,
            business_name=parse_text(data.get("business_name"), "business_name", max_length=128) or "Cashdesk POS",
            operator=parse_text(data.get("operator"), "operator", max_length=64),
        )
        return jsonify({"report": payload}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to build report for cash session %s", session_id)
        return jsonify({"error": "Internal server error"}), 500

from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

SESSION_OPEN = "open"
SESSION_CLOSED = "closed"

DETAIL_START = "start"
DETAIL_END = "end"

SINGLE_OPEN_INDEX = "uq_cash_sessions_single_open"


def _money(value) -> str | None:
    return None if value is None else str(value)


class CashSession(db.Model):
    """
    One cash-drawer shift, from opening count to closing reconciliation.

    LIFECYCLE:
    - open: drawer in use, starting_cash fixed from the opening count
    - closed: closing fields and calculated_difference recorded (terminal)

    The partial unique index allows at most one row with status='open', so
    the single-active-session rule holds even when two opens race.
    """
    __tablename__ = "cash_sessions"
    __table_args__ = (
        db.CheckConstraint("status IN ('open', 'closed')", name="ck_cash_sessions_status"),
        db.CheckConstraint(
            "(status = 'open' AND calculated_difference IS NULL)"
            " OR (status = 'closed' AND calculated_difference IS NOT NULL)",
            name="ck_cash_sessions_difference_when_closed",
        ),
        db.Index(
            SINGLE_OPEN_INDEX,
            "status",
            unique=True,
            sqlite_where=db.text("status = 'open'"),
            postgresql_where=db.text("status = 'open'"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=True, index=True)  # opaque operator id

    start_time = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    end_time = db.Column(db.DateTime(timezone=True), nullable=True)

    starting_cash = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    ending_cash = db.Column(db.Numeric(12, 2), nullable=True)

    # Close-time aggregates supplied by the order history
    total_cash_sales = db.Column(db.Numeric(12, 2), nullable=True)
    total_card_sales = db.Column(db.Numeric(12, 2), nullable=True)
    total_expenses = db.Column(db.Numeric(12, 2), nullable=True)
    total_tips = db.Column(db.Numeric(12, 2), nullable=True)
    loans_withdrawals_amount = db.Column(db.Numeric(12, 2), nullable=True)
    loans_withdrawals_reason = db.Column(db.String(255), nullable=True)

    calculated_difference = db.Column(db.Numeric(12, 2), nullable=True)  # ending - expected

    status = db.Column(db.String(16), nullable=False, default=SESSION_OPEN, index=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    details = db.relationship(
        "CashSessionDetail",
        back_populates="cash_session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CashSessionDetail.id",
        lazy=True,
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<CashSession id={self.id} status={self.status!r}>"

    @property
    def is_open(self) -> bool:
        return self.status == SESSION_OPEN

    def to_dict(self, *, include_details: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "status": self.status,
            "start_time": to_utc_z(self.start_time),
            "end_time": to_utc_z(self.end_time),
            "starting_cash": _money(self.starting_cash),
            "ending_cash": _money(self.ending_cash),
            "total_cash_sales": _money(self.total_cash_sales),
            "total_card_sales": _money(self.total_card_sales),
            "total_expenses": _money(self.total_expenses),
            "total_tips": _money(self.total_tips),
            "loans_withdrawals_amount": _money(self.loans_withdrawals_amount),
            "loans_withdrawals_reason": self.loans_withdrawals_reason,
            "calculated_difference": _money(self.calculated_difference),
            "version_id": self.version_id,
        }
        if include_details:
            data["details"] = [d.to_dict() for d in self.details]
        return data


class CashSessionDetail(db.Model):
    """
    One counted denomination line of an opening (start) or closing (end) count.

    Append-only audit trail; rows go away only when their session is deleted.
    """
    __tablename__ = "cash_session_details"
    __table_args__ = (
        db.CheckConstraint("type IN ('start', 'end')", name="ck_cash_session_details_type"),
        db.CheckConstraint("quantity >= 0", name="ck_cash_session_details_quantity"),
        db.Index("ix_cash_session_details_session_type", "cash_session_id", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cash_session_id = db.Column(
        db.Integer,
        db.ForeignKey("cash_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = db.Column(db.String(8), nullable=False)
    denomination_value = db.Column(db.Numeric(12, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)

    cash_session = db.relationship("CashSession", back_populates="details")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cash_session_id": self.cash_session_id,
            "type": self.type,
            "denomination_value": _money(self.denomination_value),
            "quantity": self.quantity,
            "subtotal": _money(self.subtotal),
        }

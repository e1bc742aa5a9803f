# Overview: Flask CLI command groups for database bootstrap and cash session operations.

# backend/cashdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to cashdesk (PowerShell: $env:FLASK_APP="cashdesk").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Cash sessions:
# - python -m flask sessions denominations
#   Show the denomination catalog.
# - python -m flask sessions active
#   Show the open session, if any.
# - python -m flask sessions list --status closed --limit 20
#   List recent sessions with optional filters.
# - python -m flask sessions show 3
#   Show one session with its count detail rows.
# - python -m flask sessions open --count 500=2 --count 100=3 --user-id cashier-7
#   Open a session from an opening count.
# - python -m flask sessions close 3 --ending-cash 1790 --cash-sales 500 --expenses 50 --tips 20
#   Close a session (use repeated --count instead of --ending-cash for an itemized count).

import click
from flask import current_app
from flask.cli import with_appcontext

from .denominations import DENOMINATIONS
from .extensions import db
from .services import cash_session_service, session_store
from .validation import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    parse_amount,
    parse_cash_count,
)


def _money(value) -> str:
    return "-" if value is None else f"{value:,.2f}"


def _parse_count_options(pairs) -> dict:
    """--count VALUE=QTY pairs -> validated {denomination: quantity}."""
    raw = {}
    for pair in pairs:
        value, sep, quantity = pair.partition("=")
        if not sep:
            raise click.BadParameter(f"expected VALUE=QTY, got {pair!r}", param_hint="--count")
        raw[value.strip()] = quantity.strip()
    try:
        return parse_cash_count(raw)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--count")


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create any missing tables."""
    db.create_all()
    click.echo("PASS Database schema is up to date.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('sessions')
def sessions_group():
    """Cash-drawer session commands."""


@sessions_group.command('denominations')
def list_denominations_cli():
    """Show the denomination catalog."""
    click.echo(f"{'Value':>10}  {'Label':<8} {'Kind'}")
    for denomination in DENOMINATIONS:
        click.echo(f"{denomination.value:>10}  {denomination.label:<8} {denomination.kind}")


@sessions_group.command('active')
@with_appcontext
def active_session_cli():
    """Show the currently open session."""
    session = cash_session_service.get_active_session(db.session)
    if not session:
        click.echo("No open cash session.")
        return
    click.echo(
        f"Session {session.id} open since {session.start_time:%Y-%m-%d %H:%M} "
        f"by {session.user_id or '-'}; starting cash {_money(session.starting_cash)}"
    )


@sessions_group.command('list')
@click.option('--status', type=click.Choice(['open', 'closed']), help='Filter by status')
@click.option('--limit', type=int, default=20, show_default=True, help='Max sessions to show')
@with_appcontext
def list_sessions_cli(status, limit):
    """
    List cash sessions, most recent first.

    Example:
        flask sessions list
        flask sessions list --status closed
    """
    sessions = session_store.list_sessions(db.session, status=status, limit=limit)

    if not sessions:
        click.echo("No sessions found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'User':<15} {'Status':<8} {'Started':<17} {'Starting':>12} {'Ending':>12} {'Difference':>12}")
    click.echo("="*100)

    for session in sessions:
        diff = "-"
        if session.calculated_difference is not None:
            diff = f"{session.calculated_difference:+,.2f}"
        click.echo(
            f"{session.id:<5} {(session.user_id or '-'):<15} {session.status:<8} "
            f"{session.start_time:%Y-%m-%d %H:%M} {_money(session.starting_cash):>12} "
            f"{_money(session.ending_cash):>12} {diff:>12}"
        )

    click.echo("="*100 + "\n")


@sessions_group.command('show')
@click.argument('session_id', type=int)
@with_appcontext
def show_session_cli(session_id):
    """Show one session with its count detail rows."""
    try:
        session = session_store.get_session(db.session, session_id)
    except NotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Session {session.id} [{session.status}] user={session.user_id or '-'}")
    click.echo(f"  Starting cash:   {_money(session.starting_cash)}")
    click.echo(f"  Ending cash:     {_money(session.ending_cash)}")
    click.echo(f"  Cash sales:      {_money(session.total_cash_sales)}")
    click.echo(f"  Card sales:      {_money(session.total_card_sales)}")
    click.echo(f"  Expenses:        {_money(session.total_expenses)}")
    click.echo(f"  Tips:            {_money(session.total_tips)}")
    click.echo(f"  Loans/withdrawn: {_money(session.loans_withdrawals_amount)} {session.loans_withdrawals_reason or ''}")
    click.echo(f"  Difference:      {_money(session.calculated_difference)}")
    for detail in session.details:
        click.echo(f"  {detail.type:<5} {detail.denomination_value:>8} x {detail.quantity:<5} = {_money(detail.subtotal)}")


@sessions_group.command('open')
@click.option('--count', 'counts', multiple=True, metavar='VALUE=QTY', help='Counted quantity per denomination')
@click.option('--user-id', help='Operator identifier')
@with_appcontext
def open_session_cli(counts, user_id):
    """Open a cash session from an opening count."""
    try:
        session = cash_session_service.open_session(
            db.session,
            user_id=user_id,
            counts=_parse_count_options(counts),
            require_positive_total=current_app.config.get("CASHDESK_REQUIRE_POSITIVE_OPENING", False),
        )
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    except PersistenceError:
        current_app.logger.exception("Failed to open cash session from CLI")
        raise click.ClickException("Could not open cash session")

    click.echo(f"PASS Opened session {session.id} with starting cash {_money(session.starting_cash)}")


@sessions_group.command('close')
@click.argument('session_id', type=int)
@click.option('--count', 'counts', multiple=True, metavar='VALUE=QTY', help='Closing count per denomination')
@click.option('--ending-cash', help='Counted drawer total (instead of --count)')
@click.option('--cash-sales', default='0', show_default=True)
@click.option('--card-sales', default='0', show_default=True)
@click.option('--expenses', default='0', show_default=True)
@click.option('--tips', default='0', show_default=True)
@click.option('--loan-amount', default='0', show_default=True)
@click.option('--loan-reason', help='Required when --loan-amount is above zero')
@with_appcontext
def close_session_cli(session_id, counts, ending_cash, cash_sales, card_sales, expenses, tips, loan_amount, loan_reason):
    """Close a cash session and print the reconciliation."""
    try:
        report = cash_session_service.close_session(
            db.session,
            session_id,
            ending_counts=_parse_count_options(counts) if counts else None,
            ending_cash=parse_amount(ending_cash, "ending_cash", default=None),
            cash_sales=cash_sales,
            card_sales=card_sales,
            expenses=expenses,
            tips=tips,
            loan_amount=loan_amount,
            loan_reason=loan_reason,
            require_end_count=current_app.config.get("CASHDESK_REQUIRE_END_COUNT", False),
            currency_symbol=current_app.config.get("CASHDESK_CURRENCY_SYMBOL", "$"),
        )
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))
    except PersistenceError:
        current_app.logger.exception("Failed to close cash session %s from CLI", session_id)
        raise click.ClickException("Could not close cash session")

    click.echo(f"PASS Closed session {session_id}")
    click.echo(f"  Expected cash: {_money(report.expected_cash)}")
    click.echo(f"  Counted cash:  {_money(report.session.ending_cash)}")
    click.echo(f"  {report.summary}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(sessions_group)

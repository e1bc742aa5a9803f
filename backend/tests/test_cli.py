"""
Flask CLI commands for cash sessions.
"""

from cashdesk.extensions import db
from cashdesk.services import session_store


class TestSessionCommands:

    def test_denominations(self, runner):
        result = runner.invoke(args=["sessions", "denominations"])
        assert result.exit_code == 0
        assert "$0.50" in result.output

    def test_open_show_close(self, runner):
        result = runner.invoke(args=["sessions", "open", "--count", "500=2", "--count", "100=3",
                                     "--count", "20=1", "--user-id", "cli-user"])
        assert result.exit_code == 0, result.output
        assert "1,320.00" in result.output

        active = session_store.find_active_session(db.session)
        assert active.user_id == "cli-user"

        result = runner.invoke(args=["sessions", "active"])
        assert f"Session {active.id}" in result.output

        result = runner.invoke(args=["sessions", "close", str(active.id), "--ending-cash", "1750",
                                     "--cash-sales", "500", "--expenses", "50", "--tips", "20"])
        assert result.exit_code == 0, result.output
        assert "Shortage of $40.00" in result.output

        result = runner.invoke(args=["sessions", "show", str(active.id)])
        assert result.exit_code == 0
        assert "[closed]" in result.output

        result = runner.invoke(args=["sessions", "list"])
        assert "-40.00" in result.output

    def test_open_twice_fails(self, runner):
        assert runner.invoke(args=["sessions", "open", "--count", "100=1"]).exit_code == 0
        result = runner.invoke(args=["sessions", "open", "--count", "100=1"])
        assert result.exit_code != 0
        assert "already open" in result.output

    def test_bad_count_option(self, runner):
        result = runner.invoke(args=["sessions", "open", "--count", "100"])
        assert result.exit_code != 0

    def test_no_active_session(self, runner):
        result = runner.invoke(args=["sessions", "active"])
        assert "No open cash session." in result.output

from datetime import datetime, timedelta, timezone

from systematic_reasoning.modules.ledger import display
from systematic_reasoning.modules.ledger.reflection import Reflection
from systematic_reasoning.modules.ledger.ticket import ReasoningTicket


def test_no_color_when_not_a_tty(capsys):
    assert display.color("x", display.RED) == "x"


def test_truncate():
    assert display.truncate("short") == "short"
    assert display.truncate("a" * 70, 10) == "aaaaaaa..."


def test_format_timestamp_relative_and_absolute():
    now = datetime.now(timezone.utc)
    assert display.format_timestamp(now) == "just now"
    assert display.format_timestamp(now - timedelta(minutes=5)) == "5m ago"
    assert display.format_timestamp((now - timedelta(hours=3)).isoformat()) == "3h ago"
    assert display.format_timestamp(datetime(2024, 1, 2, 3, 4, tzinfo=timezone.utc)) == "2024-01-02 03:04"


def test_rows_include_ids_and_text():
    ticket = ReasoningTicket.create("/proj", "fix bug")
    assert ticket.id in display.format_ticket_row(ticket)
    assert "active" in display.format_ticket_row(ticket)

    reflection = Reflection.create(ticket.id, "fix bug", "failure", "read the stack trace")
    row = display.format_reflection_row(reflection)
    assert "failure" in row
    assert "read the stack trace" in row

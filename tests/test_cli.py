import json

import pytest

from systematic_reasoning.cli import main
from systematic_reasoning.modules.core.config import Settings
from systematic_reasoning.modules.ledger.keying import namespace_of
from systematic_reasoning.modules.ledger.lifecycle import TicketLifecycle


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.delenv("SYSREASON_HOME", raising=False)
    return tmp_path


@pytest.fixture
def lifecycle(home):
    return TicketLifecycle.from_settings(Settings(home=home))


def test_cli_namespace(home, capsys):
    assert main(["--home", str(home), "namespace", "/proj"]) == 0
    assert capsys.readouterr().out.strip() == namespace_of("/proj")


def test_cli_tickets_json(home, lifecycle, capsys):
    ticket = lifecycle.begin("/proj", "fix bug").ticket
    assert main(["--home", str(home), "--json", "tickets", "/proj"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload[0]["id"] == ticket.id
    assert payload[0]["status"] == "active"


def test_cli_tickets_text_without_history(home, capsys):
    assert main(["--home", str(home), "tickets", "/proj"]) == 0
    assert "No tickets found." in capsys.readouterr().out


def test_cli_reflections_and_search(home, lifecycle, capsys):
    ticket = lifecycle.begin("/proj", "fix bug").ticket
    lifecycle.complete("/proj", ticket.id, "fix bug", "success", "check null before deref")

    assert main(["--home", str(home), "reflections", "/proj"]) == 0
    out = capsys.readouterr().out
    assert ticket.id in out
    assert "check null before deref" in out

    assert main(["--home", str(home), "--json", "search", "null", "deref", "-w", "/proj"]) == 0
    [hit] = json.loads(capsys.readouterr().out)
    assert hit["ticket_id"] == ticket.id

    assert main(["--home", str(home), "search", "null", "deref"]) == 0
    assert "/proj" in capsys.readouterr().out


def test_cli_revert(home, lifecycle, capsys):
    ticket = lifecycle.begin("/proj", "fix bug").ticket
    assert main(["--home", str(home), "revert", "/proj", ticket.id]) == 0
    assert f"Reverted {ticket.id}" in capsys.readouterr().out
    assert main(["--home", str(home), "revert", "/proj", ticket.id]) == 0
    assert "Nothing to revert" in capsys.readouterr().out


def test_cli_status(home, lifecycle, capsys):
    lifecycle.begin("/proj", "fix bug")
    assert main(["--home", str(home), "status", "/proj"]) == 0
    out = capsys.readouterr().out
    assert "Tickets: 1" in out
    assert "fix bug" in out


def test_cli_reports_corrupt_ledger(home, capsys):
    ledger = home / "workspaces" / namespace_of("/proj") / "tickets.json"
    ledger.parent.mkdir(parents=True)
    ledger.write_text("{")
    assert main(["--home", str(home), "tickets", "/proj"]) == 1
    assert "SRM_ERR_STORAGE_CORRUPT" in capsys.readouterr().err


def test_cli_rejects_bad_environment(home, monkeypatch, capsys):
    monkeypatch.setenv("SYSREASON_MAX_REFLECTIONS", "lots")
    assert main(["--home", str(home), "namespace", "/proj"]) == 1
    assert "SYSREASON_MAX_REFLECTIONS" in capsys.readouterr().err


def test_cli_json_error_envelope(home, lifecycle, capsys):
    lifecycle.begin("/proj", "fix bug")
    ledger = home / "workspaces" / namespace_of("/proj") / "tickets.json"
    ledger.write_text("[1, 2")
    assert main(["--home", str(home), "--json", "status", "/proj"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] is True
    assert payload["code"] == "SRM_ERR_STORAGE_CORRUPT"
    assert payload["details"]["path"] == str(ledger)

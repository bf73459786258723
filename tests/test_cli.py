"""Tests for the command-line entry point."""

import json

import pytest

from main import build_parser


def _run(argv):
    args = build_parser().parse_args(argv)
    return args.handler(args)


class TestParser:
    def test_slots_arguments(self):
        args = build_parser().parse_args(
            ["slots", "--service", "nail-trim", "--pet", "pet-mia",
             "--from", "2026-03-09", "--to", "2026-03-10"]
        )
        assert args.provider == "paws-salon"
        assert args.date_from == "2026-03-09"
        assert args.tz is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    def test_slots_prints_json(self, capsys):
        code = _run([
            "slots", "--service", "nail-trim", "--pet", "pet-mia",
            "--from", "2026-03-09", "--to", "2026-03-10", "--tz", "America/New_York",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert code == 0
        assert payload["success"]
        # 09:00-17:00 with a 15-minute service and a 15-minute step.
        assert len(payload["slots"]["2026-03-09"]) == 32
        assert payload["slots"]["2026-03-09"][0] == "2026-03-09T09:00:00-04:00"

    def test_slots_on_holiday(self, capsys):
        _run([
            "slots", "--service", "nail-trim", "--pet", "pet-mia",
            "--from", "2026-12-25", "--to", "2026-12-26",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert payload["slots"]["2026-12-25"] == []

    def test_book_prints_confirmation(self, capsys):
        code = _run([
            "book", "--service", "nail-trim", "--pet", "pet-mia",
            "--start", "2026-03-09T14:00:00Z", "--key", "cli-test",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert code == 0
        assert payload["booking"]["status"] == "confirmed"
        assert payload["booking"]["idempotency_key"] == "cli-test"

    def test_book_outside_hours_fails(self, capsys):
        code = _run([
            "book", "--service", "nail-trim", "--pet", "pet-mia",
            "--start", "2026-03-09T03:00:00Z",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert code == 1
        assert payload["error"]["code"] == "invalid_input"

    def test_audit_empty_store_passes(self, capsys):
        code = _run(["audit", "--from", "2026-03-09", "--to", "2026-03-16"])
        out = capsys.readouterr().out
        assert code == 0
        assert "PASS" in out

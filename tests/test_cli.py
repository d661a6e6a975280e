"""Tests for the teamgate command line."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest
from click.testing import CliRunner

from teamgate.auth.jwt import verify_token
from teamgate.cli import main


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("TEAMGATE_HOME", str(tmp_path))
    monkeypatch.setenv("TEAMGATE_JWT_SECRET", "cli-secret")
    return tmp_path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner(env={"COLUMNS": "200"})


def test_init(runner: CliRunner, tmp_path: Path) -> None:
    target = tmp_path / "home"
    result = runner.invoke(main, ["init", str(target)])

    assert result.exit_code == 0
    assert (target / "teamgate.db").exists()
    assert (target / "config.yaml").exists()


def test_init_defaults_to_env_home(runner: CliRunner, home: Path) -> None:
    result = runner.invoke(main, ["init"])

    assert result.exit_code == 0
    assert (home / "teamgate.db").exists()
    assert (home / "config.yaml").exists()


def test_matrix(runner: CliRunner) -> None:
    result = runner.invoke(main, ["matrix"])

    assert result.exit_code == 0
    assert "Broker Agent" in result.output
    assert "financial" in result.output


def test_resolve_legacy_then_assignment(runner: CliRunner, home: Path) -> None:
    assert runner.invoke(main, ["profile", "alice", "--legacy-role", "lender"]).exit_code == 0

    result = runner.invoke(main, ["resolve", "alice", "--team", "T1"])
    assert result.exit_code == 0
    assert "Lender" in result.output

    assert runner.invoke(main, ["assign", "alice", "T1", "owner"]).exit_code == 0
    result = runner.invoke(main, ["resolve", "alice", "--team", "T1"])
    assert "Owner" in result.output


def test_resolve_without_team(runner: CliRunner, home: Path) -> None:
    runner.invoke(main, ["profile", "alice", "--legacy-role", "owner"])
    result = runner.invoke(main, ["resolve", "alice"])

    assert result.exit_code == 0
    assert "Member" in result.output


def test_profile_update(runner: CliRunner, home: Path) -> None:
    runner.invoke(main, ["profile", "alice"])
    result = runner.invoke(main, ["profile", "alice", "--legacy-role", "attorney"])

    assert result.exit_code == 0
    assert "legacy_role" in result.output
    result = runner.invoke(main, ["resolve", "alice", "--team", "T1"])
    assert "Attorney" in result.output


def test_profile_update_keeps_legacy_role(runner: CliRunner, home: Path) -> None:
    assert runner.invoke(main, ["profile", "alice", "--legacy-role", "lender"]).exit_code == 0

    result = runner.invoke(main, ["profile", "alice", "--email", "a@x.io", "--name", "Alice"])
    assert result.exit_code == 0
    assert "email, full_name" in result.output

    result = runner.invoke(main, ["resolve", "alice", "--team", "T1"])
    assert "Lender" in result.output


def test_profile_update_without_fields(runner: CliRunner, home: Path) -> None:
    runner.invoke(main, ["profile", "alice", "--legacy-role", "lender"])
    result = runner.invoke(main, ["profile", "alice"])

    assert result.exit_code == 0
    assert "Nothing to update" in result.output
    assert "Lender" in runner.invoke(main, ["resolve", "alice", "--team", "T1"]).output


def test_members_and_revoke(runner: CliRunner, home: Path) -> None:
    runner.invoke(main, ["assign", "bob", "T1", "inspector"])
    result = runner.invoke(main, ["members", "T1"])
    assert "bob" in result.output
    assert "Inspector" in result.output

    assert runner.invoke(main, ["revoke", "bob", "T1"]).exit_code == 0
    result = runner.invoke(main, ["revoke", "bob", "T1"])
    assert result.exit_code == 1


def test_members_marks_unknown_stored_role(runner: CliRunner, home: Path) -> None:
    runner.invoke(main, ["assign", "bob", "T1", "inspector"])
    with sqlite3.connect(home / "teamgate.db") as db:
        db.execute(
            "INSERT INTO team_roles (actor_id, team_id, role, assigned_at) VALUES (?, ?, ?, ?)",
            ("carol", "T1", "shark_agent", "2026-01-01T00:00:00+00:00"),
        )

    result = runner.invoke(main, ["members", "T1"])
    assert result.exit_code == 0
    assert "shark_agent (unknown)" in result.output
    assert "Inspector" in result.output


def test_assign_rejects_unknown_role(runner: CliRunner, home: Path) -> None:
    result = runner.invoke(main, ["assign", "bob", "T1", "superuser"])
    assert result.exit_code != 0


def test_token(runner: CliRunner, home: Path) -> None:
    result = runner.invoke(main, ["token", "alice", "--team", "T1"])

    assert result.exit_code == 0
    payload = verify_token(result.output.strip(), "cli-secret")
    assert payload["sub"] == "alice"
    assert payload["team"] == "T1"

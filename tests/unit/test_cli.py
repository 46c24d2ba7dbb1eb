"""
Unit tests for the interactive command shell.

Outcome-focused: each test feeds text commands to LinkShell and checks the
printed messages and the resulting link state.
"""

import uuid

import pytest

from clicklink.cli import LinkShell, main


@pytest.fixture
def shell(manager, users):
    return LinkShell(manager, users)


def run(shell, *lines):
    for line in lines:
        assert shell.handle(line) is True


def output(capsys):
    return capsys.readouterr().out


def shorten(shell, capsys, args="https://example.com 6 1"):
    run(shell, f"short {args}")
    line = [l for l in output(capsys).splitlines() if l.startswith("Shortened link: ")][-1]
    return line.split(": ", 1)[1]


def test_help_and_unknown_command(shell, capsys):
    run(shell, "help", "frobnicate", "   ")
    out = output(capsys)
    assert "short url clicksLimit lifetimeHours" in out
    assert "Unknown command" in out


def test_exit_stops_the_loop(shell):
    assert shell.handle("EXIT") is False


def test_register_logs_in(shell, users, capsys):
    run(shell, "register")
    assert shell.user_id is not None
    assert users.is_user_exist(shell.user_id)
    assert "registered with UUID" in output(capsys)


def test_login_known_and_unknown(shell, users, capsys):
    known = users.create_user_id()
    run(shell, "login", f"login {uuid.uuid4()}", f"login {known}")
    out = output(capsys)
    assert "Usage: login UUID" in out
    assert "not registered" in out
    assert shell.user_id == known


def test_login_rejects_malformed_uuid(shell, users, capsys):
    run(shell, "register")
    current = shell.user_id
    run(shell, "login not-a-user", "login 1234")
    out = output(capsys)
    assert out.count("Invalid UUID") == 2
    assert "not registered" not in out
    assert shell.user_id == current


def test_short_requires_login(shell, storage, capsys):
    run(shell, "short https://example.com 6 1")
    assert "Please register or login" in output(capsys)
    assert len(storage) == 0


def test_short_validates_arguments(shell, storage, capsys):
    run(shell, "register", "short https://example.com", "short https://example.com six 1")
    out = output(capsys)
    assert "Incorrect input format" in out
    assert "Invalid number format" in out
    assert len(storage) == 0


def test_short_then_open_until_exhausted(shell, storage, opener, capsys):
    run(shell, "register")
    short_url = shorten(shell, capsys, "https://example.com 1 1")
    assert short_url.startswith("http://clck.ru/")

    run(shell, *[f"open {short_url}"] * 6)
    out = output(capsys)
    assert opener.opened == ["https://example.com"] * 6
    assert "The click limit has been reached" in out
    assert len(storage) == 0

    run(shell, f"open {short_url}")
    assert "Link not found" in output(capsys)


def test_open_reports_when_no_browser(shell, opener, capsys):
    opener.result = False
    run(shell, "register")
    short_url = shorten(shell, capsys)
    run(shell, f"open {short_url}")
    assert "Open the link: https://example.com" in output(capsys)


def test_open_reports_expired(shell, clock, capsys):
    run(shell, "register")
    short_url = shorten(shell, capsys)
    clock.advance(hours=2)
    run(shell, f"open {short_url}")
    assert "deleted because it is unavailable" in output(capsys)


def test_edit_clicks_limit_owner_and_intruder(shell, users, manager, capsys):
    run(shell, "register")
    short_url = shorten(shell, capsys)

    run(shell, f"edit_clicks_limit {short_url} 2")
    assert "changed to: 6" in output(capsys)
    run(shell, f"edit_clicks_limit {short_url} 30")
    assert "changed to: 30" in output(capsys)

    run(shell, f"login {users.create_user_id()}", f"edit_clicks_limit {short_url} 99")
    assert "not the owner" in output(capsys)
    assert manager.get_link(short_url).click_limit == 30


def test_edit_clicks_limit_bad_input(shell, capsys):
    run(shell, "register", "edit_clicks_limit abc", "edit_clicks_limit abc many", "edit_clicks_limit abc 7")
    out = output(capsys)
    assert "Incorrect input format" in out
    assert "Invalid number format" in out
    assert "The link was not found" in out


def test_remove_owner_and_intruder(shell, users, storage, capsys):
    run(shell, "register")
    short_url = shorten(shell, capsys)
    owner = shell.user_id

    run(shell, f"login {users.create_user_id()}", f"remove {short_url}")
    assert "not the owner" in output(capsys)
    assert len(storage) == 1

    run(shell, f"login {owner}", f"remove {short_url}")
    assert "The link has been deleted" in output(capsys)
    assert len(storage) == 0


def test_refusals_are_reported_without_a_second_lookup(shell, users, manager, monkeypatch, capsys):
    run(shell, "register")
    short_url = shorten(shell, capsys)
    owner = shell.user_id

    def no_lookup(code):
        raise AssertionError("refusal must not look the link up again")

    monkeypatch.setattr(manager, "get_link", no_lookup)
    run(shell, f"login {users.create_user_id()}", f"edit_clicks_limit {short_url} 9", f"remove {short_url}")
    assert output(capsys).count("You are not the owner of this link") == 2

    run(shell, f"login {owner}", "edit_clicks_limit nope00 9", "remove nope00")
    assert output(capsys).count("The link was not found") == 2


def test_clear_removes_expired(shell, storage, clock, capsys):
    run(shell, "register")
    shorten(shell, capsys, "https://a.com 6 1")
    shorten(shell, capsys, "https://b.com 6 5")
    clock.advance(hours=2)
    run(shell, "clear")
    assert "Expired links have been removed: 1" in output(capsys)
    assert len(storage) == 1


def test_run_stops_at_exit(shell, capsys):
    shell.run(["help", "exit", "register"])
    out = output(capsys)
    assert "Welcome to the URL Shortening Service!" in out
    assert shell.user_id is None


def test_main_fails_without_config(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.properties")]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_main_runs_shell_over_stdin(tmp_path, monkeypatch, capsys):
    config = tmp_path / "config.properties"
    config.write_text("clicksLimit=2\n", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", iter(["register\n", "exit\n"]))
    assert main(["--config", str(config)]) == 0
    assert "registered with UUID" in capsys.readouterr().out

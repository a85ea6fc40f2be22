import sys
from unittest import mock

import pytest
from click.testing import CliRunner

from sshmgr import cli as cli_module, clipboard, launcher
from sshmgr.automation import AutomationEngine, prompt_command
from sshmgr.cli import CHANGE_PROMPT_COLOR, CLEAR_SCREEN, ENTER_PASSWORD, ESCALATE, cli
from sshmgr.inventory import Record

DB1 = Record("db1", "10.0.0.5", "admin", "secret123", "Primary DB", "5432")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, inventory_file):
    def _invoke(*args):
        return runner.invoke(cli, ["--inventory", str(inventory_file), *args], prog_name="sshmgr")
    return _invoke


@pytest.fixture
def picked(monkeypatch):
    choice = mock.Mock(return_value="db1")
    monkeypatch.setattr(cli_module, "select", choice)
    return choice


def test_no_action_prints_help(runner):
    result = runner.invoke(cli, [], prog_name="sshmgr")

    assert result.exit_code == 0
    assert "--connect-proxied" in result.output


def test_help(runner):
    result = runner.invoke(cli, ["-h"], prog_name="sshmgr")

    assert result.exit_code == 0
    assert "Copies password of selected instance to clipboard" in result.output


def test_unknown_option(runner):
    result = runner.invoke(cli, ["--bogus"], prog_name="sshmgr")

    assert result.exit_code == 2
    assert "No such option" in result.output


def test_stray_argument(runner):
    assert runner.invoke(cli, ["-c", "db1"], prog_name="sshmgr").exit_code == 2


def test_actions_are_exclusive(invoke):
    result = invoke("-c", "-d")

    assert result.exit_code == 2
    assert "mutually exclusive" in result.output


def test_first_run_creates_template(runner, tmp_path, picked):
    path = tmp_path / "servers.csv"

    result = runner.invoke(cli, ["--inventory", str(path), "-c"])

    assert result.exit_code == 0
    assert "Template generated" in result.output
    assert path.read_text().startswith("Name,IP,User")
    picked.assert_not_called()


@pytest.mark.parametrize("flag, proxied", [("-c", False), ("--connect", False), ("-x", True)])
def test_connect(invoke, picked, monkeypatch, inventory_file, flag, proxied):
    fake_connect = mock.Mock(return_value=0)
    monkeypatch.setattr(cli_module, "connect", fake_connect)

    result = invoke(flag)

    assert result.exit_code == 0
    assert set(picked.call_args.args[0]) == {"db1", "web1"}
    record, settings = fake_connect.call_args.args
    assert record == DB1
    assert settings.inventory == inventory_file
    assert fake_connect.call_args.kwargs["proxied"] is proxied


@pytest.mark.parametrize("flag", ["-c", "-x", "-d", "-p"])
def test_cancelled_selection_does_nothing(invoke, picked, monkeypatch, flag):
    picked.return_value = None
    for name in ("connect", "copy_plain", "copy_sensitive"):
        monkeypatch.setattr(cli_module, name, mock.Mock())

    result = invoke(flag)

    assert result.exit_code == 0
    assert result.output == ""
    cli_module.connect.assert_not_called()
    cli_module.copy_plain.assert_not_called()
    cli_module.copy_sensitive.assert_not_called()


def test_describe(invoke, picked, monkeypatch):
    copy = mock.Mock()
    monkeypatch.setattr(cli_module, "copy_plain", copy)

    result = invoke("-d")

    assert result.exit_code == 0
    assert "db1" in result.output
    assert "Description: Primary DB" in result.output
    assert "IP: 10.0.0.5" in result.output
    copy.assert_called_once_with("10.0.0.5")


def test_describe_without_address(runner, tmp_path, picked, monkeypatch):
    path = tmp_path / "servers.csv"
    path.write_text("db1,,admin,secret123,Primary DB,5432\n")
    copy = mock.Mock()
    monkeypatch.setattr(cli_module, "copy_plain", copy)

    result = runner.invoke(cli, ["--inventory", str(path), "-d"])

    assert result.exit_code == 0
    assert "Description: Primary DB" in result.output
    assert "IP:" not in result.output
    copy.assert_called_once_with("")


def test_password(invoke, picked, monkeypatch):
    copy = mock.Mock()
    monkeypatch.setattr(cli_module, "copy_sensitive", copy)

    result = invoke("-p")

    assert result.exit_code == 0
    assert result.output == ""
    copy.assert_called_once_with("secret123", 10)


def test_conveniences(invoke, picked, monkeypatch):
    menu = mock.Mock()
    menu.choose.return_value = [CHANGE_PROMPT_COLOR, ENTER_PASSWORD, ESCALATE, CLEAR_SCREEN]
    engine = mock.Mock()
    monkeypatch.setattr(cli_module, "fzf", lambda command: menu)
    monkeypatch.setattr(cli_module, "build_engine", lambda settings: engine)

    result = invoke("-t")

    assert result.exit_code == 0
    assert menu.choose.call_args.kwargs["multi"] is True
    engine.type_credential.assert_called_once_with("secret123")
    engine.escalate_privilege.assert_called_once_with("secret123")
    engine.recolor_prompt.assert_called_once_with(None)
    engine.clear_screen.assert_called_once_with()
    assert picked.call_count == 2


def test_clear_clipboard_child(runner, monkeypatch):
    copied = []
    monkeypatch.setattr(clipboard.pyperclip, "copy", copied.append)

    result = runner.invoke(cli, ["--clear-clipboard-after", "0"])

    assert result.exit_code == 0
    assert copied == [""]


def test_post_connect_child(invoke, monkeypatch):
    engine = mock.Mock()
    monkeypatch.setattr(cli_module, "build_engine", lambda settings: engine)

    result = invoke("--post-connect", "db1")

    assert result.exit_code == 0
    engine.post_connect.assert_called_once_with("secret123")


def test_post_connect_child_unknown_server(invoke, monkeypatch):
    engine = mock.Mock()
    monkeypatch.setattr(cli_module, "build_engine", lambda settings: engine)

    result = invoke("--post-connect", "nope")

    assert result.exit_code == 1
    assert "Unknown server 'nope'" in result.output
    engine.post_connect.assert_not_called()


def test_inventory_directory_is_rejected(runner, tmp_path, picked):
    result = runner.invoke(cli, ["-c"], env={"SSHMGR_INVENTORY": str(tmp_path)})

    assert result.exit_code == 1
    assert "not a file" in result.output
    picked.assert_not_called()


def test_connect_scenario(invoke, runner, picked, monkeypatch, keyboard, sleep, events):
    """db1 end to end: ssh arguments, then every keystroke of the detached child."""
    spawned = []
    monkeypatch.setattr(launcher.subprocess, "Popen", lambda cmd, **kw: spawned.append(cmd))
    ssh_calls = []
    monkeypatch.setattr(launcher.subprocess, "run", lambda cmd: ssh_calls.append(cmd) or mock.Mock(returncode=0))

    result = invoke("-c")

    assert result.exit_code == 0
    assert ssh_calls == [["ssh", "-p", "5432", "admin@10.0.0.5"]]
    assert spawned[0][:3] == [sys.executable, "-m", "sshmgr"]

    engine = AutomationEngine(keyboard, lambda prompt: True, sleep=sleep)
    monkeypatch.setattr(cli_module, "build_engine", lambda settings: engine)

    child = runner.invoke(cli, spawned[0][3:])

    assert child.exit_code == 0
    assert [value for kind, value in events if kind == "type"] == [
        "secret123",
        "sudo su",
        "secret123",
        prompt_command("White"),
        "clear -x",
    ]

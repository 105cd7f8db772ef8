from __future__ import annotations

import json
from pathlib import Path

import pytest

from iecs.cli.main import main, report_error
from iecs.cli.parser import create_parser
from iecs.exceptions import NotFoundError, PreflightError, SelectionCancelled
from iecs.utils.structured_logging import setup_structured_logging

from conftest import _console, console_text


def test_exec_alias_and_flags() -> None:
    args = create_parser().parse_args(["ssh", "-c", "env", "-i", "false"])
    assert args.command_name == "exec"
    assert args.command == "env"
    assert args.interactive is False


def test_global_options_before_or_after_command() -> None:
    before = create_parser().parse_args(["--theme", "dracula", "--cluster", "prod", "tail"])
    after = create_parser().parse_args(["logs", "--theme", "dracula", "--cluster", "prod"])
    for args in (before, after):
        assert args.command_name == "logs"
        assert args.theme == "dracula"
        assert args.cluster == "prod"


def test_no_timestamps_flag() -> None:
    assert create_parser().parse_args(["logs", "--no-timestamps"]).timestamps is False
    assert create_parser().parse_args(["logs"]).timestamps is None


def test_invalid_boolean_is_usage_error() -> None:
    with pytest.raises(SystemExit) as info:
        create_parser().parse_args(["exec", "-i", "maybe"])
    assert info.value.code == 2


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for key in ("IECS_THEME", "IECS_DEMO", "IECS_LOG_DIR", "AWS_PROFILE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_unknown_theme_fails_before_any_call(
    clean_env: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    def no_gateway(config):
        raise AssertionError("gateway must not be created")

    monkeypatch.setattr("iecs.cli.runner_setup.create_gateway", no_gateway)
    with pytest.raises(SystemExit) as info:
        main(["--theme", "neon", "logs"])
    assert info.value.code == 1
    err = " ".join(capsys.readouterr().err.split())
    assert 'Error: unsupported theme "neon" expecting one of: base base16 catppuccin charm dracula' in err


def test_missing_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2
    assert "usage: iecs" in capsys.readouterr().err


def test_error_reporting_exit_codes() -> None:
    console = _console()
    assert report_error(console, SelectionCancelled("Select cluster")) == 2
    assert report_error(console, NotFoundError("no clusters found")) == 1
    assert report_error(console, PreflightError("smp missing", ["install it"])) == 1
    text = console_text(console)
    assert "Error: no clusters found" in text
    assert "Try:" in text and "install it" in text


def test_structured_log_file_records_extra_fields(tmp_path: Path) -> None:
    import logging

    path = setup_structured_logging(tmp_path / "logs")
    assert path == tmp_path / "logs" / "iecs.jsonl"
    logging.getLogger("iecs.test").info("selected", extra={"cluster": "c1"})
    for handler in logging.getLogger().handlers:
        handler.flush()
    entry = json.loads(path.read_text().strip().splitlines()[-1])
    assert entry["message"] == "selected"
    assert entry["component"] == "iecs.test"
    assert entry["cluster"] == "c1"
    logging.getLogger().handlers.clear()

"""Tests for the command line entry point."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from tlink_opcua.main import EXIT_FAILURE, EXIT_SUCCESS, main, parse_args


def test_no_args_is_normal_start():
    options = parse_args([])
    assert not options.debug and not options.show_help and options.invalid is None


@pytest.mark.parametrize("flag", ["/d", "/debug"])
def test_debug_flags(flag):
    assert parse_args([flag]).debug is True


@pytest.mark.parametrize("flag", ["/h", "/help"])
def test_help_exits_zero(flag, capsys):
    assert main([flag]) == EXIT_SUCCESS
    assert "/debug" in capsys.readouterr().out


@pytest.mark.parametrize("token", ["-d", "--help", "/x"])
def test_unknown_token_exits_one(token, capsys):
    assert main([token]) == EXIT_FAILURE
    assert token in capsys.readouterr().out


def test_debug_then_unknown_is_rejected():
    options = parse_args(["/d", "bogus"])
    assert options.invalid == "bogus"


def test_missing_config_exits_one(tmp_path):
    with patch("tlink_opcua.main.BridgeServerManager") as manager_cls:
        assert main([], config_path=str(tmp_path / "absent.json")) == EXIT_FAILURE
    manager_cls.assert_not_called()

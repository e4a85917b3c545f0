"""Tests for clipboard copy."""

import subprocess
from unittest.mock import MagicMock, patch

from mail_hub.clipboard import _run_clipboard, copy_to_clipboard
from mail_hub.exceptions import ClipboardError

import pytest


@patch("mail_hub.clipboard.subprocess.run")
def test_first_available_command_used(mock_run):
    mock_run.side_effect = [FileNotFoundError(), MagicMock(returncode=0)]
    assert _run_clipboard("hello") == ["wl-copy"]
    assert mock_run.call_args.kwargs["input"] == "hello"


@patch("mail_hub.clipboard.subprocess.run")
def test_no_command_raises(mock_run):
    mock_run.side_effect = FileNotFoundError()
    with pytest.raises(ClipboardError):
        _run_clipboard("hello")


@patch("mail_hub.clipboard.subprocess.run")
def test_copy_returns_false_on_failure(mock_run):
    mock_run.side_effect = subprocess.TimeoutExpired(cmd="pbcopy", timeout=5)
    assert copy_to_clipboard("hello") is False


@patch("mail_hub.clipboard._run_clipboard")
def test_copy_returns_true(mock_run):
    mock_run.return_value = ["pbcopy"]
    assert copy_to_clipboard("hello") is True

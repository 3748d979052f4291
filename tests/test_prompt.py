"""Tests for the bounded-wait confirmation prompt."""

import io
import os
from unittest.mock import patch

import pytest

from ezctl_cli.ui import prompt
from ezctl_cli.ui.prompt import read_line_with_timeout
from ezctl_cli.ui.prompt import timed_confirm


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "r")
    writer = os.fdopen(write_fd, "w")
    yield reader, writer
    reader.close()
    if not writer.closed:
        writer.close()


class TestReadLineWithTimeout:
    def test_times_out_without_input(self, pipe):
        reader, _ = pipe
        assert read_line_with_timeout(0.05, reader) is None

    def test_returns_stripped_line(self, pipe):
        reader, writer = pipe
        writer.write("  yes \n")
        writer.flush()

        assert read_line_with_timeout(1.0, reader) == "yes"

    def test_closed_input_counts_as_no_answer(self, pipe):
        reader, writer = pipe
        writer.close()

        assert read_line_with_timeout(1.0, reader) is None

    def test_stream_without_descriptor_is_read_directly(self):
        assert read_line_with_timeout(0.01, io.StringIO("y\n")) == "y"


class TestTimedConfirm:
    @pytest.mark.parametrize("answer", ["y", "yes", "YES"])
    def test_affirmative(self, answer):
        with patch.object(prompt, "read_line_with_timeout", return_value=answer):
            assert timed_confirm("Destroy?", 5) is True

    @pytest.mark.parametrize("answer", ["n", "", "sure"])
    def test_anything_else_is_no(self, answer):
        with patch.object(prompt, "read_line_with_timeout", return_value=answer):
            assert timed_confirm("Destroy?", 5) is False

    def test_timeout_is_no(self, capsys):
        with patch.object(prompt, "read_line_with_timeout", return_value=None) as mock_read:
            assert timed_confirm("Destroy?", 2) is False

        mock_read.assert_called_once_with(2)
        assert "No answer within 2s" in capsys.readouterr().out

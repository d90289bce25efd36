# tests/console/test_console.py
"""
BufferedConsole と TerminalConsole（パイプ入力時）の単体テスト。
"""
import io
import os

import pytest

from lc3_core_tracer.console.console import BufferedConsole
from lc3_core_tracer.console.terminal import TerminalConsole


class TestBufferedConsole:
    def test_input_queue(self):
        console = BufferedConsole("ab")
        assert console.key_available()
        assert console.read_char() == ord("a")
        console.feed("c")
        assert [console.read_char(), console.read_char()] == [ord("b"), ord("c")]
        assert not console.key_available()
        with pytest.raises(EOFError):
            console.read_char()

    def test_output_is_collected(self):
        with BufferedConsole() as console:
            console.write("Hi")
            console.write("!")
            console.flush()
        assert console.output == "Hi!"


class TestTerminalConsoleWithPipe:
    @pytest.fixture
    def pipe_console(self):
        read_fd, write_fd = os.pipe()
        stdin = os.fdopen(read_fd, "r")
        stdout = io.StringIO()
        console = TerminalConsole(stdin=stdin, stdout=stdout)
        yield console, write_fd, stdout
        stdin.close()

    # @intent:test_case_non_tty TTYでない入力ではopen/closeが端末設定を変更しないことを検証します。
    def test_open_close_on_pipe_is_noop(self, pipe_console):
        console, write_fd, _ = pipe_console
        with console:
            assert not console.key_available()
        os.close(write_fd)

    def test_poll_and_read(self, pipe_console):
        console, write_fd, _ = pipe_console
        os.write(write_fd, b"x")
        assert console.key_available()
        assert console.read_char() == ord("x")
        os.close(write_fd)
        with pytest.raises(EOFError):
            console.read_char()

    def test_write_goes_to_stdout(self, pipe_console):
        console, write_fd, stdout = pipe_console
        console.write("HALT\n")
        assert stdout.getvalue() == "HALT\n"
        os.close(write_fd)

    # @intent:test_case_byte_output 0x80以上の文字も1バイトとして出力されることを検証します。
    def test_write_emits_single_bytes(self):
        raw = io.BytesIO()
        stdout = io.TextIOWrapper(raw, encoding="utf-8")
        read_fd, write_fd = os.pipe()
        with os.fdopen(read_fd, "r") as stdin:
            console = TerminalConsole(stdin=stdin, stdout=stdout)
            console.write("A")
            console.write(chr(0xE9) + chr(0xFF))
            os.close(write_fd)
        assert raw.getvalue() == b"A\xe9\xff"

# lc3_core_tracer/console/terminal.py
"""
POSIX端末を用いたコンソール実装。

open() で標準入力をcbreakモード（行バッファなし・エコーなし）へ切り替え、
close() で必ず元の端末設定へ戻します。with文での利用を前提とします。
"""
import os
import select
import sys
from typing import Optional, TextIO

from lc3_core_tracer.console.console import Console


# @intent:responsibility 実端末（標準入出力）を介したキーボード入力と文字出力を提供します。
class TerminalConsole(Console):
    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._fd = self._stdin.fileno()
        self._saved_attributes = None

    # @intent:responsibility 端末をcbreakモードに切り替えます。TTYでない場合（パイプ入力など）は何もしません。
    def open(self) -> None:
        if self._saved_attributes is not None or not os.isatty(self._fd):
            return
        import termios
        import tty

        self._saved_attributes = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)

    # @intent:responsibility 保存しておいた端末設定を復元します。例外経路からも呼ばれます。
    def close(self) -> None:
        if self._saved_attributes is None:
            return
        import termios

        try:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attributes)
        finally:
            self._saved_attributes = None

    # @intent:responsibility タイムアウト0のselectで入力の有無を調べます。ループを停止させません。
    def key_available(self) -> bool:
        readable, _, _ = select.select([self._fd], [], [], 0)
        return bool(readable)

    def read_char(self) -> int:
        data = os.read(self._fd, 1)
        if not data:
            raise EOFError("End of console input.")
        return data[0]

    # 出力は非バッファ扱い。書き込みごとにフラッシュする。
    # @intent:rationale 各文字は1バイト(0x00-0xFF)として出力し、0x80以上をUTF-8の複数バイトに変換しない。
    def write(self, text: str) -> None:
        buffer = getattr(self._stdout, "buffer", None)
        if buffer is None:
            self._stdout.write(text)
        else:
            self._stdout.flush()
            buffer.write(text.encode("latin-1", errors="replace"))
            buffer.flush()
        self._stdout.flush()

    def flush(self) -> None:
        self._stdout.flush()

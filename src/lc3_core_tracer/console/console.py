# lc3_core_tracer/console/console.py
"""
コンソール入出力の抽象インターフェース。

CPUコアはこのインターフェースにのみ依存し、端末のrawモード切り替えなどの
プラットフォーム依存処理は具象クラス側に閉じ込めます。
"""
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List


# @intent:responsibility キーボード入力と文字出力の能力を定義します。
class Console(ABC):
    """
    CPUから見たコンソール。入力のポーリングはノンブロッキング、
    read_char() は入力が届くまでブロックする唯一の中断点です。
    """
    # @intent:responsibility 読み取り待ちのキーがあるかどうかを即座に返します（ブロックしない）。
    @abstractmethod
    def key_available(self) -> bool:
        pass

    # @intent:responsibility キーが届くまで待ち、その文字コードを返します。
    @abstractmethod
    def read_char(self) -> int:
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        pass

    def flush(self) -> None:
        # Intentional: バッファを持たない実装では何もしない。
        pass

    # @intent:responsibility コンソール資源の獲得（端末モード変更など）を行います。
    def open(self) -> None:
        pass

    # @intent:responsibility open() で変更した状態を元に戻します。
    def close(self) -> None:
        pass

    def __enter__(self) -> "Console":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# @intent:responsibility メモリ上のキューで入出力を模擬するコンソールです。テストや非対話実行に使用します。
class BufferedConsole(Console):
    def __init__(self, input_text: str = ""):
        self._input: Deque[int] = deque()
        self._output: List[str] = []
        self.feed(input_text)

    # @intent:responsibility 入力キューに文字列を追加します。
    def feed(self, text: str) -> None:
        self._input.extend(ord(ch) for ch in text)

    def key_available(self) -> bool:
        return bool(self._input)

    # @intent:post-condition 入力が尽きている場合はEOFErrorを送出します（待つべき入力源がないため）。
    def read_char(self) -> int:
        if not self._input:
            raise EOFError("No console input available.")
        return self._input.popleft()

    def write(self, text: str) -> None:
        self._output.append(text)

    @property
    def output(self) -> str:
        return "".join(self._output)

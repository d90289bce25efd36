# lc3_core_tracer/traps/dispatcher.py
"""
トラップディスパッチャ

TRAP命令の下位8ビット（トラップベクタ）を組み込みのシステムルーチンに対応付けます。
ルーチンはコンソール入出力、または実行ループの停止を行います。
GETC/IN は入力が届くまでブロックする、実行ループで唯一の中断点です。
"""
from enum import IntEnum
from typing import Callable, Dict

from lc3_core_tracer.common.errors import IllegalTrap
from lc3_core_tracer.console.console import Console
from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.transport.bus import Bus

WORD_MASK = 0xFFFF
IN_PROMPT = "Enter a character: "
HALT_MESSAGE = "HALT\n"

# @intent:constant 組み込みシステムルーチンのトラップベクタ。
class TrapVector(IntEnum):
    GETC = 0x20   # get character from keyboard, not echoed
    OUT = 0x21    # output a character
    PUTS = 0x22   # output a word string
    IN = 0x23     # get character from keyboard, echoed
    PUTSP = 0x24  # output a byte string
    HALT = 0x25   # halt the program


TRAP_NAMES = {vector.value: vector.name for vector in TrapVector}

# @intent:responsibility トラップベクタからシステムルーチンを選択し、実行します。
class TrapDispatcher:
    """
    トラップの実行主体。ルーチンはR0経由で値を受け渡し、CONDは変更しません。
    """
    def __init__(self, console: Console):
        self._console = console
        self._routines: Dict[int, Callable[[Lc3CpuState, Bus], None]] = {
            TrapVector.GETC: self._getc,
            TrapVector.OUT: self._out,
            TrapVector.PUTS: self._puts,
            TrapVector.IN: self._in,
            TrapVector.PUTSP: self._putsp,
            TrapVector.HALT: self._halt,
        }

    @property
    def console(self) -> Console:
        return self._console

    # @intent:responsibility ベクタに対応するルーチンを実行します。
    # @intent:post-condition 未定義のベクタに対してはIllegalTrapを送出します。
    def dispatch(self, vector: int, state: Lc3CpuState, bus: Bus, address: int) -> None:
        routine = self._routines.get(vector)
        if routine is None:
            raise IllegalTrap(address, vector)
        routine(state, bus)

    def _getc(self, state: Lc3CpuState, bus: Bus) -> None:
        state.set_register(0, self._console.read_char())

    def _out(self, state: Lc3CpuState, bus: Bus) -> None:
        self._console.write(chr(state.get_register(0) & 0xFF))
        self._console.flush()

    # @intent:responsibility R0が指す、1ワード1文字のNUL終端文字列を出力します。
    def _puts(self, state: Lc3CpuState, bus: Bus) -> None:
        address = state.get_register(0)
        chars = []
        word = bus.read(address)
        while word:
            chars.append(chr(word & 0xFF))
            address = (address + 1) & WORD_MASK
            word = bus.read(address)
        self._console.write("".join(chars))
        self._console.flush()

    def _in(self, state: Lc3CpuState, bus: Bus) -> None:
        self._console.write(IN_PROMPT)
        self._console.flush()
        code = self._console.read_char()
        self._console.write(chr(code & 0xFF))
        self._console.flush()
        state.set_register(0, code)

    # @intent:responsibility 1ワードに2文字（下位バイトが先、上位バイトは0でなければ続けて）を詰めた文字列を出力します。
    def _putsp(self, state: Lc3CpuState, bus: Bus) -> None:
        address = state.get_register(0)
        chars = []
        word = bus.read(address)
        while word:
            chars.append(chr(word & 0xFF))
            high = word >> 8
            if high:
                chars.append(chr(high))
            address = (address + 1) & WORD_MASK
            word = bus.read(address)
        self._console.write("".join(chars))
        self._console.flush()

    def _halt(self, state: Lc3CpuState, bus: Bus) -> None:
        self._console.write(HALT_MESSAGE)
        state.halted = True
        self._console.flush()

# lc3_core_tracer/transport/keyboard.py
"""
メモリマップドI/O: キーボードステータス(KBSR)とキーボードデータ(KBDR)。

KBSRの読み出しだけが入力のポーリングを引き起こします（遅延ポーリング）。
KBSRを一度も読まないプログラムはキーボード入力を観測しません。
"""
from lc3_core_tracer.console.console import Console
from lc3_core_tracer.transport.bus import Device, WORD_MASK

KBSR_ADDRESS = 0xFE00  # Keyboard status
KBDR_ADDRESS = 0xFE02  # Keyboard data

KBSR_OFFSET = 0
KBDR_OFFSET = KBDR_ADDRESS - KBSR_ADDRESS
KEY_READY = 0x8000

# @intent:responsibility KBSR..KBDR の範囲をバス上に提供するデバイスです。
class KeyboardDevice(Device):
    """
    KBSRの読み出し時にコンソールをノンブロッキングで確認し、
    キーが届いていればKBSRのビット15をセット、KBDRへ文字コードを格納します。
    キーがなければKBSRは0に戻ります。その他のオフセットは通常のワードとして振る舞います。
    """
    def __init__(self, console: Console):
        self._console = console
        self._registers = [0] * (KBDR_OFFSET + 1)

    def get_size(self) -> int:
        return len(self._registers)

    def read(self, address: int) -> int:
        self._check_offset(address)
        if address == KBSR_OFFSET:
            self._poll()
        return self._registers[address]

    def peek(self, address: int) -> int:
        self._check_offset(address)
        return self._registers[address]

    # @intent:rationale マップされたアドレスへの書き込みは通常の格納であり、次回のポーリングで上書きされます。
    def write(self, address: int, data: int) -> None:
        self._check_offset(address)
        if not 0 <= data <= WORD_MASK:
            raise ValueError(f"Data {data} is not a 16-bit value.")
        self._registers[address] = data

    def _poll(self) -> None:
        if self._console.key_available():
            self._registers[KBSR_OFFSET] = KEY_READY
            self._registers[KBDR_OFFSET] = self._console.read_char() & WORD_MASK
        else:
            self._registers[KBSR_OFFSET] = 0

    def _check_offset(self, address: int) -> None:
        if not 0 <= address < len(self._registers):
            raise IndexError(f"Address {address} out of bounds for keyboard registers.")

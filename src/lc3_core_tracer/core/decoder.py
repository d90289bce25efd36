# lc3_core_tracer/core/decoder.py
"""
LC-3命令のデコード用共通ユーティリティ。

命令ワードは上位4ビットがオペコード、残り12ビットがオペコード固有のフィールドです。
ここでは純粋なビット抽出のみを行い、副作用は持ちません。
"""
from dataclasses import dataclass
from enum import IntEnum

WORD_MASK = 0xFFFF

# @intent:constant 4bitオペコードの閉じた列挙。全メンバーに実行関数が対応している必要があります。
class Opcode(IntEnum):
    BR = 0    # branch
    ADD = 1
    LD = 2    # load
    ST = 3    # store
    JSR = 4   # jump to subroutine
    AND = 5
    LDR = 6   # load base+offset
    STR = 7   # store base+offset
    RTI = 8   # return from interrupt (supervisor only)
    NOT = 9
    LDI = 10  # load indirect
    STI = 11  # store indirect
    JMP = 12
    RES = 13  # reserved
    LEA = 14  # load effective address
    TRAP = 15


# @intent:utility_function nビットの2の補数フィールドを16ビットへ符号拡張します。
def sign_extend(value: int, bit_count: int) -> int:
    """
    ビット(bit_count - 1)が1なら、それより上位のビットを全て1で埋めます。
    """
    value &= (1 << bit_count) - 1
    if (value >> (bit_count - 1)) & 1:
        value |= (WORD_MASK << bit_count) & WORD_MASK
    return value


# @intent:utility_function 16bitワードを符号付き整数として解釈します（表示用）。
def to_signed(value: int) -> int:
    value &= WORD_MASK
    return value - 0x10000 if value & 0x8000 else value


# @intent:responsibility 命令ワードの各フィールドへのアクセサを提供します。
@dataclass(frozen=True)
class DecodedInstruction:
    """
    フェッチされた16bit命令ワードのビューです。
    オフセット・即値のプロパティは全て符号拡張済みの16bit値を返します。
    """
    word: int

    @property
    def opcode(self) -> Opcode:
        return Opcode(self.word >> 12)

    @property
    def dr(self) -> int:
        """Destination register (bits 11-9). STやSTRではソースレジスタを指す。"""
        return (self.word >> 9) & 0x7

    @property
    def sr1(self) -> int:
        return (self.word >> 6) & 0x7

    @property
    def base_r(self) -> int:
        return (self.word >> 6) & 0x7

    @property
    def sr2(self) -> int:
        return self.word & 0x7

    @property
    def imm_mode(self) -> bool:
        return ((self.word >> 5) & 1) == 1

    @property
    def imm5(self) -> int:
        return sign_extend(self.word & 0x1F, 5)

    @property
    def offset6(self) -> int:
        return sign_extend(self.word & 0x3F, 6)

    @property
    def pc_offset9(self) -> int:
        return sign_extend(self.word & 0x1FF, 9)

    @property
    def pc_offset11(self) -> int:
        return sign_extend(self.word & 0x7FF, 11)

    @property
    def long_mode(self) -> bool:
        """JSR (bit 11 = 1) と JSRR (bit 11 = 0) の区別。"""
        return ((self.word >> 11) & 1) == 1

    @property
    def n(self) -> bool:
        return ((self.word >> 11) & 1) == 1

    @property
    def z(self) -> bool:
        return ((self.word >> 10) & 1) == 1

    @property
    def p(self) -> bool:
        return ((self.word >> 9) & 1) == 1

    @property
    def trap_vector(self) -> int:
        return self.word & 0xFF


def decode_instruction(word: int) -> DecodedInstruction:
    return DecodedInstruction(word & WORD_MASK)

# lc3_core_tracer/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、LC-3のレジスタファイル（R0-R7, PC, COND）を保持するデータ構造を定義します。
"""
from dataclasses import dataclass, field
from typing import List

REGISTER_COUNT = 8
PC_START = 0x3000
WORD_MASK = 0xFFFF

# コンディションコード (COND) ビットマスク
# @intent:constant CONDレジスタ内の各フラグビットの位置を定義します。常にいずれか1つだけがセットされます。
FL_POS = 1 << 0  # Positive
FL_ZRO = 1 << 1  # Zero
FL_NEG = 1 << 2  # Negative


def _zeroed_registers() -> List[int]:
    return [0] * REGISTER_COUNT


# @intent:responsibility LC-3の全てのレジスタとフラグ、停止状態を保持します。
@dataclass
class Lc3CpuState:
    """
    LC-3 CPUのレジスタ状態を保持するデータクラス。
    PCは次にフェッチする命令のアドレスを指します。
    """
    registers: List[int] = field(default_factory=_zeroed_registers)  # R0-R7
    pc: int = PC_START
    # @intent:rationale 最初のフラグ設定命令までCONDは未定義だが、常に1ビットだけ立つ不変条件を保つためZEROで開始する。
    cond: int = FL_ZRO
    halted: bool = False

    def get_register(self, index: int) -> int:
        return self.registers[index & 0x7]

    # @intent:post-condition 格納値は常に16bitに切り詰められます。
    def set_register(self, index: int, value: int) -> None:
        self.registers[index & 0x7] = value & WORD_MASK

    # @intent:responsibility 指定レジスタの値の符号に従ってCONDを設定します。
    # @intent:rationale 0ならZERO、ビット15が立っていればNEGATIVE、それ以外はPOSITIVE。全ての16bit値に対して定義された全域関数です。
    def update_flags(self, index: int) -> None:
        value = self.get_register(index)
        if value == 0:
            self.cond = FL_ZRO
        elif value >> 15:
            self.cond = FL_NEG
        else:
            self.cond = FL_POS

    @property
    def flag_n(self) -> bool:
        return (self.cond & FL_NEG) != 0

    @property
    def flag_z(self) -> bool:
        return (self.cond & FL_ZRO) != 0

    @property
    def flag_p(self) -> bool:
        return (self.cond & FL_POS) != 0

    # @intent:responsibility スナップショット用に、レジスタリストを含めた独立したコピーを返します。
    def copy(self) -> "Lc3CpuState":
        return Lc3CpuState(
            registers=list(self.registers),
            pc=self.pc,
            cond=self.cond,
            halted=self.halted,
        )

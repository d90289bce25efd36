# lc3_core_tracer/core/cpu.py
"""
Core Layer (LC-3 CPU)

このモジュールは、CPUの状態管理と命令サイクル（フェッチ→PC更新→デコード→実行）の駆動を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
from typing import Dict, List, Tuple

from lc3_core_tracer.common.types import SymbolMap, RegisterLayoutInfo, RegisterInfo
from lc3_core_tracer.core.decoder import WORD_MASK
from lc3_core_tracer.core.snapshot import Snapshot, Operation, Metadata
from lc3_core_tracer.core.state import Lc3CpuState, REGISTER_COUNT
from lc3_core_tracer.instructions import decode_opcode, execute_instruction
from lc3_core_tracer.transport.bus import Bus
from lc3_core_tracer.traps.dispatcher import TrapDispatcher

# @intent:responsibility LC-3 CPUのフェッチ・デコード・実行ロジックを提供します。
class Lc3Cpu:
    """
    LC-3 CPUをエミュレートするクラス。
    Bus（メモリ）とTrapDispatcherへの参照を保持し、レジスタファイルを所有します。
    """
    # @intent:pre-condition `bus`は全アドレスがマップされた有効なBusである必要があります。
    def __init__(self, bus: Bus, traps: TrapDispatcher):
        self._bus = bus
        self._traps = traps
        self._state: Lc3CpuState = self._create_initial_state()
        self._step_count: int = 0
        self._symbol_map: SymbolMap = {}
        self._reverse_symbol_map: Dict[int, str] = {}
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    @property
    def bus(self) -> Bus:
        return self._bus

    # @intent:responsibility シンボルマップ（名前とアドレスの対応表）を設定します。
    def set_symbol_map(self, symbol_map: SymbolMap) -> None:
        self._symbol_map = dict(symbol_map)
        # 逆引きマップを作成して、アドレスからラベルを素早く引けるようにする
        self._reverse_symbol_map = {addr: name for name, addr in self._symbol_map.items()}

    def get_symbol_map(self) -> SymbolMap:
        return self._symbol_map

    def _create_initial_state(self) -> Lc3CpuState:
        return Lc3CpuState()

    # @intent:responsibility CPUを初期状態（全レジスタ0、PC=0x3000）に戻します。メモリは変更しません。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._step_count = 0

    def get_state(self) -> Lc3CpuState:
        return self._state

    # @intent:responsibility スナップショット等から保存された状態を復元します。
    def restore_state(self, state: Lc3CpuState) -> None:
        self._state = state.copy()

    @property
    def halted(self) -> bool:
        return self._state.halted

    # @intent:responsibility PCが指すワードをフェッチし、PCを次の命令へ進めます。
    def _fetch(self) -> int:
        word = self._bus.read(self._state.pc)
        self._state.pc = (self._state.pc + 1) & WORD_MASK
        return word

    def _decode(self, word: int, address: int) -> Operation:
        return decode_opcode(word, address)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus, self._traps)

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:flow フェッチ(PC更新を含む) -> デコード -> 実行 -> スナップショット生成 の順序で処理を行います。
    #              PCは実行前に更新されるため、PC相対の計算は次の命令のアドレスを基準にします。
    def step(self) -> Snapshot:
        initial_pc = self._state.pc
        self._bus.get_and_clear_activity_log()

        if self._state.halted:
            # @intent:responsibility HALT後はフェッチを行わず、PCを維持します。
            operation = Operation(opcode_hex="----", mnemonic="HALT (suspended)", length=0)
            return Snapshot(
                state=self._state.copy(),
                operation=operation,
                metadata=Metadata(step_count=self._step_count, symbol_info=operation.mnemonic),
                address=initial_pc,
            )

        word = self._fetch()
        operation = self._decode(word, initial_pc)
        self._execute(operation)

        bus_activity = self._bus.get_and_clear_activity_log()
        self._step_count += 1

        return Snapshot(
            state=self._state.copy(),
            operation=operation,
            metadata=Metadata(step_count=self._step_count, symbol_info=self.describe(initial_pc, operation)),
            address=initial_pc,
            bus_activity=bus_activity,
        )

    # @intent:responsibility 命令をシンボルラベル付きのアセンブリ表記に整形します。
    def describe(self, address: int, operation: Operation) -> str:
        symbol_label = self._reverse_symbol_map.get(address, "")
        symbol_info = f"{symbol_label}: " if symbol_label else ""
        symbol_info += operation.mnemonic
        if operation.operands:
            symbol_info += " " + ", ".join(operation.operands)
        return symbol_info

    # @intent:responsibility 表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"R{i}": s.registers[i] for i in range(REGISTER_COUNT)}
        registers["PC"] = s.pc
        registers["COND"] = s.cond
        return registers

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"R{i}", 16) for i in range(REGISTER_COUNT)]),
            RegisterLayoutInfo("Control", [RegisterInfo("PC", 16), RegisterInfo("COND", 3)]),
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {"N": s.flag_n, "Z": s.flag_z, "P": s.flag_p}

    # @intent:responsibility 指定範囲のメモリを逆アセンブルします（バスログ・I/O副作用なし）。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        result = []
        for address in range(start_addr, min(start_addr + length, WORD_MASK + 1)):
            word = self._bus.peek(address)
            operation = self._decode(word, address)
            result.append((address, operation.opcode_hex, self.describe(address, operation)))
        return result

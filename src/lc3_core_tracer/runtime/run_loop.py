# lc3_core_tracer/runtime/run_loop.py
"""
実行ループモジュール。

CPUの命令サイクルを繰り返し駆動し、HALT・ブレークポイント・停止要求・ステップ上限の
いずれかで実行を終了させる責務を負います。"running" フラグはこのループが所有し、
1サイクルごとに確認されます。実行中の命令は常に完了してからフラグが評価されます。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from lc3_core_tracer.core.cpu import Lc3Cpu
from lc3_core_tracer.core.snapshot import Snapshot
from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.transport.bus import BusAccessType

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した

# @intent:responsibility ブレークポイントがヒットするための条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用 ("R0"-"R7", "PC", "COND")
    enabled: bool = True

# @intent:responsibility run() が終了した理由を表します。
class RunResult(Enum):
    HALTED = "HALTED"
    BREAKPOINT = "BREAKPOINT"
    STOPPED = "STOPPED"
    STEP_LIMIT = "STEP_LIMIT"


# @intent:utility_function レジスタ名からレジスタ値を取り出します。未知の名前はNoneです。
def read_register(state: Lc3CpuState, name: str) -> Optional[int]:
    name = name.upper()
    if name == "PC":
        return state.pc
    if name == "COND":
        return state.cond
    if len(name) == 2 and name[0] == "R" and name[1] in "01234567":
        return state.registers[int(name[1])]
    return None


# @intent:responsibility フェッチ・デコード・実行のサイクルを停止条件まで繰り返します。
class RunLoop:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    実行時エラー（IllegalOpcode, IllegalTrap）は捕捉せずに呼び出し元へ伝播させます。
    """
    def __init__(self, cpu: Lc3Cpu, trace: Optional[Callable[[Snapshot], None]] = None):
        self._cpu = cpu
        self._trace = trace
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_state: Lc3CpuState = self._cpu.get_state().copy()
        self._last_snapshot: Optional[Snapshot] = None

    @property
    def running(self) -> bool:
        return self._running

    def set_trace(self, trace: Optional[Callable[[Snapshot], None]]) -> None:
        self._trace = trace

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def _pc_breakpoint_hit(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    # @intent:responsibility Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
    def _check_other_breakpoints(self, snapshot: Snapshot) -> bool:
        current_state = snapshot.state

        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name and read_register(current_state, bp.register_name) == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name:
                    before = read_register(self._previous_state, bp.register_name)
                    after = read_register(current_state, bp.register_name)
                    if before != after:
                        return True
        return False

    # @intent:responsibility CPUを1命令分実行し、その結果のSnapshotを返します。
    def step_instruction(self) -> Snapshot:
        self._previous_state = self._cpu.get_state().copy()
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        if self._trace is not None:
            self._trace(snapshot)
        return snapshot

    # @intent:responsibility 停止条件に達するまで命令を実行し続けます。
    # @intent:rationale 実行開始位置のPCブレークポイントは、直前に停止した地点から再開できるよう無視します。
    def run(self, max_steps: Optional[int] = None) -> RunResult:
        self._running = True
        steps = 0
        try:
            while self._running:
                if self._cpu.halted:
                    return RunResult.HALTED
                if max_steps is not None and steps >= max_steps:
                    return RunResult.STEP_LIMIT
                if steps > 0 and self._pc_breakpoint_hit(self._cpu.get_state().pc):
                    return RunResult.BREAKPOINT

                snapshot = self.step_instruction()
                steps += 1

                if snapshot.state.halted:
                    return RunResult.HALTED
                if self._check_other_breakpoints(snapshot):
                    return RunResult.BREAKPOINT
            return RunResult.STOPPED
        finally:
            self._running = False

    # @intent:responsibility 実行ループに停止を要求します。現在の命令は完了してから停止します。
    def stop(self) -> None:
        self._running = False

# lc3_core_tracer/instructions/__init__.py
"""
LC-3命令セット実装パッケージ。
"""
from lc3_core_tracer.core.snapshot import Operation
from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.transport.bus import Bus
from lc3_core_tracer.traps.dispatcher import TrapDispatcher
from lc3_core_tracer.core.decoder import Opcode, DecodedInstruction, decode_instruction, sign_extend
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility 命令ワードをデコードします。
def decode_opcode(word: int, pc: int) -> Operation:
    """
    命令ワードをデコードし、Operationオブジェクトを返します。
    pcはその命令自身のアドレスで、分岐先などの表示計算に使われます。
    どの16bitパターンも0-15のいずれかのオペコードにデコードされます。
    """
    instr = decode_instruction(word)
    return DECODE_MAP[instr.opcode](instr, pc)

# @intent:responsibility デコードされた命令を実行します。
# @intent:pre-condition state.pcは既に次の命令を指している必要があります。
def execute_instruction(operation: Operation, state: Lc3CpuState, bus: Bus, traps: TrapDispatcher) -> None:
    executor = EXECUTE_MAP[operation.instruction.opcode]
    executor(state, bus, operation, traps)

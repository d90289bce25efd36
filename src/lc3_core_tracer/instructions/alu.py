# lc3_core_tracer/instructions/alu.py
"""
演算命令（ADD, AND, NOT）の実装。
"""
from lc3_core_tracer.core.snapshot import Operation
from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.transport.bus import Bus
from lc3_core_tracer.traps.dispatcher import TrapDispatcher
from lc3_core_tracer.core.decoder import DecodedInstruction, WORD_MASK, to_signed


# @intent:utility_function 即値モードビットに従って第2オペランドを選択します。
def _second_operand(state: Lc3CpuState, instr: DecodedInstruction) -> int:
    if instr.imm_mode:
        return instr.imm5
    return state.get_register(instr.sr2)


def _format_operands(instr: DecodedInstruction):
    second = f"#{to_signed(instr.imm5)}" if instr.imm_mode else f"R{instr.sr2}"
    return [f"R{instr.dr}", f"R{instr.sr1}", second]

# --- ADD ---
# @intent:responsibility ADD命令をデコードします。
def decode_add(instr: DecodedInstruction, pc: int) -> Operation:
    return Operation(f"{instr.word:04X}", "ADD", _format_operands(instr), instr)

# @intent:responsibility DR = SR1 + (SR2 | imm5) を16bitの桁あふれ込みで計算し、フラグを更新します。
def execute_add(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    result = (state.get_register(instr.sr1) + _second_operand(state, instr)) & WORD_MASK
    state.set_register(instr.dr, result)
    state.update_flags(instr.dr)

# --- AND ---
def decode_and(instr: DecodedInstruction, pc: int) -> Operation:
    return Operation(f"{instr.word:04X}", "AND", _format_operands(instr), instr)

# @intent:responsibility DR = SR1 & (SR2 | imm5) を計算し、フラグを更新します。
def execute_and(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    result = state.get_register(instr.sr1) & _second_operand(state, instr)
    state.set_register(instr.dr, result)
    state.update_flags(instr.dr)

# --- NOT ---
def decode_not(instr: DecodedInstruction, pc: int) -> Operation:
    return Operation(f"{instr.word:04X}", "NOT", [f"R{instr.dr}", f"R{instr.sr1}"], instr)

# @intent:responsibility DR = ~SR1 (16bitの補数) を計算し、フラグを更新します。
def execute_not(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    state.set_register(instr.dr, ~state.get_register(instr.sr1) & WORD_MASK)
    state.update_flags(instr.dr)

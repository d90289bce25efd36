# lc3_core_tracer/instructions/load.py
"""
転送命令（ロード・ストア・実効アドレス計算）の実装。

PC相対の命令は、フェッチ後にインクリメント済みのPC（＝次の命令のアドレス）を基準にします。
アドレス計算は全て16bitで折り返します。
"""
from lc3_core_tracer.core.snapshot import Operation
from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.transport.bus import Bus
from lc3_core_tracer.traps.dispatcher import TrapDispatcher
from lc3_core_tracer.core.decoder import DecodedInstruction, WORD_MASK, to_signed


# @intent:utility_function PC + sext(offset9) を計算します。
def pc_relative(pc: int, instr: DecodedInstruction) -> int:
    return (pc + instr.pc_offset9) & WORD_MASK

# @intent:utility_function BaseR + sext(offset6) を計算します。
def base_relative(state: Lc3CpuState, instr: DecodedInstruction) -> int:
    return (state.get_register(instr.base_r) + instr.offset6) & WORD_MASK


def _decode_pc_relative(mnemonic: str, instr: DecodedInstruction, pc: int) -> Operation:
    target = pc_relative((pc + 1) & WORD_MASK, instr)
    return Operation(f"{instr.word:04X}", mnemonic, [f"R{instr.dr}", f"x{target:04X}"], instr)


def _decode_base_relative(mnemonic: str, instr: DecodedInstruction) -> Operation:
    operands = [f"R{instr.dr}", f"R{instr.base_r}", f"#{to_signed(instr.offset6)}"]
    return Operation(f"{instr.word:04X}", mnemonic, operands, instr)

# --- LD ---
# @intent:responsibility LD命令をデコードします。
def decode_ld(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_pc_relative("LD", instr, pc)

# @intent:responsibility DR = mem[PC + sext(offset9)]
def execute_ld(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    state.set_register(instr.dr, bus.read(pc_relative(state.pc, instr)))
    state.update_flags(instr.dr)

# --- LDI ---
def decode_ldi(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_pc_relative("LDI", instr, pc)

# @intent:responsibility DR = mem[mem[PC + sext(offset9)]]。ポインタワードを介した二重間接参照です。
def execute_ldi(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    pointer = bus.read(pc_relative(state.pc, instr))
    state.set_register(instr.dr, bus.read(pointer))
    state.update_flags(instr.dr)

# --- LDR ---
def decode_ldr(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_base_relative("LDR", instr)

# @intent:responsibility DR = mem[BaseR + sext(offset6)]
def execute_ldr(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    state.set_register(instr.dr, bus.read(base_relative(state, instr)))
    state.update_flags(instr.dr)

# --- LEA ---
def decode_lea(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_pc_relative("LEA", instr, pc)

# @intent:responsibility DR = PC + sext(offset9)。アドレスを計算するのみで、メモリは参照しません。
def execute_lea(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    state.set_register(instr.dr, pc_relative(state.pc, instr))
    state.update_flags(instr.dr)

# --- ST ---
def decode_st(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_pc_relative("ST", instr, pc)

# @intent:responsibility mem[PC + sext(offset9)] = SR。フラグは変化しません。
def execute_st(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    bus.write(pc_relative(state.pc, instr), state.get_register(instr.dr))

# --- STI ---
def decode_sti(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_pc_relative("STI", instr, pc)

# @intent:responsibility mem[mem[PC + sext(offset9)]] = SR
def execute_sti(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    pointer = bus.read(pc_relative(state.pc, instr))
    bus.write(pointer, state.get_register(instr.dr))

# --- STR ---
def decode_str(instr: DecodedInstruction, pc: int) -> Operation:
    return _decode_base_relative("STR", instr)

# @intent:responsibility mem[BaseR + sext(offset6)] = SR
def execute_str(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    bus.write(base_relative(state, instr), state.get_register(instr.dr))

# lc3_core_tracer/instructions/control.py
"""
制御命令（分岐、ジャンプ、サブルーチン、トラップ）と予約命令の実装。
"""
from lc3_core_tracer.common.errors import IllegalOpcode
from lc3_core_tracer.core.snapshot import Operation
from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.transport.bus import Bus
from lc3_core_tracer.traps.dispatcher import TrapDispatcher, TRAP_NAMES
from lc3_core_tracer.core.decoder import DecodedInstruction, WORD_MASK

RETURN_REGISTER = 7


# @intent:utility_function 実行中の命令のアドレス（インクリメント前のPC）を返します。
def _instruction_address(state: Lc3CpuState) -> int:
    return (state.pc - 1) & WORD_MASK

# --- BR ---
# @intent:responsibility BR命令をデコードします。条件ビットはニーモニックの接尾辞になります（例: BRnz）。
def decode_br(instr: DecodedInstruction, pc: int) -> Operation:
    suffix = ("n" if instr.n else "") + ("z" if instr.z else "") + ("p" if instr.p else "")
    target = (pc + 1 + instr.pc_offset9) & WORD_MASK
    mnemonic = "BR" + suffix if suffix else "NOP"
    return Operation(f"{instr.word:04X}", mnemonic, [f"x{target:04X}"] if suffix else [], instr)

# @intent:responsibility 要求された条件ビットのいずれかが現在のCONDと一致すれば PC += sext(offset9)。CONDは読むだけです。
def execute_br(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    if (instr.n and state.flag_n) or (instr.z and state.flag_z) or (instr.p and state.flag_p):
        state.pc = (state.pc + instr.pc_offset9) & WORD_MASK

# --- JMP / RET ---
def decode_jmp(instr: DecodedInstruction, pc: int) -> Operation:
    if instr.base_r == RETURN_REGISTER:
        return Operation(f"{instr.word:04X}", "RET", [], instr)
    return Operation(f"{instr.word:04X}", "JMP", [f"R{instr.base_r}"], instr)

# @intent:responsibility PC = BaseR の値（レジスタ番号ではなく、レジスタの内容）。
def execute_jmp(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    state.pc = state.get_register(op.instruction.base_r)

# --- JSR / JSRR ---
def decode_jsr(instr: DecodedInstruction, pc: int) -> Operation:
    if instr.long_mode:
        target = (pc + 1 + instr.pc_offset11) & WORD_MASK
        return Operation(f"{instr.word:04X}", "JSR", [f"x{target:04X}"], instr)
    return Operation(f"{instr.word:04X}", "JSRR", [f"R{instr.base_r}"], instr)

# @intent:responsibility 戻りアドレスをR7へ保存してから、PC相対(JSR)またはレジスタ(JSRR)のアドレスへ分岐します。
def execute_jsr(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    instr = op.instruction
    # JSRR R7 でも分岐先は保存前のR7の値
    target = state.get_register(instr.base_r)
    state.set_register(RETURN_REGISTER, state.pc)
    if instr.long_mode:
        state.pc = (state.pc + instr.pc_offset11) & WORD_MASK
    else:
        state.pc = target

# --- TRAP ---
def decode_trap(instr: DecodedInstruction, pc: int) -> Operation:
    vector = instr.trap_vector
    operand = f"x{vector:02X}"
    if vector in TRAP_NAMES:
        operand += f" ({TRAP_NAMES[vector]})"
    return Operation(f"{instr.word:04X}", "TRAP", [operand], instr)

# @intent:responsibility 戻りアドレスをR7へ保存し、下位8ビットのトラップベクタに対応するシステムルーチンを実行します。
def execute_trap(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    state.set_register(RETURN_REGISTER, state.pc)
    traps.dispatch(op.instruction.trap_vector, state, bus, _instruction_address(state))

# --- RTI / RES ---
def decode_rti(instr: DecodedInstruction, pc: int) -> Operation:
    return Operation(f"{instr.word:04X}", "RTI", [], instr)

def decode_res(instr: DecodedInstruction, pc: int) -> Operation:
    return Operation(f"{instr.word:04X}", ".RES", [], instr)

# @intent:responsibility ユーザーモードでは実行できない命令として、IllegalOpcodeを送出します。
def execute_illegal(state: Lc3CpuState, bus: Bus, op: Operation, traps: TrapDispatcher) -> None:
    raise IllegalOpcode(_instruction_address(state), op.instruction.word, op.mnemonic)

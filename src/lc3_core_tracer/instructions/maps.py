# lc3_core_tracer/instructions/maps.py
"""
オペコードと命令実装のマッピング定義。
"""
from lc3_core_tracer.core.decoder import Opcode
from . import alu
from . import control
from . import load

# @intent:map オペコードからデコード関数へのマッピングテーブル。
DECODE_MAP = {
    Opcode.BR: control.decode_br,
    Opcode.ADD: alu.decode_add,
    Opcode.LD: load.decode_ld,
    Opcode.ST: load.decode_st,
    Opcode.JSR: control.decode_jsr,
    Opcode.AND: alu.decode_and,
    Opcode.LDR: load.decode_ldr,
    Opcode.STR: load.decode_str,
    Opcode.RTI: control.decode_rti,
    Opcode.NOT: alu.decode_not,
    Opcode.LDI: load.decode_ldi,
    Opcode.STI: load.decode_sti,
    Opcode.JMP: control.decode_jmp,
    Opcode.RES: control.decode_res,
    Opcode.LEA: load.decode_lea,
    Opcode.TRAP: control.decode_trap,
}

# @intent:map オペコードから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    Opcode.BR: control.execute_br,
    Opcode.ADD: alu.execute_add,
    Opcode.LD: load.execute_ld,
    Opcode.ST: load.execute_st,
    Opcode.JSR: control.execute_jsr,
    Opcode.AND: alu.execute_and,
    Opcode.LDR: load.execute_ldr,
    Opcode.STR: load.execute_str,
    Opcode.RTI: control.execute_illegal,
    Opcode.NOT: alu.execute_not,
    Opcode.LDI: load.execute_ldi,
    Opcode.STI: load.execute_sti,
    Opcode.JMP: control.execute_jmp,
    Opcode.RES: control.execute_illegal,
    Opcode.LEA: load.execute_lea,
    Opcode.TRAP: control.execute_trap,
}

# 全てのオペコードに明示的なハンドラが存在すること（暗黙のNOPを作らない）
_missing = set(Opcode) - (DECODE_MAP.keys() & EXECUTE_MAP.keys())
if _missing:
    raise RuntimeError(f"Opcodes without handlers: {sorted(op.name for op in _missing)}")

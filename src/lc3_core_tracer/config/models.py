from dataclasses import dataclass, field
from typing import Dict, List

from lc3_core_tracer.core.state import PC_START

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str  # "RAM", "KEYBOARD"
    label: str = ""

@dataclass
class CpuInitialState:
    pc: int = PC_START
    registers: Dict[str, int] = field(default_factory=dict)  # 例: {"R6": 0xFE00}

# @intent:responsibility 既定のメモリマップ: キーボードレジスタ(0xFE00-0xFE02)以外は全てRAM。
def default_memory_map() -> List[MemoryRegion]:
    return [
        MemoryRegion(0x0000, 0xFDFF, "RAM", "Main memory"),
        MemoryRegion(0xFE00, 0xFE02, "KEYBOARD", "KBSR/KBDR"),
        MemoryRegion(0xFE03, 0xFFFF, "RAM", "Device page"),
    ]

@dataclass
class SystemConfig:
    memory_map: List[MemoryRegion] = field(default_factory=default_memory_map)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    images: List[str] = field(default_factory=list)
    symbols: List[str] = field(default_factory=list)

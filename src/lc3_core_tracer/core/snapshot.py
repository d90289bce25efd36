# lc3_core_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
トレース出力、ブレークポイント判定、デバッグ時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from lc3_core_tracer.core.state import Lc3CpuState
from lc3_core_tracer.core.decoder import DecodedInstruction
from lc3_core_tracer.transport.bus import BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "1262"
    mnemonic: str # 例: "ADD"
    operands: List[str] = field(default_factory=list) # 例: ["R1", "R1", "#2"]
    instruction: Optional[DecodedInstruction] = None
    length: int = 1 # 命令のワード長 (LC-3では常に1)

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    step_count: int
    symbol_info: Optional[str] = None # 例: "LOOP: ADD R1, R1, #-1"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    ある一時点における、CPUとバスの状態を記録した不変のデータ構造。
    stateは生成時点のコピーであり、後続の命令実行によって変化しません。
    """
    state: Lc3CpuState
    operation: Operation
    metadata: Metadata
    address: int = 0 # 命令がフェッチされたアドレス
    bus_activity: List[BusAccess] = field(default_factory=list)

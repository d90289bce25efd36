# lc3_core_tracer/runtime/machine.py
"""
Machine集約。

メモリ（Bus）、レジスタファイルを所有するCPU、トラップディスパッチャ、コンソール、
実行ループを1つにまとめます。プロセス全体で共有されるグローバル状態を持たないため、
テストでは独立したインスタンスを複数生成できます。
"""
from typing import List, Optional

from lc3_core_tracer.console.console import Console
from lc3_core_tracer.core.cpu import Lc3Cpu
from lc3_core_tracer.loader.loader import LoadedImage, load_program
from lc3_core_tracer.runtime.run_loop import RunLoop, RunResult
from lc3_core_tracer.transport.bus import Bus
from lc3_core_tracer.traps.dispatcher import TrapDispatcher


class Machine:
    def __init__(self, bus: Bus, cpu: Lc3Cpu, traps: TrapDispatcher, console: Console):
        self.bus = bus
        self.cpu = cpu
        self.traps = traps
        self.console = console
        self.run_loop = RunLoop(cpu)
        self.images: List[LoadedImage] = []

    # @intent:responsibility イメージを順にロードします。後からロードしたイメージは重なるアドレスを上書きします。
    def load_image(self, path: str) -> LoadedImage:
        image = load_program(path, self.bus)
        self.images.append(image)
        return image

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        return self.run_loop.run(max_steps)

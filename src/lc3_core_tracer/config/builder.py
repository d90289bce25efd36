import warnings

from lc3_core_tracer.common.errors import ConfigError
from lc3_core_tracer.console.console import Console
from lc3_core_tracer.core.cpu import Lc3Cpu
from lc3_core_tracer.loader.loader import SymbolTableLoader
from lc3_core_tracer.runtime.machine import Machine
from lc3_core_tracer.runtime.run_loop import read_register
from lc3_core_tracer.transport.bus import Bus, RAM, Device
from lc3_core_tracer.transport.keyboard import KeyboardDevice
from lc3_core_tracer.traps.dispatcher import TrapDispatcher
from .models import SystemConfig, CpuInitialState, MemoryRegion

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig, console: Console) -> Machine:
        bus = Bus()

        for region in config.memory_map:
            device = self._create_device(region, console)
            try:
                bus.register_device(region.start, region.end, device)
            except ValueError as e:
                raise ConfigError(f"Invalid region {region.start:04X}-{region.end:04X}: {e}") from e

        if not bus.is_fully_mapped():
            raise ConfigError("Memory map must cover every address from 0x0000 to 0xFFFF.")

        traps = TrapDispatcher(console)
        cpu = Lc3Cpu(bus, traps)
        machine = Machine(bus, cpu, traps, console)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        for path in config.images:
            machine.load_image(path)

        symbol_map = {}
        symbol_loader = SymbolTableLoader()
        for path in config.symbols:
            symbol_map.update(symbol_loader.load_symbols(path))
        if symbol_map:
            cpu.set_symbol_map(symbol_map)

        return machine

    def _create_device(self, region: MemoryRegion, console: Console) -> Device:
        size = region.end - region.start + 1
        if size <= 0:
            raise ConfigError(f"Invalid region {region.start:04X}-{region.end:04X}: end precedes start.")
        if region.type == "RAM":
            return RAM(size)
        if region.type == "KEYBOARD":
            return KeyboardDevice(console)
        raise ConfigError(
            f"Unknown device type '{region.type}' for range {region.start:04X}-{region.end:04X}"
        )

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Lc3Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()
        state = cpu.get_state()
        state.pc = config_state.pc & 0xFFFF

        for reg_name, value in config_state.registers.items():
            if reg_name in ("PC", "COND") or read_register(state, reg_name) is None:
                warnings.warn(f"Ignoring unknown initial register '{reg_name}'")
                continue
            state.set_register(int(reg_name[1]), value)

import yaml
from typing import Dict, Any

from lc3_core_tracer.common.errors import ConfigError
from lc3_core_tracer.core.state import PC_START
from .models import SystemConfig, MemoryRegion, CpuInitialState, default_memory_map

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return self._parse_config(data or {})

    def load_from_string(self, text: str) -> SystemConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        return self._parse_config(data or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping.")

        # Parse Memory Map
        memory_map = []
        for region_data in self._section(data, "memory_map", list):
            if not isinstance(region_data, dict):
                raise ConfigError(f"Memory region must be a mapping: {region_data!r}")
            memory_map.append(MemoryRegion(
                start=self._parse_int(region_data.get("start")),
                end=self._parse_int(region_data.get("end")),
                type=str(region_data.get("type") or "RAM").upper(),
                label=str(region_data.get("label") or ""),
            ))

        # Parse Initial State
        initial_state_data = self._section(data, "initial_state", dict)
        registers = {
            str(name).upper(): self._parse_int(value)
            for name, value in self._section(initial_state_data, "registers", dict).items()
        }
        pc = initial_state_data.get("pc")
        initial_state = CpuInitialState(
            pc=PC_START if pc is None else self._parse_int(pc),
            registers=registers,
        )

        return SystemConfig(
            memory_map=memory_map or default_memory_map(),
            initial_state=initial_state,
            images=[str(p) for p in self._section(data, "images", list)],
            symbols=[str(p) for p in self._section(data, "symbols", list)],
        )

    # 空のキー（値がnull）は省略と同じ扱いにし、型が合わなければConfigErrorとする
    def _section(self, data: Dict[str, Any], key: str, expected: type) -> Any:
        value = data.get(key)
        if value is None:
            return expected()
        if not isinstance(value, expected):
            raise ConfigError(f"'{key}' must be a {'mapping' if expected is dict else 'list'}, got {value!r}")
        return value

    # LC-3の慣習に合わせ "x3000" 形式も受け付ける
    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                if text.lower().startswith("0x"):
                    return int(text, 16)
                if text.lower().startswith("x"):
                    return int(text[1:], 16)
                return int(text)
            except ValueError:
                raise ConfigError(f"Invalid integer format: {value}") from None
        raise ConfigError(f"Invalid integer format: {value}")

# lc3_core_tracer/cli.py
"""
LC-3 Core Tracer コマンドラインインターフェース。

Usage:
  lc3-tracer IMAGE [IMAGE ...] [--config FILE] [--trace] [--break ADDR] [--max-steps N]

終了コード:
  0   HALTトラップによる正常終了
  1   ロードエラー、不正オペコード/トラップ、コンソール入力の終端
  2   ブレークポイントまたはステップ上限で停止
  130 Ctrl-C による中断
"""
import argparse
import sys
from typing import List, Optional

from lc3_core_tracer.common.errors import Lc3Error, IllegalOpcode, IllegalTrap
from lc3_core_tracer.config.builder import SystemBuilder
from lc3_core_tracer.config.loader import ConfigLoader
from lc3_core_tracer.config.models import SystemConfig
from lc3_core_tracer.console.console import Console
from lc3_core_tracer.console.terminal import TerminalConsole
from lc3_core_tracer.core.snapshot import Snapshot
from lc3_core_tracer.loader.loader import LoadedImage
from lc3_core_tracer.runtime.machine import Machine
from lc3_core_tracer.runtime.run_loop import BreakpointCondition, BreakpointConditionType, RunResult

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_STOPPED = 2
EXIT_INTERRUPTED = 130


def parse_address(text: str) -> int:
    value = text.strip().lower()
    try:
        if value.startswith("0x"):
            address = int(value, 16)
        elif value.startswith("x"):
            address = int(value[1:], 16)
        else:
            address = int(value, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address: {text}") from None
    if not 0 <= address <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"address out of range: {text}")
    return address


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3-tracer",
        description="Run LC-3 object images with an optional execution trace.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  lc3-tracer 2048.obj\n"
               "  lc3-tracer os.obj program.obj --trace\n"
               "  lc3-tracer program.obj --break x3010 --max-steps 10000\n",
    )
    parser.add_argument("images", nargs="+", metavar="IMAGE",
                        help="Program image to load (.obj binary or .hex text); later images overwrite earlier ones")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML system configuration (memory map, initial registers, symbols)")
    parser.add_argument("--trace", action="store_true",
                        help="Print every executed instruction to stderr")
    parser.add_argument("--break", dest="breakpoints", type=parse_address, action="append", default=[],
                        metavar="ADDR", help="Stop before executing the instruction at ADDR (can repeat)")
    parser.add_argument("--max-steps", type=int, default=None, metavar="N",
                        help="Stop after N instructions")
    return parser


# @intent:responsibility トレース1行を整形して標準エラー出力へ書き出します。
def print_trace(snapshot: Snapshot) -> None:
    print(f"{snapshot.address:04X}: {snapshot.operation.opcode_hex}  {snapshot.metadata.symbol_info}",
          file=sys.stderr)


def format_registers(machine: Machine) -> str:
    registers = machine.cpu.get_register_map()
    flags = "".join(name for name, is_set in machine.cpu.get_flag_state().items() if is_set)
    general = " ".join(f"R{i}={registers[f'R{i}']:04X}" for i in range(8))
    return f"{general} PC={registers['PC']:04X} COND={flags or '-'}"


# @intent:responsibility ロードしたイメージが占めるアドレス範囲を1行で表します。
def describe_image(image: LoadedImage) -> str:
    if not image.words:
        return f"{image.path}: empty image at x{image.origin:04X}"
    return f"{image.path}: x{image.origin:04X}-x{image.end - 1:04X} ({len(image.words)} words)"


def _create_machine(args: argparse.Namespace, console: Console) -> Machine:
    config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    machine = SystemBuilder().build_system(config, console)
    for path in args.images:
        machine.load_image(path)
    for address in args.breakpoints:
        machine.run_loop.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=address))
    if args.trace:
        for image in machine.images:
            print(f"loaded {describe_image(image)}", file=sys.stderr)
        machine.run_loop.set_trace(print_trace)
    return machine


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    if console is None:
        console = TerminalConsole()

    # ロードエラーは命令を1つも実行する前に報告する
    try:
        machine = _create_machine(args, console)
    except Lc3Error as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        with console:
            result = machine.run(args.max_steps)
    except (IllegalOpcode, IllegalTrap) as e:
        console.flush()
        print(f"\nfatal: {e}", file=sys.stderr)
        print(format_registers(machine), file=sys.stderr)
        return EXIT_ERROR
    except Lc3Error as e:
        print(f"\nfatal: {e}", file=sys.stderr)
        return EXIT_ERROR
    except EOFError:
        print("\nfatal: console input closed while waiting for a key", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\ninterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    if result == RunResult.HALTED:
        return EXIT_OK

    pc = machine.cpu.get_state().pc
    if result == RunResult.BREAKPOINT:
        print(f"Breakpoint hit at PC: {pc:#06x}", file=sys.stderr)
    else:
        print(f"Stopped after {args.max_steps} steps at PC: {pc:#06x}", file=sys.stderr)
    print(format_registers(machine), file=sys.stderr)
    return EXIT_STOPPED


if __name__ == "__main__":
    sys.exit(main())

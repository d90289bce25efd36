"""
例外階層の定義。

実行時エラー（不正オペコード・不正トラップ）とローダーエラーを型で区別し、
CLI層で終了コードへ変換できるようにします。
"""
from typing import Optional


# @intent:responsibility 本パッケージが送出する全ての例外の基底クラスです。
class Lc3Error(Exception):
    pass


# @intent:responsibility RTI/RES など、ユーザーモードで実行できない命令を表します。
class IllegalOpcode(Lc3Error, ValueError):
    def __init__(self, address: int, instruction: int, mnemonic: str = ""):
        self.address = address
        self.instruction = instruction
        self.mnemonic = mnemonic
        name = f" ({mnemonic})" if mnemonic else ""
        super().__init__(
            f"Illegal opcode {instruction >> 12:#x}{name} in instruction "
            f"{instruction:#06x} at address {address:#06x}"
        )


# @intent:responsibility 対応するシステムルーチンを持たないトラップベクタを表します。
class IllegalTrap(Lc3Error, ValueError):
    def __init__(self, address: int, vector: int):
        self.address = address
        self.vector = vector
        super().__init__(f"Illegal trap vector {vector:#04x} at address {address:#06x}")


# @intent:responsibility プログラムイメージの読み込みに関するエラーの基底クラスです。
class ImageError(Lc3Error):
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        prefix = f"{path}: " if path else ""
        super().__init__(f"{prefix}{message}")


class ImageNotFound(ImageError):
    pass


class ImageTruncated(ImageError, ValueError):
    pass


class ImageTooLarge(ImageError, ValueError):
    pass


# @intent:responsibility 16ビットのアドレス空間外、またはデバイス未割当のアドレスへのアクセスを表します。
class AddressOutOfRange(Lc3Error, IndexError):
    def __init__(self, address: int, reason: str = "outside the 16-bit address space"):
        self.address = address
        super().__init__(f"Address {address:#06x} {reason}.")


# @intent:responsibility システム構成ファイル（YAML）の不備を表します。
class ConfigError(Lc3Error, ValueError):
    pass

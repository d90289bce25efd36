# lc3_core_tracer/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、ワードアドレス指定の16ビットメモリ空間を抽象化し、
読み書きアクセスを適切なデバイスに委譲する責務を負います。
"""
from abc import ABC, abstractmethod
from typing import List, Tuple
from dataclasses import dataclass
from enum import Enum

from lc3_core_tracer.common.errors import AddressOutOfRange

ADDRESS_SPACE_SIZE = 0x10000
WORD_MASK = 0xFFFF

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 16bit value
    access_type: BusAccessType

# @intent:responsibility バスの抽象デバイスインターフェースを定義します。
class Device(ABC):
    """
    バスに接続されるデバイスの抽象基底クラス。
    全てのデバイスはreadとwriteのインターフェースを実装する必要があります。
    """
    # @intent:responsibility 指定されたオフセットから16bitのワードを読み出します。
    @abstractmethod
    def read(self, address: int) -> int:
        """
        指定されたアドレスから16bitのデータを読み出します。
        アドレスはデバイス内でのオフセットとして扱われます。
        """
        pass

    # @intent:responsibility 指定されたオフセットに16bitのワードを書き込みます。
    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

    # @intent:responsibility 副作用なしにオフセットの内容を返します。
    # @intent:rationale 逆アセンブラやトレース表示がI/Oの副作用（キーボードのポーリング等）を起こさないようにします。
    def peek(self, address: int) -> int:
        return self.read(address)

    # @intent:responsibility デバイスのワード数を返します。
    @abstractmethod
    def get_size(self) -> int:
        pass

# @intent:responsibility 16bitワード単位のRAMデバイスの機能を提供します。
class RAM(Device):
    """
    ワードアドレス指定のRAMデバイス。全てのセルは0で初期化されます。
    """
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = [0] * size
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        if not 0 <= data <= WORD_MASK:
            raise ValueError(f"Data {data} is not a 16-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility メモリアドレス空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
# @intent:rationale バスの全てのアクセスを記録し、Snapshotに含めることでシステムの観測可能性を高めます。
class Bus:
    """
    メモリアドレス空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
    バス上で行われた全てのメモリアクセスを記録する機能を提供します。
    """
    def __init__(self):
        # メモリマップ: (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレス範囲にデバイスを登録します。
    # @intent:pre-condition 0 <= start_address <= end_address <= 0xFFFF であり、範囲の大きさがデバイスのサイズと一致する必要があります。
    # @intent:rationale アドレス範囲の重複チェックは行いません。先に登録されたデバイスが優先されます。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if not (0 <= start_address <= end_address <= WORD_MASK):
            raise ValueError(
                "Invalid address range: start_address must be <= end_address and within 0x0000-0xFFFF."
            )
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        expected_size = end_address - start_address + 1
        if device.get_size() != expected_size:
            raise ValueError(
                f"Registered {type(device).__name__} device size ({device.get_size()} words) does not match "
                f"the specified address range size ({expected_size} words)."
            )

        self._memory_map.append((start_address, end_address, device))

    # @intent:responsibility 全アドレス(0x0000-0xFFFF)がいずれかのデバイスに割り当てられているか判定します。
    def is_fully_mapped(self) -> bool:
        next_free = 0
        for start, end, _ in sorted(self._memory_map, key=lambda region: region[0]):
            if start > next_free:
                return False
            next_free = max(next_free, end + 1)
        return next_free >= ADDRESS_SPACE_SIZE

    # @intent:post-condition アドレスが範囲外、またはデバイスが見つからなかった場合、AddressOutOfRangeを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        if not isinstance(address, int) or not 0 <= address <= WORD_MASK:
            raise AddressOutOfRange(address)
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise AddressOutOfRange(address, "not mapped to any device")

    def read(self, address: int) -> int:
        """
        指定されたアドレスから16bitのデータを読み出します。
        アクセスはログに記録されます。
        """
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログおよびデバイスの副作用なしにアドレスの内容を返します。
    def peek(self, address: int) -> int:
        device, offset = self._find_device(address)
        return device.peek(offset)

    def write(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE)

    # @intent:responsibility ローダー専用の書き込み経路です。アクティビティログには記録しません。
    def load(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        device.write(offset, data)

# tests/transport/test_bus.py
"""
lc3_core_tracer.transport.busモジュールの単体テスト。
"""
import pytest

from lc3_core_tracer.common.errors import AddressOutOfRange
from lc3_core_tracer.transport.bus import Bus, RAM, BusAccessType

# @intent:test_suite ワードアドレス指定のバスとRAMデバイスの基本機能とエラーハンドリングを検証します。

class TestRAM:
    def test_ram_init_zeroed(self):
        ram = RAM(16)
        assert ram.get_size() == 16
        assert all(ram.read(i) == 0 for i in range(16))

    def test_ram_init_invalid_size(self):
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(0)
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(1.5)

    def test_ram_stores_16_bit_words(self):
        ram = RAM(2)
        ram.write(0, 0xBEEF)
        assert ram.read(0) == 0xBEEF

    def test_ram_out_of_bounds(self):
        ram = RAM(4)
        with pytest.raises(IndexError, match="Address 4 out of bounds for RAM of size 4."):
            ram.read(4)

    def test_ram_rejects_wide_data(self):
        ram = RAM(1)
        with pytest.raises(ValueError, match="Data 65536 is not a 16-bit value."):
            ram.write(0, 0x10000)


class TestBus:
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        return bus

    # @intent:test_case_log 読み書きがアクティビティログに記録され、取得時にクリアされることを検証します。
    def test_read_write_logged(self, bus):
        bus.write(0x3000, 0x1234)
        assert bus.read(0x3000) == 0x1234
        log = bus.get_and_clear_activity_log()
        assert [(a.address, a.data, a.access_type) for a in log] == [
            (0x3000, 0x1234, BusAccessType.WRITE),
            (0x3000, 0x1234, BusAccessType.READ),
        ]
        assert bus.get_and_clear_activity_log() == []

    def test_peek_and_load_are_not_logged(self, bus):
        bus.load(0x4000, 0xAAAA)
        assert bus.peek(0x4000) == 0xAAAA
        assert bus.get_and_clear_activity_log() == []

    # @intent:test_case_bounds 16bit空間外のアドレスはAddressOutOfRangeとなることを検証します。
    @pytest.mark.parametrize("address", [-1, 0x10000, 0x12345])
    def test_out_of_range(self, bus, address):
        with pytest.raises(AddressOutOfRange):
            bus.read(address)
        with pytest.raises(AddressOutOfRange):
            bus.write(address, 0)

    def test_address_out_of_range_is_index_error(self, bus):
        with pytest.raises(IndexError):
            bus.read(0x10000)

    def test_unmapped_address(self):
        bus = Bus()
        bus.register_device(0x0000, 0x0FFF, RAM(0x1000))
        with pytest.raises(AddressOutOfRange, match="not mapped"):
            bus.read(0x2000)

    def test_register_device_validation(self):
        bus = Bus()
        with pytest.raises(ValueError):
            bus.register_device(0x2000, 0x1000, RAM(0x100))
        with pytest.raises(ValueError):
            bus.register_device(0x0000, 0x10000, RAM(0x10001))
        with pytest.raises(ValueError):
            bus.register_device(0x1000, 0x10FF, RAM(0x200))
        with pytest.raises(TypeError):
            bus.register_device(0x0000, 0x0000, object())

    def test_region_offsets(self):
        bus = Bus()
        low, high = RAM(0x8000), RAM(0x8000)
        bus.register_device(0x0000, 0x7FFF, low)
        bus.register_device(0x8000, 0xFFFF, high)
        bus.write(0x8001, 7)
        assert high.read(1) == 7
        assert low.read(1) == 0

    def test_is_fully_mapped(self):
        bus = Bus()
        bus.register_device(0x0000, 0x7FFF, RAM(0x8000))
        assert not bus.is_fully_mapped()
        bus.register_device(0x8001, 0xFFFF, RAM(0x7FFF))
        assert not bus.is_fully_mapped()
        bus.register_device(0x8000, 0x8000, RAM(1))
        assert bus.is_fully_mapped()

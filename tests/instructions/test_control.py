import unittest

from lc3_core_tracer.common.errors import IllegalOpcode, IllegalTrap
from lc3_core_tracer.config.builder import SystemBuilder
from lc3_core_tracer.config.models import SystemConfig
from lc3_core_tracer.console.console import BufferedConsole
from lc3_core_tracer.core.state import FL_NEG, FL_POS, FL_ZRO

def br(n, z, p, offset):
    return (n << 11) | (z << 10) | (p << 9) | (offset & 0x1FF)

class TestControlInstructions(unittest.TestCase):
    def setUp(self):
        self.console = BufferedConsole()
        self.machine = SystemBuilder().build_system(SystemConfig(), self.console)
        self.cpu = self.machine.cpu
        self.bus = self.machine.bus
        self.state = self.cpu.get_state()

    def _execute(self, word, current_pc=0x3000):
        self.bus.write(current_pc, word)
        self.state.pc = current_pc
        return self.cpu.step()

    def test_br_all_conditions_always_branches(self):
        for flag in (FL_NEG, FL_ZRO, FL_POS):
            self.state.cond = flag
            self._execute(br(1, 1, 1, 5))
            self.assertEqual(self.state.pc, 0x3006)

    def test_br_no_conditions_never_branches(self):
        for flag in (FL_NEG, FL_ZRO, FL_POS):
            self.state.cond = flag
            self._execute(br(0, 0, 0, 5))
            self.assertEqual(self.state.pc, 0x3001)

    def test_br_matches_single_flag(self):
        cases = [
            ((1, 0, 0), FL_NEG, True), ((1, 0, 0), FL_POS, False),
            ((0, 1, 0), FL_ZRO, True), ((0, 1, 0), FL_NEG, False),
            ((0, 0, 1), FL_POS, True), ((0, 0, 1), FL_ZRO, False),
            ((1, 1, 0), FL_POS, False), ((0, 1, 1), FL_NEG, False),
        ]
        for (n, z, p), flag, taken in cases:
            self.state.cond = flag
            self._execute(br(n, z, p, 0x10))
            self.assertEqual(self.state.pc, 0x3011 if taken else 0x3001)

    def test_br_backward_offset(self):
        self.state.cond = FL_POS
        # BRp #-2 -> branch to itself minus one
        self._execute(br(0, 0, 1, -2), current_pc=0x3005)
        self.assertEqual(self.state.pc, 0x3004)

    def test_br_does_not_change_cond(self):
        self.state.cond = FL_NEG
        self._execute(br(1, 0, 0, 3))
        self.assertEqual(self.state.cond, FL_NEG)

    def test_br_wraps_address(self):
        self.state.cond = FL_ZRO
        self._execute(br(0, 1, 0, 0x0FF), current_pc=0xFFF0)
        self.assertEqual(self.state.pc, (0xFFF1 + 0xFF) & 0xFFFF)

    def test_jmp_uses_register_value(self):
        self.state.set_register(3, 0x4567)
        self._execute(0xC0C0)  # JMP R3
        self.assertEqual(self.state.pc, 0x4567)

    def test_ret(self):
        self.state.set_register(7, 0x3100)
        self._execute(0xC1C0)  # RET
        self.assertEqual(self.state.pc, 0x3100)

    def test_jsr_saves_return_address_first(self):
        self._execute(0x4802)  # JSR #2
        self.assertEqual(self.state.get_register(7), 0x3001)
        self.assertEqual(self.state.pc, 0x3003)

    def test_jsr_negative_offset(self):
        self._execute(0x4800 | 0x7FC, current_pc=0x3010)  # JSR #-4
        self.assertEqual(self.state.get_register(7), 0x3011)
        self.assertEqual(self.state.pc, 0x300D)

    def test_jsrr(self):
        self.state.set_register(2, 0x5000)
        self._execute(0x4080)  # JSRR R2
        self.assertEqual(self.state.get_register(7), 0x3001)
        self.assertEqual(self.state.pc, 0x5000)

    def test_jsrr_r7_jumps_to_previous_r7(self):
        self.state.set_register(7, 0x6000)
        self._execute(0x41C0)  # JSRR R7
        self.assertEqual(self.state.pc, 0x6000)
        self.assertEqual(self.state.get_register(7), 0x3001)

    def test_trap_saves_return_address(self):
        self.state.set_register(0, ord("x"))
        self._execute(0xF021)  # OUT
        self.assertEqual(self.state.get_register(7), 0x3001)
        self.assertEqual(self.state.pc, 0x3001)
        self.assertEqual(self.console.output, "x")

    def test_rti_is_illegal(self):
        with self.assertRaises(IllegalOpcode) as ctx:
            self._execute(0x8000, current_pc=0x3004)
        self.assertEqual(ctx.exception.address, 0x3004)
        self.assertEqual(ctx.exception.instruction, 0x8000)

    def test_reserved_is_illegal(self):
        with self.assertRaises(IllegalOpcode) as ctx:
            self._execute(0xD123)
        self.assertEqual(ctx.exception.instruction, 0xD123)
        self.assertIn("0x3000", str(ctx.exception))

    def test_unknown_trap_vector(self):
        with self.assertRaises(IllegalTrap) as ctx:
            self._execute(0xF0FF)
        self.assertEqual(ctx.exception.vector, 0xFF)
        self.assertEqual(ctx.exception.address, 0x3000)

if __name__ == '__main__':
    unittest.main()

"""Tests for control flow instructions."""

import pytest
from chip8core import execute, press_key, raise_for_fault, DecodeError
from conftest import with_registers


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """Test 1NNN - Jump to address."""
        state = execute(fresh_state, 0x1001)
        assert state.pc == 1

    def test_jump_sets_exact_address(self, fresh_state):
        state = execute(fresh_state, 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump with V0 offset."""
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0x6230)  # V2 = 0x30, ignored
        state = execute(state, 0xB250)  # Jump to 0x250 + V0
        assert state.pc == 0x260

    def test_jump_with_offset_wraps(self, fresh_state):
        state = with_registers(fresh_state, V0=0xFF)
        state = execute(state, 0xBFF0)
        assert state.pc == (0xFF0 + 0xFF) & 0xFFF


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XNN - Should skip when VX == NN."""
        state = with_registers(fresh_state, V5=0x42)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XNN - Should not skip when VX != NN."""
        state = with_registers(fresh_state, V5=0x41)
        initial_pc = state.pc

        state = execute(state, 0x3542)
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XNN - Should skip when VX != NN."""
        state = with_registers(fresh_state, V3=0x10)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XNN - Should not skip when VX == NN."""
        state = with_registers(fresh_state, V3=0x20)
        initial_pc = state.pc

        state = execute(state, 0x4320)
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = with_registers(fresh_state, V1=0x55, V2=0x55)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = with_registers(fresh_state, V1=0x55, V2=0x44)
        initial_pc = state.pc

        state = execute(state, 0x5120)
        assert state.pc == initial_pc

    def test_skip_if_equal_register_ignores_low_nibble(self, fresh_state):
        state = with_registers(fresh_state, V1=0x55, V2=0x55)
        initial_pc = state.pc

        state = execute(state, 0x5127)
        assert state.pc == initial_pc + 2
        assert state.fault == 0

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = with_registers(fresh_state, V7=0xAA, V8=0xBB)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = with_registers(fresh_state, V7=0xCC, V8=0xCC)
        initial_pc = state.pc

        state = execute(state, 0x9780)
        assert state.pc == initial_pc

    def test_skip_with_zero_values(self, fresh_state):
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0x3000)  # Skip if V0 == 0
        assert state.pc == initial_pc + 2

    def test_skip_boundary_values(self, fresh_state):
        state = with_registers(fresh_state, V0=0xFF)
        initial_pc = state.pc

        state = execute(state, 0x30FF)  # Skip if V0 == 255
        assert state.pc == initial_pc + 2


class TestKeySkips:
    """EX9E / EXA1 compare VX against the keypad."""

    def test_skip_if_key_pressed(self, fresh_state):
        state = with_registers(fresh_state, V3=0x7)
        state = press_key(state, 0x7)
        initial_pc = state.pc

        assert execute(state, 0xE39E).pc == initial_pc + 2
        assert execute(state, 0xE3A1).pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        state = with_registers(fresh_state, V3=0x7)
        initial_pc = state.pc

        assert execute(state, 0xE39E).pc == initial_pc
        assert execute(state, 0xE3A1).pc == initial_pc + 2

    def test_out_of_range_key_reads_released(self, fresh_state):
        """A register value above 0xF names no key, so it is never pressed."""
        state = press_key(fresh_state, 0xF)
        state = with_registers(state, V2=0x1F)
        initial_pc = state.pc

        assert execute(state, 0xE29E).pc == initial_pc
        assert execute(state, 0xE2A1).pc == initial_pc + 2

    @pytest.mark.parametrize("instruction", [0xE000, 0xE19F, 0xE3A2])
    def test_unknown_key_instruction_is_fatal(self, fresh_state, instruction):
        state = execute(fresh_state, instruction)

        with pytest.raises(DecodeError):
            raise_for_fault(state)

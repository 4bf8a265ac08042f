"""Tests for the host-facing Session."""

import numpy as np
import pytest
from chip8core import Session, DecodeError, StackUnderflowError, StackOverflowError, ProgramTooLargeError
from chip8core.logging import SessionLogger
from conftest import program


def test_new_session_has_font_and_no_program(session):
    assert session.pc == 0x200
    assert session.registers == [0] * 16
    assert not session.paused
    assert not session.sound_active


def test_load_and_run(session):
    session.load_program(program(0x6A2A, 0xA300, 0x1204))

    session.run_cycle()

    assert session.registers[0xA] == 0x2A
    assert session.index == 0x300
    assert session.pc == 0x204
    assert session.cycles == 1


def test_display_is_read_only_copy(session):
    # Draw glyph 0 at the origin: V0 = 0, I = font(V0), draw 5 rows, spin
    session.load_program(program(0x6000, 0xF029, 0xD005, 0x1206))
    session.run_cycle()

    display = session.display

    assert display.shape == (64, 32)
    assert display.dtype == np.bool_
    assert display[0, 0]
    assert session.is_lit(0, 0)
    assert session.is_lit(64, 32)
    assert not session.is_lit(1, 1)
    with pytest.raises(ValueError):
        display[0, 0] = False


def test_await_key_through_session(session):
    session.load_program(program(0xF70A, 0x1202))

    session.run_cycle()
    assert session.paused

    session.press(0xB)
    assert not session.paused
    assert session.registers[7] == 0xB

    session.release(0xB)
    session.run_cycle()
    assert session.pc == 0x202


def test_out_of_range_keys_are_ignored(session):
    session.load_program(program(0xF70A, 0x1202))
    session.run_cycle()

    session.press(16)
    session.press(-1)
    session.release(99)

    assert session.paused
    assert not session.state.keypad.any()


def test_sound_active(session):
    # V0 = 2, sound = V0, spin
    session.load_program(program(0x6002, 0xF018, 0x1204))

    session.run_cycle()
    assert session.sound_active  # set to 2, decremented to 1

    session.run_cycle()
    assert not session.sound_active


def test_decode_error_is_raised(session):
    session.load_program(program(0x6001, 0x7001, 0xF0FF))

    with pytest.raises(DecodeError) as excinfo:
        session.run_cycle()

    assert excinfo.value.instruction == 0xF0FF
    assert excinfo.value.pc == 0x204
    assert "0xF0FF" in str(excinfo.value)


def test_stack_underflow_is_raised(session):
    session.load_program(program(0x00EE))

    with pytest.raises(StackUnderflowError):
        session.run_cycle()


def test_faulted_session_stays_faulted(session):
    session.load_program(program(0x0000))

    with pytest.raises(DecodeError):
        session.run_cycle()
    with pytest.raises(DecodeError):
        session.run_cycle()


def test_program_too_large(session):
    with pytest.raises(ProgramTooLargeError):
        session.load_program(b"\x00" * 4000)
    assert session.program == b""


def test_reset_restarts_program(session):
    session.load_program(program(0x7001, 0x1200))
    session.run_cycle()
    assert session.registers[0] == 5

    session.reset()

    assert session.registers[0] == 0
    assert session.pc == 0x200
    assert session.cycles == 0


def test_configuration_is_applied():
    session = Session(
        instructions_per_cycle=2,
        canonical_flags=True,
        logger=SessionLogger(log_level="CRITICAL", use_colors=False),
    )
    # V1 = 0x10, V2 = 0x20, V1 += V2
    session.load_program(program(0x6110, 0x6220, 0x8124, 0x1206))

    session.run_cycle()
    assert session.pc == 0x204

    session.run_cycle()
    assert session.registers[1] == 0x30
    assert session.registers[0xF] == 0  # no carry under the canonical rule


def test_logger_output(capsys):
    session = Session(logger=SessionLogger(log_level="DEBUG", use_colors=False, show_timestamps=False))
    session.load_program(program(0x1200))
    session.press(0x3)
    session.press(0x42)

    out = capsys.readouterr().out
    assert "[Session] Loaded program: 2 bytes at 0x200" in out
    assert "Key 0x3 pressed" in out
    assert "Ignoring key 66" in out


def nested_calls(count):
    # Each word calls the next one, then the last word spins
    words = [0x2000 | (0x202 + 2 * k) for k in range(count)]
    end = 0x200 + 2 * count
    return program(*words, 0x1000 | end)


def test_deep_nesting_overflows_default_stack(session):
    session.load_program(nested_calls(20))

    with pytest.raises(StackOverflowError):
        session.run_cycle()
        session.run_cycle()


def test_larger_stack_size_allows_deep_nesting():
    session = Session(stack_size=32, logger=SessionLogger(log_level="CRITICAL", use_colors=False))
    session.load_program(nested_calls(20))

    session.run_cycle()
    session.run_cycle()
    session.run_cycle()

    assert session.pc == 0x228

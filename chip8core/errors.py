"""Fatal error conditions of the CHIP-8 core."""

from typing import Any, Optional


class Chip8Error(Exception):
    """Base exception for all CHIP-8 core errors.

    None of these are recoverable: they describe a defect in the emulated
    program or its image and end the session.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class DecodeError(Chip8Error):
    """Raised when an instruction word matches no known instruction."""

    def __init__(self, instruction: int, pc: int):
        message = f"Unknown instruction 0x{instruction:04X} at 0x{pc:03X}"
        super().__init__(message, details={"instruction": f"0x{instruction:04X}", "pc": f"0x{pc:03X}"})
        self.instruction = instruction
        self.pc = pc


class StackUnderflowError(Chip8Error):
    """Raised on a return (00EE) with an empty call stack."""

    def __init__(self, pc: int, instruction: int = 0x00EE):
        message = f"Return with empty call stack at 0x{pc:03X}"
        super().__init__(message, details={"instruction": f"0x{instruction:04X}", "pc": f"0x{pc:03X}"})
        self.instruction = instruction
        self.pc = pc


class StackOverflowError(Chip8Error):
    """Raised on a call (2NNN) when every stack slot is in use."""

    def __init__(self, pc: int, instruction: int):
        message = f"Call 0x{instruction:04X} overflows the call stack at 0x{pc:03X}"
        super().__init__(message, details={"instruction": f"0x{instruction:04X}", "pc": f"0x{pc:03X}"})
        self.instruction = instruction
        self.pc = pc


class ProgramTooLargeError(Chip8Error):
    """Raised at load time when a program image does not fit in memory."""

    def __init__(self, size: int, capacity: int):
        message = f"Program of {size} bytes exceeds the {capacity} bytes available"
        super().__init__(message, details={"size": size, "capacity": capacity})
        self.size = size
        self.capacity = capacity

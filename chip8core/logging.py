"""Console logging utilities for CHIP-8 sessions.

Provides a small console logger with levels, colours and elapsed-time stamps,
a session-specific logger, and real-time tqdm progress bars for headless runs
inside JAX loops using io_callback.
"""

import time
import sys
from typing import Optional, Callable, Tuple

import jax
from jax.experimental import io_callback

from tqdm import tqdm


class ConsoleLogger:
    """Console logger with level filtering and formatters."""

    def __init__(
        self,
        name: str = "chip8core",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class SessionLogger(ConsoleLogger):
    """Logger for the events of one emulation session."""

    def __init__(self, name: str = "Session", **kwargs):
        super().__init__(name, **kwargs)

    def log_program_loaded(self, size: int, instructions_per_cycle: int, canonical_flags: bool):
        self.info(
            f"Loaded program: {size} bytes at 0x200 "
            f"({instructions_per_cycle} instructions/cycle, "
            f"{'canonical' if canonical_flags else 'classic'} flags)"
        )

    def log_key_event(self, key: int, pressed: bool):
        self.debug(f"Key 0x{key:X} {'pressed' if pressed else 'released'}")

    def log_rejected_key(self, key: int):
        self.warning(f"Ignoring key {key!r}: keypad keys are 0x0-0xF")

    def log_await_key(self, register: int):
        self.debug(f"Waiting for key press into V{register:X}")

    def log_key_resolved(self, register: int, key: int):
        self.debug(f"V{register:X} <- key 0x{key:X}, resuming")

    def log_fault(self, error: Exception, cycle: int):
        self.critical(f"Cycle {cycle}: {error}")


def build_frame_progress_bar(
    frames: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build a tqdm bar fed from inside a jitted frame loop.

    Returns ``(open_bar, advance_bar)``. ``open_bar(i)`` goes before the loop
    body and creates the bar on the first frame. ``advance_bar(result, i)``
    goes after it, counts frame ``i`` as finished and closes the bar once all
    ``frames`` have run. The bar is refreshed every ``print_rate`` frames and
    always ends at ``frames``.
    """
    if desc is None:
        desc = f"Running ({frames:,} frames)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)
    kwargs.setdefault("unit", "frame")

    bars = {}

    if print_rate is None:
        print_rate = max(1, min(frames // 20, 50))
    else:
        print_rate = max(1, min(print_rate, frames))

    # Frames left over after the last full refresh, reported on close
    tail = frames % print_rate

    def _open():
        bars[0] = tqdm(total=frames, desc=desc, **kwargs)

    def _advance(count):
        if 0 in bars:
            bars[0].update(int(count))

    def _close():
        if 0 in bars:
            bars.pop(0).close()

    def open_bar(frame):
        jax.lax.cond(
            frame == 0,
            lambda: io_callback(_open, None, ordered=True),
            lambda: None,
        )

    def advance_bar(result, frame):
        finished = frame + 1

        jax.lax.cond(
            finished % print_rate == 0,
            lambda: io_callback(_advance, None, print_rate, ordered=True),
            lambda: None,
        )

        if tail:
            jax.lax.cond(
                finished == frames,
                lambda: io_callback(_advance, None, tail, ordered=True),
                lambda: None,
            )

        jax.lax.cond(
            finished == frames,
            lambda: io_callback(_close, None, ordered=True),
            lambda: None,
        )
        return result

    return open_bar, advance_bar


def fori_loop_with_progress(
    frames: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator adding a frame progress bar to a ``jax.lax.fori_loop`` body."""
    open_bar, advance_bar = build_frame_progress_bar(frames, print_rate, desc, **tqdm_kwargs)

    def _decorator(body):
        def body_with_progress(i, carry):
            open_bar(i)
            return advance_bar(body(i, carry), i)

        return body_with_progress

    return _decorator

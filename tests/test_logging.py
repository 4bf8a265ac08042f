"""Tests for the frame progress bar used by headless runs."""

import jax
import pytest
import chip8core.logging
from chip8core.logging import fori_loop_with_progress


class RecordingBar:
    """Stands in for tqdm and keeps the updates it receives."""

    def __init__(self, total, desc=None, **kwargs):
        self.total = total
        self.desc = desc
        self.kwargs = kwargs
        self.count = 0
        self.closed = False
        RecordingBar.created.append(self)

    def update(self, n):
        self.count += n

    def close(self):
        self.closed = True


@pytest.fixture
def recorded_bars(monkeypatch):
    RecordingBar.created = []
    monkeypatch.setattr(chip8core.logging, "tqdm", RecordingBar)
    return RecordingBar.created


def run_with_progress(frames, **kwargs):
    body = fori_loop_with_progress(frames, **kwargs)(lambda i, total: total + 1)
    result = jax.lax.fori_loop(0, frames, body, 0)
    jax.block_until_ready(result)
    jax.effects_barrier()
    return result


@pytest.mark.parametrize("frames", [1, 7, 40, 45, 1000])
def test_bar_reaches_total(recorded_bars, frames):
    result = run_with_progress(frames)

    assert result == frames
    assert len(recorded_bars) == 1
    bar = recorded_bars[0]
    assert bar.total == frames
    assert bar.count == frames
    assert bar.closed


def test_explicit_print_rate(recorded_bars):
    run_with_progress(10, print_rate=3)

    assert recorded_bars[0].count == 10


def test_frame_defaults(recorded_bars):
    run_with_progress(5)

    bar = recorded_bars[0]
    assert bar.desc == "Running (5 frames)"
    assert bar.kwargs["unit"] == "frame"


def test_custom_description(recorded_bars):
    run_with_progress(5, desc="Warmup", unit_scale=True)

    bar = recorded_bars[0]
    assert bar.desc == "Warmup"
    assert bar.kwargs["unit_scale"] is True

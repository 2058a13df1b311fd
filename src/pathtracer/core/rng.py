"""Explicit per-stream random number generation for device code.

Every sampling routine takes a ``stream`` index selecting one xorshift32
generator state stored in a Taichi field. The renderer assigns one stream per
image row, and a row is only ever processed by a single band of the parallel
loop, so stream state is never shared between concurrent iterations.

Stream states are derived host-side from one top-level seed using
``numpy.random.SeedSequence``, which makes renders reproducible per seed and
independent of how rows are grouped into bands.

Example:
    >>> from src.pathtracer.core.rng import seed_streams, random_double
    >>> seed_streams(1234, count=1)
    >>> # Inside a kernel: x = random_double(0)
"""

import numpy as np
import taichi as ti

# One stream per framebuffer row at the maximum image height
MAX_STREAMS = 2048

# xorshift32 must never hold a zero state
_ZERO_STATE_REPLACEMENT = 0x9E3779B9

_rng_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


def derive_stream_states(seed: int | None, count: int) -> np.ndarray:
    """Derive ``count`` non-zero 32-bit generator states from one seed.

    Args:
        seed: Top-level seed. None draws fresh OS entropy.
        count: Number of streams to derive.

    Returns:
        A uint32 array of shape (count,).
    """
    states = np.random.SeedSequence(seed).generate_state(count, dtype=np.uint32)
    return np.where(states == 0, np.uint32(_ZERO_STATE_REPLACEMENT), states).astype(np.uint32)


def seed_streams(seed: int | None, count: int = MAX_STREAMS) -> None:
    """Seed the first ``count`` random streams from a top-level seed.

    Args:
        seed: Top-level seed. None draws fresh OS entropy.
        count: Number of streams to seed (at most MAX_STREAMS).

    Raises:
        ValueError: If count is not in [1, MAX_STREAMS].
    """
    if count < 1 or count > MAX_STREAMS:
        raise ValueError(f"Stream count {count} outside [1, {MAX_STREAMS}]")

    states = np.ones(MAX_STREAMS, dtype=np.uint32)
    states[:count] = derive_stream_states(seed, count)
    _rng_state.from_numpy(states)


def get_stream_state(stream: int) -> int:
    """Get the current raw xorshift32 state of a stream."""
    return int(_rng_state[stream])


@ti.func
def _xorshift32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = state
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    return x


@ti.func
def random_double(stream: ti.i32) -> ti.f64:
    """Draw a uniform value in [0, 1) from a stream.

    Args:
        stream: Index of the random stream to advance.

    Returns:
        A double with 24 bits of randomness in [0, 1).
    """
    x = _xorshift32(_rng_state[stream])
    _rng_state[stream] = x
    return ti.cast(x >> ti.u32(8), ti.f64) * (1.0 / 16777216.0)


@ti.func
def random_range(stream: ti.i32, lo: ti.f64, hi: ti.f64) -> ti.f64:
    """Draw a uniform value in [lo, hi) from a stream."""
    return lo + (hi - lo) * random_double(stream)

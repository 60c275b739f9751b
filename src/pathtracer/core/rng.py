"""Explicit per-task pseudo-random streams for Taichi kernels.

Every function that needs randomness takes the current generator state as
an argument and returns the advanced state alongside its result. Nothing in
this module touches Taichi's global ``ti.random`` state, so a pixel task
that starts from the same seed always draws the same sequence no matter
which thread runs it or how many threads the backend uses.

The generator is a 32-bit PCG variant: the state advances with a linear
congruential step and each output is the permuted (xorshift-multiply) state.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.rng import random_f64, seed_stream
    >>> @ti.kernel
    ... def draw() -> ti.f64:
    ...     rng = seed_stream(ti.u32(7), 0)
    ...     value, rng = random_f64(rng)
    ...     return value
"""

import taichi as ti

# LCG multiplier/increment (multiplier = 1 mod 4 and odd increment give a
# full 2^32 period)
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1442695041

# Output permutation multiplier
_PERMUTE_MULTIPLIER = 277803737

# 1 / 2^24: the top 24 bits of an output become a float in [0, 1)
_INV_2_POW_24 = 1.0 / 16777216.0


@ti.func
def _lcg_step(state: ti.u32) -> ti.u32:
    return state * ti.u32(_LCG_MULTIPLIER) + ti.u32(_LCG_INCREMENT)


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(_PERMUTE_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value into a well-mixed 32-bit value.

    Args:
        value: The input value.

    Returns:
        The hashed value.
    """
    return _permute(_lcg_step(value))


@ti.func
def seed_stream(base_seed: ti.u32, task_index: ti.i32) -> ti.u32:
    """Derive the initial generator state for one task.

    Args:
        base_seed: The render-wide seed.
        task_index: The index of the task (for rendering, the linear pixel index).

    Returns:
        The initial state of the task's private stream.
    """
    return pcg_hash(pcg_hash(base_seed) ^ ti.cast(task_index, ti.u32))


@ti.func
def random_f64(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple of (value, next_state).
    """
    next_state = _lcg_step(state)
    value = ti.cast(_permute(next_state) >> ti.u32(8), ti.f64) * _INV_2_POW_24
    return value, next_state


@ti.func
def random_range(state: ti.u32, low: ti.f64, high: ti.f64):
    """Draw a uniform float in [low, high).

    Args:
        state: The current generator state.
        low: Lower bound (inclusive).
        high: Upper bound (exclusive).

    Returns:
        A tuple of (value, next_state).
    """
    unit, next_state = random_f64(state)
    return low + (high - low) * unit, next_state

"""Render settings and Taichi runtime initialization.

Example:
    >>> from pathtracer.config import RenderSettings, init_taichi
    >>> init_taichi("cpu", seed=0)
    >>> settings = RenderSettings(samples_per_pixel=64, max_depth=16, seed=7)
"""

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)

# Largest value a render seed may take (seeds are unsigned 32-bit)
MAX_SEED = 2**32 - 1

ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


@dataclass(frozen=True)
class RenderSettings:
    """Parameters of one render pass.

    Attributes:
        samples_per_pixel: Jittered rays averaged into each pixel.
        max_depth: Bounce budget per ray. 0 renders an all-black image.
        seed: Base seed of the per-pixel random streams.
        rows_per_batch: Image rows rendered per kernel launch. Progress is
            reported after each batch.
    """

    samples_per_pixel: int = 128
    max_depth: int = 16
    seed: int = 0
    rows_per_batch: int = 16

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be >= 1")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be >= 0")
        if not 0 <= self.seed <= MAX_SEED:
            raise ValueError(f"seed = {self.seed} must be in [0, {MAX_SEED}]")
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch = {self.rows_per_batch} must be >= 1")


def init_taichi(arch: str = "cpu", seed: int = 0, debug: bool = False) -> None:
    """Initialize Taichi with 64-bit default floats and IEEE-754 arithmetic.

    Must run before any pathtracer module that declares fields is imported.

    Args:
        arch: One of ``cpu``, ``gpu``, ``cuda``, ``vulkan`` or ``metal``.
        seed: Seed of Taichi's own generator.
        debug: Enable Taichi's debug mode (bounds checking).

    Raises:
        ValueError: If arch is not a known backend name.
    """
    if arch not in ARCHS:
        raise ValueError(f"Unknown arch {arch!r}, expected one of {sorted(ARCHS)}")

    # NaN checks in encode_color must survive compilation
    ti.init(
        arch=ARCHS[arch],
        default_fp=ti.f64,
        fast_math=False,
        random_seed=seed,
        debug=debug,
    )
    logger.info("Taichi initialized (arch=%s, debug=%s)", arch, debug)

"""Preset scenes.

Two scenes are provided:
- The "random spheres" showcase: a large ground sphere, three big spheres
  (diffuse, glass, metal) and a 22 x 22 grid of small spheres with random
  materials, the diffuse ones moving upward during the shutter interval.
- The "four spheres" scene: the ground and the three big spheres only.

Both come with the same camera: looking from (13, 2, 3) at the origin with
a 20 degree field of view, a small aperture and focus on the origin.

Example:
    >>> import numpy as np
    >>> from pathtracer.scene.presets import create_random_scene
    >>> scene, camera = create_random_scene(rng=np.random.default_rng(42))
    >>> image = camera.render(scene)
"""

import math

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Camera Constants
# =============================================================================

LOOKFROM = (13.0, 2.0, 3.0)
LOOKAT = (0.0, 0.0, 0.0)
VUP = (0.0, 1.0, 0.0)
VFOV = 20.0
APERTURE = 0.1
ASPECT_RATIO = 16.0 / 9.0
IMAGE_HEIGHT = 240
SHUTTER = (0.0, 1.0)

# =============================================================================
# Material Constants
# =============================================================================

GROUND_MATERIAL = Lambertian((0.5, 0.5, 0.4))
DIFFUSE_SPHERE_MATERIAL = Lambertian((0.8, 0.0, 0.8))
GLASS_MATERIAL = Dielectric(1.5)
METAL_SPHERE_MATERIAL = Metal((0.7, 0.6, 0.5), 0.01)

# Small sphere grid: centers at integer offsets in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2

# Material choice out of 100: below 80 diffuse, below 95 metal, else glass
DIFFUSE_CHANCE = 80
METAL_CHANCE = 95


def create_camera(
    image_height: int = IMAGE_HEIGHT,
    aspect_ratio: float = ASPECT_RATIO,
) -> ThinLensCamera:
    """Create the preset camera, focused on the look-at point."""
    return ThinLensCamera(
        lookfrom=LOOKFROM,
        lookat=LOOKAT,
        vup=VUP,
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        image_height=image_height,
        aperture=APERTURE,
        focus_dist=math.dist(LOOKFROM, LOOKAT),
        time0=SHUTTER[0],
        time1=SHUTTER[1],
    )


def add_big_spheres(scene: SceneManager) -> None:
    """Add the three large spheres and the ground."""
    scene.add_sphere((-4.0, 1.0, 0.0), 1.0, DIFFUSE_SPHERE_MATERIAL)
    scene.add_sphere((0.0, -1000.0, -1.0), 1000.0, GROUND_MATERIAL)
    scene.add_sphere((0.0, 1.0, 0.0), 1.0, GLASS_MATERIAL)
    scene.add_sphere((4.0, 1.0, 0.0), 1.0, METAL_SPHERE_MATERIAL)


def add_small_spheres(scene: SceneManager, rng: np.random.Generator) -> None:
    """Add the grid of small spheres with random materials.

    Diffuse spheres get an albedo that is the product of two random colors
    and move straight up at a random speed below 0.5. Metal spheres get a
    light random albedo and a random fuzz below 0.5.
    """
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = int(rng.integers(0, 100))
            center = (a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random())

            if choose_mat < DIFFUSE_CHANCE:
                albedo = rng.random(3) * rng.random(3)
                velocity = (0.0, float(rng.uniform(0.0, 0.5)), 0.0)
                scene.add_sphere(
                    center, SMALL_RADIUS, Lambertian(tuple(albedo.tolist())), velocity=velocity
                )
            elif choose_mat < METAL_CHANCE:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_sphere(center, SMALL_RADIUS, Metal(tuple(albedo.tolist()), fuzz))
            else:
                scene.add_sphere(center, SMALL_RADIUS, GLASS_MATERIAL)


def create_random_scene(
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    use_bvh: bool = True,
    image_height: int = IMAGE_HEIGHT,
    aspect_ratio: float = ASPECT_RATIO,
    axis_strategy: str = "random",
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres showcase scene.

    Args:
        rng: Generator for sphere placement, materials and BVH axes.
        seed: Seed for a fresh generator when rng is omitted.
        use_bvh: Build a BVH over the spheres (the flat list otherwise).
        image_height: Output image height in pixels.
        aspect_ratio: Width divided by height.
        axis_strategy: BVH split axis strategy, ``"random"`` or ``"longest"``.

    Returns:
        Tuple of (scene, camera). The scene is not committed yet.
    """
    if rng is None:
        rng = np.random.default_rng(seed)

    scene = SceneManager()
    add_small_spheres(scene, rng)
    add_big_spheres(scene)

    if use_bvh:
        scene.build_bvh(time_frame=SHUTTER, rng=rng, axis_strategy=axis_strategy)

    return scene, create_camera(image_height, aspect_ratio)


def create_four_spheres_scene(
    use_bvh: bool = False,
    image_height: int = IMAGE_HEIGHT,
    aspect_ratio: float = ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the ground and the three big spheres only.

    Args:
        use_bvh: Build a BVH over the spheres (split on the longest axis).
        image_height: Output image height in pixels.
        aspect_ratio: Width divided by height.

    Returns:
        Tuple of (scene, camera). The scene is not committed yet.
    """
    scene = SceneManager()
    add_big_spheres(scene)

    if use_bvh:
        scene.build_bvh(time_frame=SHUTTER, axis_strategy="longest")

    return scene, create_camera(image_height, aspect_ratio)

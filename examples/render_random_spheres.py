#!/usr/bin/env python3
"""Render one of the preset sphere scenes.

This script renders the random spheres showcase (or the smaller four
spheres scene) end to end: it initializes Taichi, builds the scene and its
camera, renders band by band with a progress line, and writes the image.

Usage:
    python -m examples.render_random_spheres [options]

Options:
    --image-height HEIGHT   Image height in pixels (default: 240)
    --aspect-ratio RATIO    Width divided by height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 128)
    --max-depth DEPTH       Bounce budget per ray (default: 16)
    --seed SEED             Seed for the scene and the render (default: 0)
    --scene {random,four}   Preset scene (default: random)
    --no-bvh                Trace the flat object list instead of a BVH
    --output OUTPUT         Output file, .ppm or .png (default: random_spheres.ppm)
    --arch ARCH             Taichi backend (default: cpu)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_random_spheres --image-height 120 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--image-height",
        type=int,
        default=240,
        help="Image height in pixels (default: 240)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=128,
        help="Samples per pixel (default: 128)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=16,
        help="Bounce budget per ray (default: 16)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the scene and the render (default: 0)",
    )
    parser.add_argument(
        "--scene",
        choices=("random", "four"),
        default="random",
        help="Preset scene (default: random)",
    )
    parser.add_argument(
        "--no-bvh",
        action="store_true",
        help="Trace the flat object list instead of a BVH",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="random_spheres.ppm",
        help="Output file, .ppm or .png (default: random_spheres.ppm)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu", "cuda", "vulkan", "metal"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_random_spheres(
    image_height: int = 240,
    aspect_ratio: float = 16.0 / 9.0,
    samples: int = 128,
    max_depth: int = 16,
    seed: int = 0,
    scene_name: str = "random",
    use_bvh: bool = True,
    output_path: str = "random_spheres.ppm",
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to file.

    Args:
        image_height: Image height in pixels.
        aspect_ratio: Width divided by height.
        samples: Samples per pixel.
        max_depth: Bounce budget per ray.
        seed: Seed for the scene layout and the render.
        scene_name: ``"random"`` or ``"four"``.
        use_bvh: Build a BVH over the scene.
        output_path: Output file path (.ppm or .png).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.config import RenderSettings
    from pathtracer.core.renderer import Renderer
    from pathtracer.scene.presets import create_four_spheres_scene, create_random_scene

    if scene_name == "four":
        scene, camera = create_four_spheres_scene(
            use_bvh=use_bvh, image_height=image_height, aspect_ratio=aspect_ratio
        )
    else:
        scene, camera = create_random_scene(
            seed=seed, use_bvh=use_bvh, image_height=image_height, aspect_ratio=aspect_ratio
        )

    width, height = camera.image_width, camera.image_height
    if not quiet:
        print(f"Created {scene_name} scene ({width}x{height}, {len(scene.world)} objects)")

    scene.commit()
    setup_camera(camera)

    settings = RenderSettings(samples_per_pixel=samples, max_depth=max_depth, seed=seed)
    renderer = Renderer(width, height)

    if not quiet:
        print(f"Rendering {samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (done / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {done}/{total} pixels ({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    renderer.render(settings, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from pathtracer.config import init_taichi

    try:
        init_taichi(args.arch)
        render_random_spheres(
            image_height=args.image_height,
            aspect_ratio=args.aspect_ratio,
            samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_name=args.scene,
            use_bvh=not args.no_bvh,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

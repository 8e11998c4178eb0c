#!/usr/bin/env python3
"""Render the random spheres scene.

This script renders the random spheres scene end to end: it builds the scene
and camera, renders several independent passes, merges them and writes the
result as PPM or PNG (chosen by the output file extension).

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH         Image width in pixels (default: 400)
    --samples SAMPLES     Samples per pixel in each pass (default: 8)
    --passes PASSES       Number of passes to merge (default: 8)
    --max-depth DEPTH     Maximum bounces per path (default: 50)
    --seed SEED           Seed for the scene layout and the renderer (default: 0)
    --arch ARCH           Taichi backend: cpu, gpu, cuda, vulkan (default: cpu)
    --config FILE         JSON file with render settings; flags override it
    --output OUTPUT       Output file path (default: out.ppm)
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m examples.render_spheres --width 200 --samples 4 --passes 2 --output spheres.png
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from pathtracer.config import RenderSettings, init_taichi


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, help="Image width in pixels (default: 400)")
    parser.add_argument(
        "--samples",
        type=int,
        help="Samples per pixel in each pass (default: 8)",
    )
    parser.add_argument("--passes", type=int, help="Number of passes to merge (default: 8)")
    parser.add_argument("--max-depth", type=int, help="Maximum bounces per path (default: 50)")
    parser.add_argument("--seed", type=int, help="Seed for scene and renderer (default: 0)")
    parser.add_argument("--arch", type=str, help="Taichi backend (default: cpu)")
    parser.add_argument("--config", type=str, help="JSON file with render settings")
    parser.add_argument(
        "--output",
        type=str,
        default="out.ppm",
        help="Output file path, .ppm or .png (default: out.ppm)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> RenderSettings:
    """Combine the optional JSON config file with command-line overrides.

    Raises:
        ValueError: If the resulting settings are invalid.
    """
    data = {}
    if args.config:
        data = json.loads(Path(args.config).read_text())

    overrides = {
        "width": args.width,
        "samples_per_pixel": args.samples,
        "passes": args.passes,
        "max_depth": args.max_depth,
        "seed": args.seed,
        "arch": args.arch,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    if args.width is not None:
        # An explicit width re-derives the height from the aspect ratio
        data.pop("height", None)
    return RenderSettings.from_dict(data)


def render_spheres(settings: RenderSettings, output_path: str = "out.ppm", quiet: bool = False) -> Path:
    """Render the random spheres scene and save to file.

    Args:
        settings: Validated render settings. Taichi must already be
            initialised.
        output_path: Output file path (.ppm or .png).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.progressive import SuperSampler
    from pathtracer.preview.export import save_image
    from pathtracer.scene.random_spheres import create_random_spheres_scene

    start_time = time.time()

    if not quiet:
        print(f"Creating random spheres scene ({settings.width}x{settings.height})...")

    scene, camera = create_random_spheres_scene(
        seed=settings.seed, aspect_ratio=settings.aspect_ratio
    )
    sampler = SuperSampler(
        camera,
        scene,
        settings.width,
        settings.height,
        samples_per_pixel=settings.samples_per_pixel,
        max_depth=settings.max_depth,
    )

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(f"  Finished pass {done} of {total} ({elapsed:.1f}s)")

    sampler.render(settings.passes, callback=progress_callback)

    output_file = Path(output_path)
    save_image(sampler.image, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    init_taichi(arch=settings.arch, seed=settings.seed)
    if not args.quiet:
        print(f"Using {settings.arch} backend")

    try:
        render_spheres(settings, output_path=args.output, quiet=args.quiet)
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

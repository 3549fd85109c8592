#!/usr/bin/env python3
"""Render the random sphere field.

The image is split into horizontal bands rendered in parallel worker
processes, then saved as an RGBA PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 200)
    --workers WORKERS   Number of bands/processes (default: CPU count)
    --samples SAMPLES   Samples per pixel (default: 32)
    --max-depth DEPTH   Bounce depth cutoff (default: 32)
    --seed SEED         Seed for the scene layout (default: random)
    --output OUTPUT     Output file path (default: spheres.png)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --height 100 --workers 4
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

from bandtracer.config import DEFAULT_MAX_DEPTH, DEFAULT_SAMPLES, RenderSettings
from bandtracer.core.orchestrator import render
from bandtracer.preview.export import save_png
from bandtracer.scene.builder import make_random_sequence


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random sphere field.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=200,
        help="Image height in pixels (default: 200)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of bands/processes (default: CPU count)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Bounce depth cutoff (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the scene layout (default: random)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    width: int = 400,
    height: int = 200,
    workers: int | None = None,
    samples: int = DEFAULT_SAMPLES,
    max_depth: int = DEFAULT_MAX_DEPTH,
    seed: int | None = None,
    output_path: str = "spheres.png",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the sphere field and save it to a file.

    Returns:
        Path to the saved image file.
    """
    settings = RenderSettings(samples=samples, max_depth=max_depth)
    sequence = make_random_sequence(settings.sequence_length, np.random.default_rng(seed))

    if not quiet:
        print(f"Rendering {width}x{height} at {samples} spp...")

    start_time = time.time()
    buffer = render(width, height, workers, settings=settings, random_sequence=sequence)

    output_file = Path(output_path)
    save_png(buffer, width, height, str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    if preview:
        from bandtracer.preview.display import show_buffer

        show_buffer(buffer, width, height)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            workers=args.workers,
            samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Render the built-in demo scene.

This script builds the demo scene in code (no JSON file needed), renders it
and writes a PNG. To render a scene file instead, use the raylight command.

Usage:
    python examples/render_demo_scene.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 480)
    --depth DEPTH       Maximum reflection depth (default: 3)
    --output OUTPUT     Output file path (default: demo_scene.png)
    --quiet             Suppress progress output

Example:
    python examples/render_demo_scene.py --width 320 --height 240 --depth 5
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

from raylight.core.renderer import RenderConfig, Renderer
from raylight.preview.export import save_png
from raylight.scene.demo import create_demo_scene


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the built-in demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Image height in pixels (default: 480)")
    parser.add_argument("--depth", type=int, default=3, help="Maximum reflection depth (default: 3)")
    parser.add_argument(
        "--output",
        type=str,
        default="demo_scene.png",
        help="Output file path (default: demo_scene.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_demo_scene(
    width: int = 640,
    height: int = 480,
    max_depth: int = 3,
    output_path: str = "demo_scene.png",
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Returns:
        Path to the saved image file.
    """
    if not quiet:
        print(f"Creating demo scene ({width}x{height})...")

    scene = create_demo_scene(width, height)
    start_time = time.time()
    with Renderer(scene, RenderConfig(max_depth=max_depth)) as renderer:
        buffer = renderer.render()

    output_file = Path(output_path)
    save_png(buffer, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
    except Exception:
        ti.init(arch=ti.cpu)

    try:
        render_demo_scene(
            width=args.width,
            height=args.height,
            max_depth=args.depth,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

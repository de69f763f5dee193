"""Command-line entry point: render a JSON scene to an image file.

Usage:
    raylight [options]
    python -m raylight.cli [options]

Options:
    --scene, -s SCENE       JSON scene file (default: scene.json)
    --output, -o OUTPUT     Output image path (default: output.png)
    --pass, -p PASSES       Maximum reflection depth (default: 3)
    --falloff LAW           Point light falloff: none or inverse-square
                            (default: none)
    --epsilon EPS           Self-intersection offset (default: 1e-4)
    --arch ARCH             Taichi backend: cpu or gpu (default: cpu)
    --gamma GAMMA           Gamma applied when writing the image (default: 1.0)
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    raylight --scene examples/scene.json --output render.png --pass 5
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from raylight.core.renderer import RenderConfig, Renderer
from raylight.lighting.lights import Falloff
from raylight.preview.export import save_png
from raylight.scene.loader import load_scene

FALLOFF_CHOICES = {
    "none": "NONE",
    "inverse-square": "INVERSE_SQUARE",
}

ARCH_CHOICES = ("cpu", "gpu")


def _non_negative_int(value: str) -> int:
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if result < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {result}")
    return result


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="raylight",
        description="Render a JSON scene with a Whitted-style ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        "-s",
        type=str,
        default="scene.json",
        help="JSON scene file (default: scene.json)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="output.png",
        help="Output image path (default: output.png)",
    )
    parser.add_argument(
        "--pass",
        "-p",
        dest="passes",
        type=_non_negative_int,
        default=3,
        help="Maximum reflection depth (default: 3)",
    )
    parser.add_argument(
        "--falloff",
        choices=sorted(FALLOFF_CHOICES),
        default="none",
        help="Point light falloff law (default: none)",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=1e-4,
        help="Self-intersection offset for secondary rays (default: 1e-4)",
    )
    parser.add_argument(
        "--arch",
        choices=ARCH_CHOICES,
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma correction applied on export (default: 1.0)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def _init_taichi(arch: str) -> None:
    """Initialize the Taichi runtime on the requested backend."""
    ti.init(arch=ti.gpu if arch == "gpu" else ti.cpu)


def render_scene_file(
    scene_path: str,
    output_path: str,
    max_depth: int = 3,
    falloff: str = "none",
    epsilon: float = 1e-4,
    gamma: float = 1.0,
    quiet: bool = False,
) -> Path:
    """Load a scene file, render it and save the image.

    Args:
        scene_path: JSON scene file.
        output_path: Output image path.
        max_depth: Maximum reflection depth.
        falloff: Point light falloff name ("none" or "inverse-square").
        epsilon: Self-intersection offset.
        gamma: Gamma correction applied on export.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    if not quiet:
        print(f"Loading scene from {scene_path}...")
    scene = load_scene(scene_path)

    config = RenderConfig(
        max_depth=max_depth,
        epsilon=epsilon,
        falloff=Falloff[FALLOFF_CHOICES[falloff]],
    )

    if not quiet:
        print(
            f"Rendering {scene.width}x{scene.height} "
            f"({len(scene.objects)} objects, {len(scene.lights)} lights, "
            f"max depth {max_depth})..."
        )

    start_time = time.time()
    with Renderer(scene, config) as renderer:
        buffer = renderer.render()
        rays_traced = renderer.rays_traced

    output_file = Path(output_path)
    save_png(buffer, output_file, gamma=gamma)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s ({rays_traced} rays)")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        _init_taichi(args.arch)
        if not args.quiet:
            print(f"Using {args.arch.upper()} backend")

        render_scene_file(
            scene_path=args.scene,
            output_path=args.output,
            max_depth=args.passes,
            falloff=args.falloff,
            epsilon=args.epsilon,
            gamma=args.gamma,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

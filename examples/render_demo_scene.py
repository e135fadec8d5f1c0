#!/usr/bin/env python3
"""Render the demo scene.

This script renders the phongtrace demo scene (textured floor, gold,
mirror and plastic spheres, a positional light, a spot light and a
camera headlight) and saves it as a PNG.

Usage:
    python -m examples.render_demo_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 480)
    --anti-aliasing N       Supersampling grid side per pixel (default: 2)
    --depth DEPTH           Reflection bounces per camera ray (default: 2)
    --shadows               Enable shadow rays
    --no-headlight          Switch off the camera-tied light
    --output OUTPUT         Output file path (default: demo_scene.png)
    --preview               Show a Matplotlib preview after rendering
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output

Example:
    python -m examples.render_demo_scene --width 320 --height 240 --anti-aliasing 3 --shadows
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the phongtrace demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Image height in pixels (default: 480)",
    )
    parser.add_argument(
        "--anti-aliasing",
        type=int,
        default=2,
        help="Supersampling grid side per pixel (default: 2)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=2,
        help="Reflection bounces per camera ray (default: 2)",
    )
    parser.add_argument(
        "--shadows",
        action="store_true",
        help="Enable shadow rays",
    )
    parser.add_argument(
        "--no-headlight",
        action="store_true",
        help="Switch off the camera-tied light",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="demo_scene.png",
        help="Output file path (default: demo_scene.png)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show a Matplotlib preview after rendering",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_demo_scene(
    width: int = 640,
    height: int = 480,
    anti_aliasing: int = 2,
    max_depth: int = 2,
    shadows: bool = False,
    headlight: bool = True,
    output_path: str = "demo_scene.png",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        anti_aliasing: Supersampling grid side per pixel.
        max_depth: Reflection bounces per camera ray.
        shadows: Whether to trace shadow rays.
        headlight: Whether the camera-tied light is on.
        output_path: Output file path (PNG).
        preview: If True, open a Matplotlib window when done.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from phongtrace.core.framebuffer import FrameBuffer
    from phongtrace.core.raytracer import RayTracer
    from phongtrace.preview.display import show_preview
    from phongtrace.preview.export import png_presenter
    from phongtrace.scene.demo import DemoSceneParams, create_demo_scene

    output_file = Path(output_path)

    if not quiet:
        print(f"Creating demo scene ({width}x{height})...")

    scene = create_demo_scene(DemoSceneParams(headlight_on=headlight))

    if not quiet:
        print(
            f"  {scene.get_sphere_count()} spheres, {scene.get_quad_count()} quads, "
            f"{scene.get_light_count()} lights"
        )
        print(scene.describe_lights())

    frame_buffer = FrameBuffer(width, height, presenter=png_presenter(output_file))
    tracer = RayTracer(
        default_color=(0.05, 0.05, 0.1),
        anti_aliasing=anti_aliasing,
        shadows=shadows,
    )

    if not quiet:
        print(
            f"Rendering with {anti_aliasing}x{anti_aliasing} supersampling, "
            f"depth {max_depth}, shadows {'ON' if shadows else 'OFF'}..."
        )

    start_time = time.time()
    tracer.raytrace_scene(frame_buffer, max_depth, scene)
    ti.sync()
    total_time = time.time() - start_time

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        show_preview(frame_buffer)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_demo_scene(
            width=args.width,
            height=args.height,
            anti_aliasing=args.anti_aliasing,
            max_depth=args.depth,
            shadows=args.shadows,
            headlight=not args.no_headlight,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

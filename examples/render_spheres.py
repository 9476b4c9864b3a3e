#!/usr/bin/env python3
"""Render the four-sphere demo scene (or a JSON scene file).

This script demonstrates end-to-end rendering with the Whitted tracer. It
loads or builds the scene, sets up the camera, renders one ray per pixel and
writes the frame as a PPM or PNG image.

Usage:
    python -m examples.render_spheres [options]

Options:
    --scene FILE        JSON scene file (default: built-in demo scene)
    --width WIDTH       Image width in pixels (default: 1024, or the file's)
    --height HEIGHT     Image height in pixels (default: 768, or the file's)
    --fov FOV           Vertical field of view in radians (default: pi/3)
    --max-depth DEPTH   Maximum reflection/refraction depth (default: 4)
    --output OUTPUT     Output file path, .ppm or .png (default: out.ppm)
    --arch {cpu,gpu}    Taichi backend (default: try GPU, fall back to CPU)
    --show              Open a Matplotlib preview after rendering
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 640 --height 480 --output demo.png
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render spheres with a Whitted-style ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: 1024)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: 768)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=None,
        help="Vertical field of view in radians (default: pi/3)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum reflection/refraction depth (default: 4)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out.ppm",
        help="Output file path, .ppm or .png (default: out.ppm)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default=None,
        help="Taichi backend (default: GPU if available, else CPU)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show a Matplotlib preview after rendering",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def init_taichi(arch: str | None, quiet: bool = False) -> None:
    """Initialize Taichi on the requested backend."""
    if arch == "cpu":
        ti.init(arch=ti.cpu)
        backend = "CPU"
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
            backend = "GPU"
        except Exception:
            if arch == "gpu":
                raise
            ti.init(arch=ti.cpu)
            backend = "CPU"
    if not quiet:
        print(f"Using {backend} backend")


def render_spheres(
    scene_path: str | None = None,
    width: int | None = None,
    height: int | None = None,
    fov: float | None = None,
    max_depth: int | None = None,
    output_path: str = "out.ppm",
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Camera and render settings come from the scene file when one is given;
    explicit arguments override them.

    Args:
        scene_path: JSON scene file, or None for the demo scene.
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Vertical field of view in radians.
        max_depth: Maximum recursion depth.
        output_path: Output file path (.ppm or .png).
        show: If True, open a Matplotlib preview of the frame.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.renderer import FrameRenderer
    from src.whitted.preview.export import save_image
    from src.whitted.scene.demo import create_demo_scene
    from src.whitted.scene.loader import SceneFile, load_scene_file

    if scene_path is not None:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        scene_file = load_scene_file(scene_path)
    else:
        if not quiet:
            print("Creating demo scene...")
        scene_file = SceneFile(scene=create_demo_scene())

    camera_overrides = {
        key: value
        for key, value in (("width", width), ("height", height), ("fov", fov))
        if value is not None
    }
    camera = dataclasses.replace(scene_file.camera, **camera_overrides)
    settings = scene_file.settings
    if max_depth is not None:
        settings = dataclasses.replace(settings, max_depth=max_depth)

    renderer = FrameRenderer(scene_file.scene, settings)

    if not quiet:
        print(
            f"Rendering {camera.width}x{camera.height} "
            f"({len(scene_file.scene.spheres)} spheres, "
            f"{len(scene_file.scene.lights)} lights, max depth {settings.max_depth})..."
        )

    start_time = time.time()
    framebuffer = renderer.render_camera(camera)

    output_file = Path(output_path)
    save_image(framebuffer, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from src.whitted.preview.display import show_preview

        show_preview(framebuffer, title=output_file.name)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    init_taichi(args.arch, quiet=args.quiet)

    try:
        render_spheres(
            scene_path=args.scene,
            width=args.width,
            height=args.height,
            fov=args.fov,
            max_depth=args.max_depth,
            output_path=args.output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

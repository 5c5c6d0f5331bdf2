#!/usr/bin/env python3
"""
PathForge - A Python Monte Carlo Path Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

from pathforge.image_io import is_supported_format
from pathforge.renderer import Renderer, RenderSettings
from pathforge.scenes import build_scene, SCENE_NAMES
from pathforge.scene_parser import load_scene, SceneParseError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='PathForge - A Python Monte Carlo Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene random --output render.ppm
  python main.py --width 1920 --height 1080 --samples 30 --output hd_render.bmp
  python main.py --scene-file scene.yaml --seed 7 --output scene.png
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=225, help='Image height (default: 225)')
    parser.add_argument('--samples', type=int, default=30, help='Samples per pixel (default: 30)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed (default: unseeded)')
    parser.add_argument('--output', type=str, default='out.ppm',
                        help='Output filename; .ppm, .bmp or any Pillow format (default: out.ppm)')
    parser.add_argument('--scene', type=str, default='random', choices=SCENE_NAMES,
                        help='Built-in scene to render (default: random)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML or JSON scene file; overrides --scene and the render flags')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable info logging')
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    print("=" * 60)
    print("PathForge Path Tracer")
    print("=" * 60)

    output_path = Path(args.output)
    if not is_supported_format(output_path):
        print(f"Error: unsupported output format: {output_path}", file=sys.stderr)
        return 1

    try:
        if args.scene_file:
            print(f"\nLoading scene file: {args.scene_file}")
            world, camera, settings = load_scene(args.scene_file)
        else:
            settings = RenderSettings(
                width=args.width,
                height=args.height,
                samples_per_pixel=args.samples,
                max_depth=args.depth,
                num_threads=args.threads,
                seed=args.seed
            )
            print(f"\nCreating scene: {args.scene}")
            scene_rng = np.random.default_rng(args.seed)
            world, camera = build_scene(args.scene, scene_rng, settings.width / settings.height)
    except (SceneParseError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"  Objects in scene: {len(world)}")
    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Seed: {settings.seed if settings.seed is not None else 'random'}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rPath tracing: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    start_time = time.time()

    image = renderer.render(world, camera)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    if elapsed > 0:
        print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    print(f"\nSaving to: {output_path}")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        renderer.save_image(image, output_path)
    except OSError as e:
        print(f"Error: cannot write {output_path}: {e}", file=sys.stderr)
        return 1

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())

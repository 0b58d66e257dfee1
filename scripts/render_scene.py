#!/usr/bin/env python3
"""Render a scene.v1 YAML file to a PNG.

CLI tool that validates a scene, rasterizes it on the CPU and writes the
result atomically. Relative image and font paths in the scene resolve
against the scene file's directory.

Usage:
    python scripts/render_scene.py configs/scenes/demo.v1.yaml outputs/demo.png

    # Debug logging with per-shape timings, JSON log file
    python scripts/render_scene.py configs/scenes/demo.v1.yaml outputs/demo.png \
        --log-level DEBUG --log-file outputs/render.log --json-logs

    # Per-shape timing report
    python scripts/render_scene.py configs/scenes/demo.v1.yaml outputs/demo.png \
        --timings outputs/demo.timings.yaml

Exit codes:
    0: success
    1: scene missing or invalid
    2: rendering or writing failed
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rasterkit.scene import render_scene
from rasterkit.utils import fs, logging_config, validators
from rasterkit.utils.profiler import TimingCollector, timer


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene.v1 YAML file to PNG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument('scene', type=str, help='Path to scene.v1 YAML file')
    parser.add_argument('output', type=str, help='Output image path (format from extension)')

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )
    parser.add_argument('--log-file', type=str, default=None, help='Also log to this file')
    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Write the log file as JSON lines'
    )
    parser.add_argument(
        '--timings',
        type=str,
        default=None,
        help='Write per-shape timings to this YAML file'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging_config.setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        json=args.json_logs,
        context={'app': 'render_scene'}
    )
    logging_config.install_excepthook()
    try:
        return _run(args)
    finally:
        logging_config.shutdown()


def _run(args) -> int:
    logger = logging.getLogger(__name__)

    scene_path = Path(args.scene)
    try:
        scene = validators.load_scene_config(scene_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid scene: {e}")
        return 1

    timings = TimingCollector()
    try:
        with timer("render_scene", sink=timings):
            surface = render_scene(scene, base_dir=scene_path.parent, timings=timings)
        fs.atomic_save_surface(surface, args.output)
    except (OSError, RuntimeError, ValueError) as e:
        logger.error(f"Rendering failed: {e}")
        return 2

    summary = timings.summary()
    total = summary["render_scene"]["total_s"]
    logger.info(f"Wrote {args.output} ({surface.width}x{surface.height}) in {total:.3f}s")
    for name, stats in summary.items():
        logger.debug(f"  {name}: {stats['total_s'] * 1000:.2f} ms")

    if args.timings:
        report = {
            'scene': str(scene_path),
            'output': str(args.output),
            'size': [surface.width, surface.height],
            'timings': summary,
        }
        try:
            fs.atomic_yaml_dump(report, args.timings)
        except RuntimeError as e:
            logger.error(f"Failed to write timings: {e}")
            return 2
        logger.info(f"Timings written to {args.timings}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

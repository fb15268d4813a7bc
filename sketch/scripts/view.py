#!/usr/bin/env python3
"""
View Sketch Script.

Play a sketch file in a window, render it headless to PNG, or inspect
its command stream.

Usage:
    python -m sketch.scripts.view cat.sk
    python -m sketch.scripts.view cat.sk --snapshot cat.png
    python -m sketch.scripts.view anim.sk --snapshot anim.png --frames 5
    python -m sketch.scripts.view cat.sk --dump
    python -m sketch.scripts.view cat.sk --trace

The interactive window stops on the configured quit key (escape).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sketch.commands.model import disassemble
from sketch.configs.loader import ConfigError, load_config
from sketch.player.executor import SketchPlayer
from sketch.player.surface import RecordingSurface
from sketch.player.viewer import SketchViewer, render_sketch
from sketch.utils import fs
from sketch.utils.logging_config import install_excepthook, push_context, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="View a sketch (.sk) file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("sketch", help="Sketch file to play")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--snapshot",
        type=str,
        metavar="PNG",
        help="Render headless and save the canvas to PNG",
    )
    mode.add_argument(
        "--dump",
        action="store_true",
        help="Print the disassembled command stream",
    )
    mode.add_argument(
        "--trace",
        action="store_true",
        help="Print the surface calls of one frame",
    )

    parser.add_argument(
        "--frames",
        type=int,
        default=1,
        help="Frames to play for --snapshot (default: 1)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(
        args.log_level or config.logging.level,
        config.logging.file,
        json=config.logging.json,
        context={"app": "view"},
    )
    install_excepthook()

    path = Path(args.sketch)
    push_context(file=path.name)
    if not path.exists():
        logger.error("Unable to open file %s", path)
        return 1

    if args.dump:
        for cmd in disassemble(path.read_bytes()):
            print(f"{cmd.offset:6d}  {cmd.byte:02x}  {cmd.describe()}")
        return 0

    if args.trace:
        surface = RecordingSurface()
        result = SketchPlayer(path, surface).step()
        for call in surface.calls:
            print(" ".join(str(part) for part in call))
        print(
            f"# {result.commands} commands, next offset {result.resume_offset}"
            f"{' (end of stream)' if result.end_of_stream else ''}"
        )
        return 0

    if args.snapshot:
        try:
            canvas = render_sketch(path, config, frames=args.frames)
            fs.atomic_save_image(canvas, args.snapshot)
        except (ValueError, RuntimeError) as e:
            logger.error("%s", e)
            return 1
        print(f"File {args.snapshot} has been written.")
        return 0

    try:
        SketchViewer(path, config).run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Convert Image Script.

Encode a grey-scale image (PGM or any Pillow-readable format) as a sketch
command stream.  With no image argument, run the converter's built-in
consistency checks instead.

Usage:
    python -m sketch.scripts.convert cat.pgm
    python -m sketch.scripts.convert cat.pgm -o out/cat.sk
    python -m sketch.scripts.convert cat.pgm --legacy-neighbour-test
    python -m sketch.scripts.convert            # self-check
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sketch.commands.model import SketchRangeError
from sketch.configs.loader import ConfigError, load_config
from sketch.encoder.converter import EncoderOptions, SketchEncoder, self_check
from sketch.imaging.greyscale import SketchImageError, load_grey_grid
from sketch.utils.logging_config import install_excepthook, push_context, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a grey-scale image to a sketch (.sk) file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "image",
        nargs="?",
        help="Input image; omit to run the self-check",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output path (default: input path with the configured suffix)",
    )
    parser.add_argument(
        "--legacy-neighbour-test",
        action="store_true",
        help="Use the first converter's inequality test for the left neighbour",
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
        quiet_libs=["PIL"],
        context={"app": "convert"},
    )
    install_excepthook()

    if args.image is None:
        failures = self_check()
        for msg in failures:
            print(msg)
        if failures:
            print(f"{len(failures)} check(s) failed.")
            return 1
        print("All tests pass.")
        return 0

    image_path = Path(args.image)
    output = (
        Path(args.output)
        if args.output
        else image_path.with_suffix(config.encoder.output_suffix)
    )
    push_context(file=image_path.name)

    options = EncoderOptions(
        legacy_neighbour_test=(
            args.legacy_neighbour_test or config.encoder.legacy_neighbour_test
        ),
    )
    encoder = SketchEncoder(options)

    try:
        grid = load_grey_grid(image_path)
        written = encoder.encode_to_file(grid, output)
    except FileNotFoundError as e:
        logger.error("Unable to open file: %s", e)
        return 1
    except (SketchImageError, SketchRangeError) as e:
        logger.error("%s", e)
        return 1
    except RuntimeError as e:
        logger.error("Write failed: %s", e)
        return 1

    print(f"File {written} has been written.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

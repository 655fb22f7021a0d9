#!/usr/bin/env python3
"""
make_tile.py
Turn an image into a 16x16 pixel-art tile with a bounded palette.

Usage:
  python make_tile.py INPUT [OUTPUT] --colors K --preview --crop --background #rrggbb --debug

Colour counts:
  2         : luminance split into a dark and a light anchor.
  4 .. 32   : frequency buckets; up to 16 colours always keep black and white.
  64, 128   : frequency buckets on a fixed 16-step grid.
  256       : adaptive extraction with Floyd-Steinberg dithering.

Input:
  Any Pillow-readable image, or a folder of them. Alpha is preserved.

Output:
  PNG. If OUTPUT is omitted, writes <stem>_tile.png next to INPUT.
  --preview also writes <stem>_preview.png magnified 16x.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

import numpy as np

from pixel_tile.constants import COLOUR_COUNTS, DEFAULT_COLOUR_COUNT, PREVIEW_SCALE
from pixel_tile.core_types import hex_to_rgb
from pixel_tile.engine import PixelArtEngine
from pixel_tile.errors import PixelTileError
from pixel_tile.image_io import apply_background, crop_square, load_raster, save_grid_png
from pixel_tile.utils import (
    colour_usage_report,
    debug_log,
    error,
    format_seconds_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
)

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}
OUTPUT_SUFFIXES = ("_tile", "_preview")

# CLI args


def parse_cli_args(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        output: optional output Path (single file) or folder
        colors: colour count K
        preview: bool, also write a magnified preview
        crop: bool, centre-crop to a square first
        background: optional '#rrggbb' to flatten transparency onto
        debug: bool for verbose details
    """
    parser = argparse.ArgumentParser(
        prog="make_tile",
        description="Convert image(s) into 16x16 pixel-art tiles.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "output", type=Path, nargs="?", default=None, help="Output path (optional)"
    )
    parser.add_argument(
        "--colors",
        type=int,
        choices=COLOUR_COUNTS,
        default=DEFAULT_COLOUR_COUNT,
        help="Palette size.",
    )
    parser.add_argument(
        "--preview", action="store_true", help=f"Also write a {PREVIEW_SCALE}x preview"
    )
    parser.add_argument(
        "--crop", action="store_true", help="Centre-crop to a square before pixelating"
    )
    parser.add_argument(
        "--background",
        type=str,
        default=None,
        help="Flatten transparency onto this colour, e.g. '#ffffff'",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def _output_path(src: Path, output: Optional[Path]) -> Path:
    if output is None:
        return src.with_name(f"{src.stem}_tile.png")
    if output.is_dir():
        return output / f"{src.stem}_tile.png"
    return output


# Per-file processing


def process_image(
    engine: PixelArtEngine,
    src_path: Path,
    out_path: Optional[Path],
    *,
    preview: bool,
    crop: bool,
    background: Optional[str],
) -> Path:
    """
    Process a single image end-to-end:
      load -> optional crop / background -> pixelate -> save -> report.
    """
    t_start = time.perf_counter()
    out_path = _output_path(src_path, out_path)
    print_banner(src_path.name)

    raster = load_raster(src_path)
    if engine.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{raster.width}x{raster.height}"),
                    ("Alpha=255", int(np.count_nonzero(raster.alpha == 255))),
                    ("Alpha=0", int(np.count_nonzero(raster.alpha == 0))),
                ]
            )
        )
    if crop:
        raster = crop_square(raster)
    if background is not None:
        raster = apply_background(raster, hex_to_rgb(background))
    t_prep = time.perf_counter()

    result = engine.pixelate(raster)
    t_map = time.perf_counter()

    written = save_grid_png(out_path, result.grid)
    log(
        f"Wrote {written.name} | colours={engine.colour_count} | palette_size={len(result.palette)}"
    )
    if preview:
        preview_path = written.with_name(f"{src_path.stem}_preview.png")
        save_grid_png(preview_path, result.grid, scale=PREVIEW_SCALE)
        log(f"Wrote {preview_path.name} | scale={PREVIEW_SCALE}x")
    t_save = time.perf_counter()

    log("Colours used:")
    for hex_code, count in colour_usage_report(result.grid):
        log(f"  {hex_code}: {count}")

    if engine.debug:
        debug_log(
            f"Total {format_seconds_compact(t_save - t_start)}  "
            f"(prep={format_seconds_compact(t_prep - t_start)}, "
            f"pixelate={format_seconds_compact(t_map - t_prep)}, "
            f"save={format_seconds_compact(t_save - t_map)})"
        )
    else:
        log(f"Total time {format_seconds_compact(t_save - t_start)}")
    return written


def _collect_images(folder: Path) -> list:
    files = [
        p
        for p in folder.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not p.stem.endswith(OUTPUT_SUFFIXES)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Entry point


def main(argv: Optional[list] = None) -> int:
    """CLI entry point. Returns a process exit code."""
    args = parse_cli_args(argv)

    print_config_line(
        "run",
        [
            ("Colours", args.colors),
            ("Preview", args.preview),
            ("Crop", args.crop),
            ("Background", args.background or "-"),
        ],
        debug=False,
    )

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2
    if args.background is not None:
        try:
            hex_to_rgb(args.background)
        except ValueError as e:
            error(str(e))
            return 2

    engine = PixelArtEngine(colour_count=args.colors, debug=args.debug)
    files = _collect_images(src) if src.is_dir() else [src]
    if args.debug and src.is_dir():
        debug_log(key_value_pairs_to_string([("Images", len(files))]))

    failures = 0
    for path in files:
        try:
            process_image(
                engine,
                path,
                args.output,
                preview=args.preview,
                crop=args.crop,
                background=args.background,
            )
        except PixelTileError as e:
            error(f"{path.name}: {e}")
            failures += 1
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())

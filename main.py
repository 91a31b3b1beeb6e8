#!/usr/bin/env python3
"""
Render a preview of the nine-palace grid overlay to a PNG.

Uses the fixed-step preview grid as the cell capability, so the output shows
the overlay geometry (visible cells, rotation, highlights, accuracy circle)
for any position, heading and viewport.
"""

import argparse
import logging
import sys
from typing import List, Optional

from PIL import Image
from pydantic import BaseModel, Field, ValidationError

from grid_renderer import GridRenderer, RenderConfig, Frame
from location import LocationFix
from projector import Insets, Viewport
from raster import RasterRenderer
from rich_console import (
    setup_rich_logging,
    print_banner,
    print_config_summary,
    print_frame_summary,
    print_error,
)
from uniform_grid import UniformGrid, DEFAULT_CELL_DEGREES

logger = logging.getLogger(__name__)

__version__ = "1.0.0"


class PreviewConfig(BaseModel):
    fix: LocationFix
    viewport: Viewport
    render: RenderConfig = Field(default_factory=RenderConfig)
    cell_degrees: float = Field(default=DEFAULT_CELL_DEGREES, gt=0, le=90)
    output_file: Optional[str] = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a nine-palace grid overlay preview.")
    parser.add_argument("latitude", type=float, help="Latitude in degrees")
    parser.add_argument("longitude", type=float, help="Longitude in degrees")
    parser.add_argument("--heading", type=float, default=0.0, help="Device heading in degrees (0 = north)")
    parser.add_argument("--accuracy", type=float, default=5.0, help="Horizontal accuracy in meters")
    parser.add_argument("--width", type=int, default=390, help="Viewport width in pixels")
    parser.add_argument("--height", type=int, default=844, help="Viewport height in pixels")
    parser.add_argument("--inset-top", type=float, default=0.0, help="Top content inset in pixels")
    parser.add_argument("--inset-bottom", type=float, default=0.0, help="Bottom content inset in pixels")
    parser.add_argument("--cell-deg", type=float, default=DEFAULT_CELL_DEGREES,
                        help="Preview grid cell size in degrees")
    parser.add_argument("--lng-buffer", choices=["flat", "cosine"], default="flat",
                        help="Longitude buffer for the visible region")
    parser.add_argument("--debug", action="store_true", help="Show k level in cell watermarks")
    parser.add_argument("--strict", action="store_true", help="Fail on adjacency invariant violations")
    parser.add_argument("-o", "--output", default=None, help="Write the rendered frame to this PNG")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> PreviewConfig:
    args = build_parser().parse_args(argv)
    setup_rich_logging(verbose=args.verbose)

    try:
        return PreviewConfig(
            fix=LocationFix(
                latitude=args.latitude,
                longitude=args.longitude,
                horizontal_accuracy=args.accuracy,
                heading=args.heading,
            ),
            viewport=Viewport(
                width=args.width,
                height=args.height,
                insets=Insets(top=args.inset_top, bottom=args.inset_bottom),
            ),
            render=RenderConfig(
                show_debug_info=args.debug,
                lng_buffer=args.lng_buffer,
                strict=args.strict,
            ),
            cell_degrees=args.cell_deg,
            output_file=args.output,
        )
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        sys.exit(1)


def render_preview(config: PreviewConfig) -> Frame:
    """Render one frame (and optionally a PNG) for a preview configuration."""
    grid = UniformGrid(lat_step=config.cell_degrees)
    frame = GridRenderer(grid, config.render).render(config.fix, config.viewport)

    if config.output_file and not frame.skipped:
        raster = RasterRenderer(int(config.viewport.width), int(config.viewport.height))
        image = raster.render(frame)
        Image.fromarray(image).save(config.output_file)
        logger.info(f"Wrote {config.output_file}")

    return frame


def main(argv: Optional[List[str]] = None) -> int:
    config = parse_args(argv)
    print_banner(__version__)
    print_config_summary(
        latitude=config.fix.latitude,
        longitude=config.fix.longitude,
        heading=config.fix.heading,
        accuracy=config.fix.horizontal_accuracy,
        width=int(config.viewport.width),
        height=int(config.viewport.height),
        output_file=config.output_file,
        cell_degrees=config.cell_degrees,
        lng_buffer=config.render.lng_buffer,
        show_debug_info=config.render.show_debug_info,
    )

    try:
        frame = render_preview(config)
    except (ValueError, OSError) as e:
        print_error(str(e), hint="Check the output path and grid cell size")
        return 1

    print_frame_summary(frame, config.output_file if not frame.skipped else None)
    return 0 if not frame.skipped else 2


if __name__ == "__main__":
    sys.exit(main())

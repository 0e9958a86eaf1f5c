import os
import sys
import logging
import argparse
from typing import List, Optional

from dotenv import load_dotenv

from ..models.errors import MirageError
from ..models.mirage_settings import MirageSettings
from ..pipeline.mirage_builder import build_mirage_file

# Load environment variables first
load_dotenv()

logger = logging.getLogger(__name__)


def initialize_argparser() -> argparse.ArgumentParser:
    """Initialize the argument parser for the script."""
    parser = argparse.ArgumentParser(
        prog="mirage-tank",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.description = (
        "Build a 'mirage tank' PNG: SOURCE_LIGHT shows on a white background, "
        "SOURCE_DARK shows on a black background."
    )

    parser.add_argument("source_light", help="Image revealed on white.")
    parser.add_argument("source_dark", help="Image revealed on black.")
    parser.add_argument("output", help="Output PNG path.")

    parser.add_argument(
        "-s",
        "--scale",
        help="Size factor applied to SOURCE_LIGHT's dimensions (env MIRAGE_SCALE).",
        default=None,
        type=float,
    )
    parser.add_argument(
        "--light-ratio",
        help="Lightness bias for SOURCE_LIGHT in [-1, 1] (env MIRAGE_LIGHT_RATIO).",
        default=None,
        type=float,
    )
    parser.add_argument(
        "--dark-ratio",
        help="Lightness bias for SOURCE_DARK in [-1, 1] (env MIRAGE_DARK_RATIO).",
        default=None,
        type=float,
    )
    parser.add_argument(
        "--preview",
        help="Also write <output>_on_white.png and <output>_on_black.png.",
        action="store_true",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level.",
        default=os.getenv("MIRAGE_LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = initialize_argparser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        settings = MirageSettings.from_env(
            scale=args.scale,
            light_ratio=args.light_ratio,
            dark_ratio=args.dark_ratio,
        )
        build_mirage_file(
            args.source_light,
            args.source_dark,
            args.output,
            settings=settings,
            preview=args.preview,
        )
    except MirageError as err:
        logger.error(f"{type(err).__name__}: {err}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
cli.py

Command-line front end for cssminify.

Usage
-----
    # minify to stdout
    cssminify path/to/app.css

    # minify into a file, with statistics
    cssminify path/to/app.css -o path/to/app.min.css --stats

    # read from stdin
    cat app.css | cssminify -
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cssminify.compressor import DEFAULT_LINE_LENGTH, read_source
from cssminify.enhanced import Configuration, EnhancedCompressor
from cssminify.errors import CssMinifyError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cssminify", description="Minify a CSS stylesheet")
    parser.add_argument("input", nargs="?", default="-",
                        help="CSS file to minify ('-' or omitted reads stdin)")
    parser.add_argument("--output", "-o", type=Path, default=None,
                        help="Write the result here instead of stdout")
    parser.add_argument("--line-break", "-l", type=int, default=DEFAULT_LINE_LENGTH,
                        help="Break lines after a '}' past this column (0 disables, default: %(default)s)")
    parser.add_argument("--merge-selectors", action="store_true",
                        help="Merge rules that repeat a selector")
    parser.add_argument("--optimize-shorthand", action="store_true",
                        help="Shorten shorthands, gaps, alignment pairs and zero transforms")
    parser.add_argument("--advanced-colors", action="store_true",
                        help="Convert hsl() colors to hex or color names")
    parser.add_argument("--strip-ie-hacks", action="store_true",
                        help="Drop star/underscore hacks and IE hack comments")
    parser.add_argument("--aggressive", action="store_true",
                        help="Enable every optional optimization")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on malformed CSS instead of falling back")
    parser.add_argument("--stats", action="store_true",
                        help="Log size statistics when done")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")
    return parser


def configuration_from_args(args: argparse.Namespace) -> Configuration:
    config = Configuration.aggressive() if args.aggressive else Configuration()
    config.linebreakpos = args.line_break
    config.merge_duplicate_selectors |= args.merge_selectors
    config.optimize_shorthand_properties |= args.optimize_shorthand
    config.advanced_color_optimization |= args.advanced_colors
    config.preserve_ie_hacks = not args.strip_ie_hacks
    config.strict_error_handling = args.strict
    config.statistics_enabled = args.stats
    return config


def write_atomically(target_path: Path, text: str) -> None:
    # write to temp then replace
    tmp_path = target_path.with_suffix(target_path.suffix + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    tmp_path.replace(target_path)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
    )

    if args.input == "-":
        source = sys.stdin.read()
    else:
        input_path = Path(args.input)
        if not input_path.is_file():
            sys.exit(f"CSS file not found: {input_path}")
        source = read_source(input_path)

    compressor = EnhancedCompressor(configuration_from_args(args))
    try:
        minified = compressor.compress(source)
    except CssMinifyError as e:
        sys.exit(f"Error minifying {args.input}: {e}")

    if args.output is None:
        sys.stdout.write(minified + "\n")
    else:
        write_atomically(args.output, minified + "\n")
        logging.info(f"Wrote {args.output}")


if __name__ == "__main__":
    main()

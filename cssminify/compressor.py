"""
compressor.py

The core minification pipeline, a port of the YUI Compressor CSS rules.

    data URLs -> comments -> strings -> whitespace -> values -> reflow/restore

Each stage gets the working text plus the vault owned by this call.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional, Union

from cssminify.comments import classify_comments, collect_comments
from cssminify.data_urls import extract_data_urls
from cssminify.reflow import reflow_lines, restore
from cssminify.strings import preserve_strings
from cssminify.values import optimize_values
from cssminify.vault import PlaceholderVault
from cssminify.whitespace import normalize_whitespace

logger = logging.getLogger(__name__)

DEFAULT_LINE_LENGTH = 5000

Source = Union[str, bytes, Path, IO[str], IO[bytes], None]


def read_source(source: Source) -> str:
    """Turn *source* (text, bytes, path or readable object) into a str."""
    if source is None:
        return ""
    if hasattr(source, "read"):
        source = source.read()
    elif isinstance(source, Path):
        source = source.read_text(encoding="utf-8")
    if isinstance(source, bytes):
        return source.decode("utf-8")
    return str(source)


def compress(source: Source, max_line_length: Optional[int] = DEFAULT_LINE_LENGTH) -> str:
    """Return the minified form of the stylesheet in *source*.

    A falsy *max_line_length* keeps everything on one line.
    """
    css = read_source(source)
    vault = PlaceholderVault()

    css = extract_data_urls(css, vault)
    css = collect_comments(css, vault)
    css = preserve_strings(css, vault)
    css = classify_comments(css, vault)
    css = normalize_whitespace(css, vault)
    css = optimize_values(css, vault)
    css = reflow_lines(css, max_line_length)
    css = restore(css, vault)

    logger.debug(f"Compressed to {len(css)} chars, {len(vault)} fragments protected")
    return css

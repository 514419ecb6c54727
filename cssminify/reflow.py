"""
reflow.py

Last stage of the pipeline: optional line breaking and placeholder restore.
"""
from __future__ import annotations

import re
from typing import Optional

from cssminify.vault import Kind, PlaceholderVault

REPEATED_SEMICOLONS_RE = re.compile(r";;+")


def reflow_lines(css: str, max_line_length: Optional[int]) -> str:
    """Break the line after a ``}`` once it has grown past *max_line_length*.

    Single forward pass; a line with no ``}`` in reach stays long. A falsy
    *max_line_length* disables breaking.
    """
    if not max_line_length:
        return css

    start = 0
    i = max_line_length
    while i < len(css) - 1:
        i += 1
        if css[i - 1] == "}" and i - start > max_line_length:
            css = css[:i] + "\n" + css[i:]
            start = i
            i = start + max_line_length
    return css


def restore(css: str, vault: PlaceholderVault) -> str:
    """Put protected fragments back, calc() first, then strings and comments."""
    css = REPEATED_SEMICOLONS_RE.sub(";", css)
    css = vault.restore(css, Kind.CALC)
    css = vault.restore(css, Kind.TOKEN)
    return css.strip()

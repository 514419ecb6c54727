"""
whitespace.py

Whitespace and selector normalisation.

The steps of :func:`normalize_whitespace` run in a fixed order. calc()
bodies are protected before any space stripping, and selector colons are
hidden behind a sentinel while the space-before-punctuation rule runs so
that ``p :link`` does not turn into ``p:link``.
"""
from __future__ import annotations

import re

from cssminify.vault import Kind, PlaceholderVault

PSEUDO_COLON = "___PRESERVED_PSEUDOCLASSCOLON___"
PSEUDO_SPACE = "___PRESERVED_PSEUDOCLASSSPACE___"

WHITESPACE_RE = re.compile(r"\s+")

CALC_RE = re.compile(r"calc\([^)]*\)")
CALC_MULDIV_RE = re.compile(r"\s*([*/])\s*")
# + and - count as operators only when they already touch whitespace,
# which keeps var(--name) and negative numbers intact
CALC_ADDSUB_RE = re.compile(r"\s+([+-])\s*|\s*([+-])\s+")
CALC_INNER_PAREN_RE = re.compile(r"\(\s+|\s+\)")

# a run of selectors ending in "{" that contains colons
SELECTOR_COLONS_RE = re.compile(r"(^|\})(?:[^{:]+:)+[^{]*\{")
# ":first-child :last-child" style chains, the space between is meaningful
PSEUDO_CHAIN_RE = re.compile(r":[\w-]+(?:\([^)]*\))?(?:\s+:[\w-]+(?:\([^)]*\))?)+")

SPACE_BEFORE_RE = re.compile(r"\s+([!{};:>+)\],])")
SPACE_BEFORE_PAREN_RE = re.compile(r"([^+\-/*])\s+\(")
MEDIA_AND_RE = re.compile(r"\band\(", re.IGNORECASE)
SPACE_AFTER_RE = re.compile(r"([!{}:;>+(\[,])\s+")

# IE6 needs the space in ":first-line {"
FIRST_LINE_RE = re.compile(r":first-(line|letter)(\{|,)", re.IGNORECASE)
COMMENT_END_SPACE_RE = re.compile(r"\*/\s+")

CHARSET_RE = re.compile(r"@charset [^;]+;", re.IGNORECASE)

SEMICOLONS_BEFORE_BRACE_RE = re.compile(r";+\}")


def collapse_whitespace(css: str) -> str:
    return WHITESPACE_RE.sub(" ", css).strip()


def normalize_calc(expression: str) -> str:
    """Give each arithmetic operator inside *expression* one space per side."""
    expression = CALC_MULDIV_RE.sub(r" \1 ", expression)
    expression = CALC_ADDSUB_RE.sub(lambda m: " %s " % (m.group(1) or m.group(2)), expression)
    return CALC_INNER_PAREN_RE.sub(lambda m: m.group(0).strip(), expression)


def protect_calc(css: str, vault: PlaceholderVault) -> str:
    return CALC_RE.sub(lambda m: vault.protect(normalize_calc(m.group(0)), Kind.CALC), css)


def strip_structural_spaces(css: str) -> str:
    """Remove spaces around punctuation without touching selector semantics."""
    css = PSEUDO_CHAIN_RE.sub(lambda m: WHITESPACE_RE.sub(PSEUDO_SPACE, m.group(0)), css)
    css = SELECTOR_COLONS_RE.sub(lambda m: m.group(0).replace(":", PSEUDO_COLON), css)

    css = SPACE_BEFORE_RE.sub(r"\1", css)
    css = SPACE_BEFORE_PAREN_RE.sub(r"\1(", css)

    css = css.replace(PSEUDO_COLON, ":")
    css = css.replace(PSEUDO_SPACE, " ")

    # @media screen and (-webkit-min-device-pixel-ratio:0){
    css = MEDIA_AND_RE.sub("and (", css)

    return SPACE_AFTER_RE.sub(r"\1", css)


def hoist_charset(css: str) -> str:
    """Keep only the first ``@charset`` rule and move it to the front."""
    charsets = CHARSET_RE.findall(css)
    if not charsets:
        return css
    return charsets[0] + CHARSET_RE.sub("", css)


def normalize_whitespace(css: str, vault: PlaceholderVault) -> str:
    css = collapse_whitespace(css)
    css = protect_calc(css, vault)
    css = strip_structural_spaces(css)

    css = FIRST_LINE_RE.sub(lambda m: ":first-%s %s" % (m.group(1).lower(), m.group(2)), css)
    css = COMMENT_END_SPACE_RE.sub("*/", css)
    css = hoist_charset(css)

    return SEMICOLONS_BEFORE_BRACE_RE.sub("}", css)

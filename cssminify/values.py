"""
values.py

Declaration value rewrites: zero units, decimals, shorthand zeros, colors
and a handful of property-specific shortcuts.

Expects whitespace-normalised input with strings, comments and calc()
expressions already swapped out for vault tokens.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from cssminify.strings import shorten_ie_alpha
from cssminify.vault import Kind, PlaceholderVault

UNITS = r"(?:px|em|%|in|cm|mm|pc|pt|ex|deg|g?rad|m?s|k?hz)"

# 0px, 0.0em, .0s in property-value position
ZERO_VALUE_RE = re.compile(
    r"(^|: ?)((?:[0-9a-z\-.]+ )*?)?(?:0?\.)?0" + UNITS, re.IGNORECASE
)
# the same inside a function argument list; hsl() needs its percentages
ZERO_ARGUMENT_RE = re.compile(
    r"(?<!hsl)(?<!hsla)\( ?((?:[0-9a-z\-.]+[ ,])*)?(?:0?\.)?0" + UNITS, re.IGNORECASE
)
TRAILING_DECIMAL_ZERO_RE = re.compile(
    r"([0-9])\.0(px|em|%|in|cm|mm|pc|pt|ex|deg|g?rad|m?s|k?hz| |;)", re.IGNORECASE
)

# flex: 0 0 0 is not the same as flex: 0
ZERO_SHORTHAND_RES = [
    re.compile(r"(?<!flex):0 0 0 0(;|\})"),
    re.compile(r"(?<!flex):0 0 0(;|\})"),
    re.compile(r"(?<!flex):0 0(;|\})"),
]
TWO_VALUE_ZERO_RE = re.compile(
    r"(background-position|transform-origin|webkit-transform-origin|moz-transform-origin"
    r"|o-transform-origin|ms-transform-origin):0(;|\})",
    re.IGNORECASE,
)
LEADING_ZERO_RE = re.compile(r"(:|\s)0+\.(\d+)")

RGB_RE = re.compile(r"rgb\s*\(\s*([0-9,\s]+)\s*\)(\d+%)?", re.IGNORECASE)
CHANNEL_RE = re.compile(r"\s*(\d+)")

# Not after "=" or '="' (IE filter syntax such as chroma(color="#FFFFFF")),
# and only when a "}" follows before any "{", which rules out id selectors
# like #FAABAC {} and over-long values like #AABBCCD.
HEX_COLOR_RE = re.compile(
    r"(=\s*?[\"']?)?#([0-9a-f])([0-9a-f])([0-9a-f])([0-9a-f])([0-9a-f])([0-9a-f])"
    r"(:?\}|[^0-9a-f{][^{]*?\})",
    re.IGNORECASE,
)

FILTER_RE = re.compile(r"filter\s*:[^;}]+", re.IGNORECASE)

# Both the six- and three-digit form of red are listed on purpose: the
# short form can appear in the source as written.
COLOR_KEYWORDS: Dict[str, str] = {
    "#ff0000": "red",
    "#f00": "red",
    "#000080": "navy",
    "#008000": "green",
    "#008080": "teal",
    "#800000": "maroon",
    "#800080": "purple",
    "#808000": "olive",
    "#808080": "gray",
    "#c0c0c0": "silver",
    "#ffa500": "orange",
}

NONE_TO_ZERO_RE = re.compile(
    r"(?<![\w-])(border|border-top|border-right|border-bottom|border-left|outline|background)"
    r":none(;|\})",
    re.IGNORECASE,
)
EMPTY_RULE_RE = re.compile(r"[^};{/]+\{\}")


def _keyword_re(hex_color: str) -> re.Pattern:
    # whole color only, and only inside a declaration block
    return re.compile(re.escape(hex_color) + r"(?![\w-])(?=[^{}]*(?:\}|$))", re.IGNORECASE)


KEYWORD_RES = [
    (_keyword_re(hex_color), name)
    for hex_color, name in COLOR_KEYWORDS.items()
    if len(name) <= len(hex_color)
]


def rewrite_to_fixed_point(css: str, rewrite: Callable[[str], str]) -> str:
    """Apply *rewrite* until it stops changing the text.

    Every rewrite passed in here only ever shortens the text, so the loop
    ends once no match is left.
    """
    while True:
        rewritten = rewrite(css)
        if rewritten == css:
            return css
        css = rewritten


def strip_zero_units(css: str) -> str:
    css = rewrite_to_fixed_point(css, lambda text: ZERO_VALUE_RE.sub(r"\g<1>\g<2>0", text))
    css = rewrite_to_fixed_point(css, lambda text: ZERO_ARGUMENT_RE.sub(r"(\g<1>0", text))
    return TRAILING_DECIMAL_ZERO_RE.sub(r"\1\2", css)


def collapse_zero_shorthands(css: str) -> str:
    for pattern in ZERO_SHORTHAND_RES:
        css = pattern.sub(r":0\1", css)
    return TWO_VALUE_ZERO_RE.sub(lambda m: "%s:0 0%s" % (m.group(1).lower(), m.group(2)), css)


def strip_leading_zeros(css: str) -> str:
    return LEADING_ZERO_RE.sub(r"\1.\2", css)


def _channel(text: str) -> int:
    m = CHANNEL_RE.match(text)
    return int(m.group(1)) if m else 0


def rgb_to_hex(channels: List[int]) -> str:
    """``[51, 102, 153]`` -> ``#336699``, each channel capped at 255."""
    return "#" + "".join("%02x" % min(channel, 255) for channel in channels)


def _rgb_sub(match: re.Match) -> str:
    parts = match.group(1).split(",")
    if len(parts) != 3:
        return match.group(0)
    color = rgb_to_hex([_channel(part) for part in parts])
    if match.group(2):
        color += " " + match.group(2)
    return color


def shorten_hex(color: str) -> Optional[str]:
    """``#aabbcc`` -> ``#abc`` when lossless, else None."""
    color = color.lower()
    if len(color) == 7 and color[1] == color[2] and color[3] == color[4] and color[5] == color[6]:
        return "#" + color[1] + color[3] + color[5]
    return None


def compress_hex_colors(css: str) -> str:
    out = []
    pos = 0
    while True:
        m = HEX_COLOR_RE.search(css, pos)
        if m is None:
            break

        digits = "".join(m.group(i) for i in range(2, 8))
        if m.group(1) is None:
            color = "#" + digits
            color = shorten_hex(color) or color.lower()
        else:
            # filter property, keep it the way it is
            color = m.group(1) + "#" + digits

        out.append(css[pos:m.start()])
        out.append(color)
        # the trailing context may hold the next color
        pos = m.end(7)

    out.append(css[pos:])
    return "".join(out)


def convert_color_keywords(css: str, vault: PlaceholderVault) -> str:
    """Swap selected hex colors for shorter names, leaving filters alone."""
    css = FILTER_RE.sub(lambda m: vault.protect(m.group(0), Kind.FILTER), css)
    for pattern, name in KEYWORD_RES:
        css = pattern.sub(name, css)
    return vault.restore(css, Kind.FILTER)


def optimize_colors(css: str, vault: PlaceholderVault) -> str:
    css = RGB_RE.sub(_rgb_sub, css)
    css = compress_hex_colors(css)
    return convert_color_keywords(css, vault)


def optimize_values(css: str, vault: PlaceholderVault) -> str:
    css = strip_zero_units(css)
    css = collapse_zero_shorthands(css)
    css = strip_leading_zeros(css)
    css = optimize_colors(css, vault)

    css = NONE_TO_ZERO_RE.sub(lambda m: "%s:0%s" % (m.group(1).lower(), m.group(2)), css)
    css = shorten_ie_alpha(css)

    return EMPTY_RULE_RE.sub("", css)

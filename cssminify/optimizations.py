"""
optimizations.py

Optional post-passes that run on already-minified CSS:

* merge rules that repeat a selector
* shorten margin/padding/background/border/font/list shorthands, gaps,
  alignment pairs and zero transforms
* drop IE star/underscore hacks and hack comments
* turn hsl() colors into hex or a color name

Each pass returns ``(css, count)`` so the caller can keep statistics. Strings,
comments and data URLs are hidden behind vault tokens while a pass runs (see
:func:`shielded`), so no rewrite ever looks inside them.
"""
from __future__ import annotations

import colorsys
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from cssminify.comments import collect_comments
from cssminify.data_urls import extract_data_urls
from cssminify.strings import preserve_strings
from cssminify.values import EMPTY_RULE_RE, convert_color_keywords, rgb_to_hex, shorten_hex
from cssminify.vault import Kind, PlaceholderVault

PassResult = Tuple[str, int]

MEDIA_RE = re.compile(r"^@media", re.IGNORECASE)


def shielded(css: str, optimization: Callable[[str], PassResult]) -> PassResult:
    """Run *optimization* with strings, comments and data URLs out of the way."""
    vault = PlaceholderVault()
    css = extract_data_urls(css, vault)
    css = collect_comments(css, vault)
    css = preserve_strings(css, vault)
    css, count = optimization(css)
    css = vault.restore(css, Kind.CANDIDATE_COMMENT)
    return vault.restore(css, Kind.TOKEN), count


# ------------------------------------------------------------------------------
# Duplicate selectors


@dataclass
class Block:
    """One top-level item: ``prelude{body}`` or a bare ``@statement;``."""

    prelude: str
    body: Optional[str] = None
    declarations: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_plain_rule(self) -> bool:
        return (
            self.body is not None
            and not self.prelude.startswith("@")
            and "{" not in self.body
        )

    def property_families(self) -> set:
        families = set()
        for name, _ in self.declarations:
            families |= property_families(name)
        return families

    def __str__(self) -> str:
        if self.body is None:
            return self.prelude
        if self.is_plain_rule:
            body = ";".join(f"{name}:{value}" for name, value in self.declarations)
            return f"{self.prelude}{{{body}}}"
        return f"{self.prelude}{{{self.body}}}"


VENDOR_PREFIX_RE = re.compile(r"^[*_]?-(?:webkit|moz|ms|o)-|^[*_-]+")

# shorthands that also set properties outside their own name family
SHORTHAND_FAMILIES = {
    "font": {"line"},
    "inset": {"top", "right", "bottom", "left"},
    "place": {"align", "justify"},
    "columns": {"column"},
    "column": {"columns", "grid"},
    "gap": {"row", "column", "grid"},
    "row": {"gap", "grid"},
    "grid": {"gap", "row", "column"},
}
RESETS_EVERYTHING = "all"


def _property_root(name: str) -> str:
    return VENDOR_PREFIX_RE.sub("", name.lower()).split("-")[0]


def property_families(name: str) -> set:
    """Name families a declaration of *name* can affect.

    margin-top and margin interact, so they share the family ``margin``;
    ``font`` also resets ``line-height``, ``inset`` sets ``top`` and so on.
    """
    root = _property_root(name)
    return {root} | SHORTHAND_FAMILIES.get(root, set())


def families_conflict(first: set, second: set) -> bool:
    if RESETS_EVERYTHING in first or RESETS_EVERYTHING in second:
        return True
    return bool(first & second)


def split_blocks(css: str) -> List[Block]:
    """Split *css* into top-level blocks, honouring nested braces."""
    blocks = []
    depth = 0
    start = 0
    prelude_end = None
    for i, char in enumerate(css):
        if char == "{":
            if depth == 0:
                prelude_end = i
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                blocks.append(Block(css[start:prelude_end].strip(), css[prelude_end + 1:i]))
                start = i + 1
        elif char == ";" and depth == 0:
            blocks.append(Block(css[start:i + 1].strip()))
            start = i + 1

    rest = css[start:].strip()
    if rest:
        blocks.append(Block(rest))
    return blocks


def parse_declarations(body: str) -> List[Tuple[str, str]]:
    declarations = []
    for decl in body.split(";"):
        decl = decl.strip()
        if not decl or ":" not in decl:
            continue
        name, value = (part.strip() for part in decl.split(":", 1))
        declarations.append((name, value))
    return declarations


def _merge_into(target: Block, source: Block) -> None:
    merged = target.declarations + source.declarations
    # an identical declaration further down makes the earlier one redundant
    deduped = []
    for i, decl in enumerate(merged):
        if decl not in merged[i + 1:]:
            deduped.append(decl)
    target.declarations = deduped


def merge_blocks(css: str) -> PassResult:
    """Fold each rule into an earlier rule with the same selector.

    A rule only moves up when nothing in between sets a property of the
    same family, so the cascade result is unchanged.
    """
    blocks = split_blocks(css)
    merged_count = 0
    kept: List[Block] = []

    for block in blocks:
        if block.body is not None and MEDIA_RE.match(block.prelude):
            block.body, inner = merge_blocks(block.body)
            merged_count += inner
            kept.append(block)
            continue

        if not block.is_plain_rule:
            kept.append(block)
            continue

        block.declarations = parse_declarations(block.body or "")
        families = block.property_families()
        target = None
        for candidate in reversed(kept):
            if candidate.is_plain_rule and candidate.prelude == block.prelude:
                target = candidate
                break
            if not candidate.is_plain_rule or families_conflict(candidate.property_families(), families):
                break

        if target is None:
            kept.append(block)
        else:
            _merge_into(target, block)
            merged_count += 1

    return "".join(str(block) for block in kept), merged_count


def merge_duplicate_selectors(css: str) -> PassResult:
    return shielded(css, merge_blocks)


# ------------------------------------------------------------------------------
# Shorthand properties

NUMBER = r"[+-]?(?:\d*\.)?\d+(?:px|em|rem|%|vh|vw|pt|pc|in|cm|mm|ex|ch|vmin|vmax)?"
END = r"(?=[;}!]|$)"
# removals must not swallow an !important declaration
DECL_END = r"(?=[;}]|$)"


def _box_model_res(prop: str) -> List[Tuple[re.Pattern, str]]:
    head = r"(?<![\w-])(%s):" % prop
    return [
        # margin:1px 1px 1px 1px -> margin:1px
        (re.compile(head + r"(%s) \2 \2 \2" % NUMBER + END, re.IGNORECASE), r"\1:\2"),
        # margin:1px 2px 1px 2px -> margin:1px 2px
        (re.compile(head + r"(%s) (%s) \2 \3" % (NUMBER, NUMBER) + END, re.IGNORECASE), r"\1:\2 \3"),
        # margin:1px 2px 1px -> margin:1px 2px
        (re.compile(head + r"(%s) (%s) \2" % (NUMBER, NUMBER) + END, re.IGNORECASE), r"\1:\2 \3"),
    ]


SHORTHAND_RES: List[Tuple[re.Pattern, str]] = (
    _box_model_res("margin")
    + _box_model_res("padding")
    + [
        (re.compile(r"(?<![\w-])background:none repeat scroll 0 0 ([^;}]+)", re.IGNORECASE), r"background:\1"),
        # a single value pairs with center, and left is 0
        (re.compile(r"(?<![\w-])background-position:(?:0|left) (?:center|50%)" + DECL_END, re.IGNORECASE),
         "background-position:left"),
        (re.compile(r"background-repeat:repeat repeat" + END, re.IGNORECASE), "background-repeat:repeat"),
        (re.compile(r"font-weight:normal" + END, re.IGNORECASE), "font-weight:400"),
        (re.compile(r"font-weight:bold" + END, re.IGNORECASE), "font-weight:700"),
        (re.compile(r"list-style:none inside" + END, re.IGNORECASE), "list-style:none"),
    ]
)

# a border longhand repeating what the shorthand right before it set
BORDER_STYLES = r"solid|dashed|dotted|double|groove|ridge|inset|outset|hidden|none"
BORDER_RES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"(?<![\w-])border:(%s)((?: [^;}]+)?);border-width:\1" % NUMBER + DECL_END, re.IGNORECASE),
     r"border:\1\2"),
    (re.compile(r"(?<![\w-])border:([^;}]*?\b(%s)\b[^;}]*);border-style:\2" % BORDER_STYLES + DECL_END,
                re.IGNORECASE),
     r"border:\1"),
    (re.compile(r"(?<![\w-])border:([^;}]*? (#[0-9a-f]{3,6}|[a-z]+)(?=[ ;}!])[^;}]*);border-color:\2" + DECL_END,
                re.IGNORECASE),
     r"border:\1"),
]

VALUE_RES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"(?<![\w-])translate\(0,0\)", re.IGNORECASE), "translate(0)"),
    (re.compile(r"(?<![\w-])scale\(1,1\)", re.IGNORECASE), "scale(1)"),
    # a zero blur is the default, but only drop it when a color follows
    (re.compile(r"(?<![\w-])((?:-webkit-|-moz-)?box-shadow|text-shadow):0 0 0 (?=[#a-z])", re.IGNORECASE),
     r"\1:0 0 "),
    (re.compile(r"(?<![\w-])((?:-webkit-|-ms-)?flex):0 0 auto" + DECL_END, re.IGNORECASE), r"\1:none"),
]

LAYOUT_RES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"(?<![\w-])((?:grid-)?gap):(%s) \2" % NUMBER + DECL_END, re.IGNORECASE), r"\1:\2"),
    # the grid- prefixed gaps are legacy aliases
    (re.compile(r"(?<![\w-])grid-gap:", re.IGNORECASE), "gap:"),
    (re.compile(r"(?<![\w-])grid-row-gap:", re.IGNORECASE), "row-gap:"),
    (re.compile(r"(?<![\w-])grid-column-gap:", re.IGNORECASE), "column-gap:"),
    (re.compile(r"(?<![\w-])row-gap:(%s);column-gap:\1" % NUMBER + DECL_END, re.IGNORECASE), r"gap:\1"),
] + [
    (re.compile(r"(?<![\w-])align-%s:([a-z-]+);justify-%s:\1" % (part, part) + DECL_END, re.IGNORECASE),
     r"place-%s:\1" % part)
    for part in ("items", "content", "self")
] + [
    (re.compile(r"(?<![\w-])place-(items|content|self):([a-z-]+) \2" + DECL_END, re.IGNORECASE), r"place-\1:\2"),
]

DECLARATION_RE = re.compile(r"(?<=[{;])([\w-]+):([^;{}]*)(?=[;}])")
MODERN_UNIT_ZERO_RE = re.compile(r"(?<![\w.-])(?:0?\.)?0+(?:rem|ch|vw|vh|vmin|vmax)(?![\w%(-])", re.IGNORECASE)
# unitless zero is not allowed in math functions
MATH_FUNCTION_RE = re.compile(r"(?:calc|min|max|clamp)\(", re.IGNORECASE)


def strip_modern_unit_zeros(css: str) -> PassResult:
    """``0rem``, ``0vh`` and friends -> ``0``, outside flex and math functions."""
    total = 0

    def _sub(match: re.Match) -> str:
        nonlocal total
        name, value = match.groups()
        if name.startswith("--") or _property_root(name) == "flex" or MATH_FUNCTION_RE.search(value):
            return match.group(0)
        value, count = MODERN_UNIT_ZERO_RE.subn("0", value)
        total += count
        return f"{name}:{value}"

    return DECLARATION_RE.sub(_sub, css), total


def _apply(css: str, rewrites: List[Tuple[re.Pattern, str]]) -> PassResult:
    total = 0
    for pattern, replacement in rewrites:
        css, count = pattern.subn(replacement, css)
        total += count
    return css, total


def shorten_properties(css: str) -> PassResult:
    total = 0
    for rewrites in (SHORTHAND_RES, BORDER_RES, VALUE_RES, LAYOUT_RES):
        css, count = _apply(css, rewrites)
        total += count
    css, count = strip_modern_unit_zeros(css)
    return css, total + count


def optimize_shorthand_properties(css: str) -> PassResult:
    return shielded(css, shorten_properties)


# ------------------------------------------------------------------------------
# IE hacks

STAR_HACK_RE = re.compile(r"(?<=[{;])[*_][\w-]+:[^;{}]*(?:;|(?=\}))")
DANGLING_SEMICOLON_RE = re.compile(r";\}")


def strip_hacks(css: str, vault: PlaceholderVault) -> PassResult:
    """Drop ``*prop``/``_prop`` declarations and hack comments.

    *css* holds candidate comment tokens from *vault*; only comments whose
    body is empty or a single backslash count as hacks.
    """
    total = 0
    for index in range(vault.count(Kind.CANDIDATE_COMMENT)):
        if vault.resolve(index, Kind.CANDIDATE_COMMENT) in ("", "\\"):
            placeholder = "/*%s*/" % vault.token(index, Kind.CANDIDATE_COMMENT)
            total += css.count(placeholder)
            css = css.replace(placeholder, "")

    css, count = STAR_HACK_RE.subn("", css)
    css = DANGLING_SEMICOLON_RE.sub("}", css)
    return EMPTY_RULE_RE.sub("", css), total + count


def strip_ie_hacks(css: str) -> PassResult:
    vault = PlaceholderVault()
    css = extract_data_urls(css, vault)
    css = collect_comments(css, vault)
    css = preserve_strings(css, vault)
    css, count = strip_hacks(css, vault)
    css = vault.restore(css, Kind.CANDIDATE_COMMENT)
    return vault.restore(css, Kind.TOKEN), count


# ------------------------------------------------------------------------------
# Colors

HSL_RE = re.compile(r"hsl\(\s*(\d+)\s*,\s*(\d+)%\s*,\s*(\d+)%\s*\)", re.IGNORECASE)


def hsl_to_rgb(hue: int, saturation: int, lightness: int) -> List[int]:
    """Degrees and percentages in, 0-255 channels out."""
    r, g, b = colorsys.hls_to_rgb(
        (hue % 360) / 360.0,
        min(lightness, 100) / 100.0,
        min(saturation, 100) / 100.0,
    )
    return [int(channel * 255 + 0.5) for channel in (r, g, b)]


def _hsl_sub(match: re.Match) -> str:
    color = rgb_to_hex(hsl_to_rgb(*(int(part) for part in match.groups())))
    return shorten_hex(color) or color


def convert_hsl_colors(css: str) -> PassResult:
    css, count = HSL_RE.subn(_hsl_sub, css)
    if count:
        # same keyword table as the core color pass
        css = convert_color_keywords(css, PlaceholderVault())
    return css, count


def advanced_color_optimization(css: str) -> PassResult:
    return shielded(css, convert_hsl_colors)

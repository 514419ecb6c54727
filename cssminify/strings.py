"""
strings.py

Protects the content of quoted string literals.

The quote characters stay in the working text; only the body goes into the
vault, so later passes still see ``"..."`` boundaries but never the content.
"""
from __future__ import annotations

import re

from cssminify.comments import restore_candidates
from cssminify.vault import Kind, PlaceholderVault

# double or single quoted, backslash escapes anything (newlines included);
# a lone trailing backslash may sit right before the closing quote
STRING_RE = re.compile(
    r"""("(?:[^\\"]|\\[\s\S])*\\?")|('(?:[^\\']|\\[\s\S])*\\?')"""
)

IE_ALPHA_RE = re.compile(r"progid:DXImageTransform\.Microsoft\.Alpha\(Opacity=", re.IGNORECASE)


def shorten_ie_alpha(text: str) -> str:
    return IE_ALPHA_RE.sub("alpha(opacity=", text)


def preserve_strings(css: str, vault: PlaceholderVault) -> str:
    """Return *css* with every string body swapped for a vault token."""

    def _protect(match: re.Match) -> str:
        literal = match.group(0)
        quote = literal[0]
        body = literal[1:-1]

        # the comment pass ran first and may have mistaken /* */ in here
        # for a real comment
        body = restore_candidates(body, vault)
        body = vault.restore(body, Kind.TOKEN)
        body = shorten_ie_alpha(body)

        return quote + vault.protect(body, Kind.TOKEN) + quote

    return STRING_RE.sub(_protect, css)

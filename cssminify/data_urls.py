"""
data_urls.py

Moves ``url(data:...)`` payloads into the vault before any other pass runs.

Payloads are often large and may contain text that looks like CSS syntax
(quotes, braces, ``/*``), so they are protected verbatim and the working text
keeps only ``url(<token>)``.
"""
from __future__ import annotations

import logging
import re

from cssminify.vault import Kind, PlaceholderVault

logger = logging.getLogger(__name__)

# url( + optional whitespace + optional quote + data:
DATA_URL_RE = re.compile(r"url\(\s*([\"']?)data:", re.IGNORECASE)


def _find_terminator(css: str, terminator: str, start: int) -> int:
    """Index of the first unescaped *terminator* at or after *start*, or -1."""
    index = css.find(terminator, start)
    while index != -1 and index > 0 and css[index - 1] == "\\":
        index = css.find(terminator, index + 1)
    return index


def extract_data_urls(css: str, vault: PlaceholderVault) -> str:
    """Return *css* with every data URL payload replaced by a vault token.

    Unterminated data URLs are emitted unchanged and scanning resumes right
    after the matched ``url(...data:`` prefix.
    """
    out = []
    pos = 0
    while True:
        m = DATA_URL_RE.search(css, pos)
        if m is None:
            break

        payload_start = m.start() + len("url(")
        terminator = m.group(1) or ")"

        end = _find_terminator(css, terminator, m.end())
        if end != -1 and terminator != ")":
            # closing quote found, the payload runs to the next paren
            end = css.find(")", end)

        out.append(css[pos:m.start()])
        if end == -1:
            logger.debug(f"Unterminated data URL at offset {m.start()}, leaving it as-is")
            out.append(m.group(0))
            pos = m.end()
            continue

        token = vault.protect(css[payload_start:end], Kind.TOKEN)
        out.append(f"url({token})")
        pos = end + 1

    out.append(css[pos:])
    return "".join(out)

"""
comments.py

Comment handling, in two phases.

:func:`collect_comments` runs before strings are preserved and swaps every
comment body for a candidate placeholder, so ``/*`` inside a body can no
longer confuse the string matcher. Once strings are safe,
:func:`classify_comments` decides per comment whether it is deleted or kept:

* ``/*! ... */``          kept verbatim (licence headers and the like)
* ``/* ... \\*/``          Mac/IE5 hack, shortened to ``/*\\*/`` and the next
                          comment to ``/**/``
* ``>/**/``               IE7 child selector hack, kept empty
* anything else           deleted
"""
from __future__ import annotations

import logging
from enum import Enum

from cssminify.vault import Kind, PlaceholderVault

logger = logging.getLogger(__name__)


class CommentAction(Enum):
    DELETE = "delete"
    PRESERVE_VERBATIM = "preserve-verbatim"
    PRESERVE_EMPTY = "preserve-empty"
    MAC_HACK = "mac-hack"


def classify(body: str, preceding_char: str = "") -> CommentAction:
    """Decide what happens to a comment with text *body*.

    *preceding_char* is the character right before the opening ``/*``.
    """
    if body.startswith("!"):
        return CommentAction.PRESERVE_VERBATIM
    if body.endswith("\\"):
        return CommentAction.MAC_HACK
    if not body and preceding_char == ">":
        return CommentAction.PRESERVE_EMPTY
    return CommentAction.DELETE


def collect_comments(css: str, vault: PlaceholderVault) -> str:
    """Replace each comment body with a candidate-comment token.

    An unterminated comment runs to the end of the text.
    """
    out = []
    pos = 0
    while True:
        start = css.find("/*", pos)
        if start == -1:
            break
        end = css.find("*/", start + 2)

        out.append(css[pos:start])
        if end == -1:
            token = vault.protect(css[start + 2:], Kind.CANDIDATE_COMMENT)
            out.append("/*" + token)
            pos = len(css)
            break

        token = vault.protect(css[start + 2:end], Kind.CANDIDATE_COMMENT)
        out.append("/*" + token + "*/")
        pos = end + 2

    out.append(css[pos:])
    return "".join(out)


def restore_candidates(text: str, vault: PlaceholderVault) -> str:
    """Put literal comment text back wherever a candidate token survived."""
    return vault.restore(text, Kind.CANDIDATE_COMMENT)


def _preserve(css: str, placeholder: str, fragment: str, vault: PlaceholderVault) -> str:
    return css.replace(placeholder, vault.protect(fragment, Kind.TOKEN))


def classify_comments(css: str, vault: PlaceholderVault) -> str:
    """Resolve every candidate comment token into a kept token or nothing."""
    total = vault.count(Kind.CANDIDATE_COMMENT)
    i = 0
    while i < total:
        body = vault.resolve(i, Kind.CANDIDATE_COMMENT)
        placeholder = vault.token(i, Kind.CANDIDATE_COMMENT)
        index = css.find(placeholder)
        if index == -1:
            # lived inside a string and has already been put back
            i += 1
            continue

        preceding_char = css[index - 3] if index >= 3 else ""
        action = classify(body, preceding_char)
        logger.debug(f"Comment #{i}: {action.value}")

        if action is CommentAction.PRESERVE_VERBATIM:
            # data URL tokens inside the body would never be restored otherwise
            css = _preserve(css, placeholder, vault.restore(body, Kind.TOKEN), vault)
        elif action is CommentAction.MAC_HACK:
            css = _preserve(css, placeholder, "\\", vault)
            i += 1
            if i < total:
                css = _preserve(css, vault.token(i, Kind.CANDIDATE_COMMENT), "", vault)
        elif action is CommentAction.PRESERVE_EMPTY:
            css = _preserve(css, placeholder, "", vault)
        else:
            css = css.replace("/*" + placeholder + "*/", "")
            css = css.replace("/*" + placeholder, "")
        i += 1

    return css

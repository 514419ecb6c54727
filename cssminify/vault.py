"""
vault.py

Placeholder storage for one compression run.

Every hazardous substring (comment body, string body, data-URL payload,
calc() expression, filter declaration) is moved out of the working text into
a :class:`PlaceholderVault` and replaced by a token of the form::

    ___PRESERVED_<KIND>_<index>___

Each kind is an independent namespace indexed from 0. A fresh vault backs
every call to :func:`cssminify.compress`, so nothing leaks between calls.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List


class Kind(str, Enum):
    """Placeholder namespaces."""

    CANDIDATE_COMMENT = "CANDIDATE_COMMENT"
    TOKEN = "TOKEN"
    CALC = "CALC"
    FILTER = "FILTER"


TOKEN_TEMPLATE = "___PRESERVED_{kind}_{index}___"


class PlaceholderVault:
    """Append-only, per-namespace store of protected fragments."""

    def __init__(self) -> None:
        self._fragments: Dict[Kind, List[str]] = {kind: [] for kind in Kind}
        self._patterns: Dict[Kind, re.Pattern] = {
            kind: re.compile(r"___PRESERVED_%s_(\d+)___" % kind.value)
            for kind in Kind
        }

    def protect(self, fragment: str, kind: Kind = Kind.TOKEN) -> str:
        """Store *fragment* and return the token standing in for it."""
        fragments = self._fragments[kind]
        fragments.append(fragment)
        return self.token(len(fragments) - 1, kind)

    @staticmethod
    def token(index: int, kind: Kind = Kind.TOKEN) -> str:
        return TOKEN_TEMPLATE.format(kind=kind.value, index=index)

    def resolve(self, index: int, kind: Kind = Kind.TOKEN) -> str:
        return self._fragments[kind][index]

    def pattern(self, kind: Kind = Kind.TOKEN) -> re.Pattern:
        """Regex matching every token of *kind*; group 1 is the index."""
        return self._patterns[kind]

    def count(self, kind: Kind = Kind.TOKEN) -> int:
        return len(self._fragments[kind])

    def restore(self, text: str, kind: Kind = Kind.TOKEN) -> str:
        """Replace every *kind* token in *text* with its fragment.

        This is a single left-to-right pass: substituted fragments are not
        scanned again, so a fragment that happens to contain token-like text
        comes back verbatim. Tokens whose index was never issued by this
        vault are left untouched.
        """
        fragments = self._fragments[kind]
        if not fragments:
            return text

        def _sub(match: re.Match) -> str:
            index = int(match.group(1))
            if index < len(fragments):
                return fragments[index]
            return match.group(0)

        return self._patterns[kind].sub(_sub, text)

    def __len__(self) -> int:
        return sum(len(fragments) for fragments in self._fragments.values())

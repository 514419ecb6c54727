"""
errors.py

Exceptions raised by the enhanced compressor. The core pipeline never raises
on bad CSS; it produces output or fails open.
"""
from __future__ import annotations

from typing import List, Optional


class CssMinifyError(Exception):
    pass


class EnhancedCompressionError(CssMinifyError):
    """The enhanced pipeline failed while ``strict_error_handling`` was on."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class MalformedCSSError(CssMinifyError):
    """Structural validation found problems in the input."""

    def __init__(self, message: str, css_errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.css_errors = list(css_errors or [])

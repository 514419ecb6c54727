"""
cssminify

YUI Compressor style CSS minification.

    >>> from cssminify import compress
    >>> compress(".a { color: #ff0000; margin: 0px }")
    '.a{color:red;margin:0}'
"""
from cssminify.compressor import DEFAULT_LINE_LENGTH, compress
from cssminify.enhanced import (
    CompressionStatistics,
    Configuration,
    EnhancedCompressor,
    compress_enhanced,
    compress_with_stats,
)
from cssminify.errors import CssMinifyError, EnhancedCompressionError, MalformedCSSError

__version__ = "2.1.0"

__all__ = [
    "DEFAULT_LINE_LENGTH",
    "CompressionStatistics",
    "Configuration",
    "CssMinifyError",
    "EnhancedCompressionError",
    "EnhancedCompressor",
    "MalformedCSSError",
    "compress",
    "compress_enhanced",
    "compress_with_stats",
]

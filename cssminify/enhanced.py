"""
enhanced.py

Option handling, statistics and the fallback ladder around the core
pipeline.

    compressor = EnhancedCompressor(Configuration.aggressive())
    css = compressor.compress(source)
    compressor.statistics.as_dict()

With ``strict_error_handling`` off (the default) compression never raises:
a failing post-pass is skipped, a failing pipeline falls back to the core
pipeline and then to a plain whitespace squeeze.
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from cssminify.compressor import DEFAULT_LINE_LENGTH, Source, compress, read_source
from cssminify.errors import EnhancedCompressionError, MalformedCSSError
from cssminify.optimizations import (
    advanced_color_optimization,
    merge_duplicate_selectors,
    optimize_shorthand_properties,
    shielded,
    strip_ie_hacks,
)
from cssminify.reflow import reflow_lines

logger = logging.getLogger(__name__)

# accepted for compatibility, never acted on
UNSUPPORTED_OPTIONS = {
    "compress_css_variables": "inlining or dropping custom properties can change inherited values",
    "generate_source_map": "source maps are not produced",
}


@dataclass
class Configuration:
    """Named options. Every post-pass is off unless asked for.

    ``preserve_ie_hacks=False`` strips star/underscore hacks and hack
    comments; ``statistics_enabled`` logs a size summary after each run.
    """

    linebreakpos: Optional[int] = DEFAULT_LINE_LENGTH
    merge_duplicate_selectors: bool = False
    optimize_shorthand_properties: bool = False
    advanced_color_optimization: bool = False
    preserve_ie_hacks: bool = True
    strict_error_handling: bool = False
    statistics_enabled: bool = False

    @classmethod
    def conservative(cls) -> "Configuration":
        return cls()

    @classmethod
    def aggressive(cls) -> "Configuration":
        return cls(
            merge_duplicate_selectors=True,
            optimize_shorthand_properties=True,
            advanced_color_optimization=True,
        )

    @classmethod
    def modern(cls) -> "Configuration":
        config = cls.aggressive()
        config.statistics_enabled = True
        return config

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "Configuration":
        """Build a configuration from a plain mapping, ignoring unknown keys."""
        config = cls()
        known = {f.name for f in fields(cls)}
        for key, value in (options or {}).items():
            if key in known:
                setattr(config, key, value)
            elif key in UNSUPPORTED_OPTIONS:
                if value:
                    logger.warning(f"Option {key!r} is not supported: {UNSUPPORTED_OPTIONS[key]}")
            else:
                logger.debug(f"Ignoring unknown option {key!r}")
        return config

    @property
    def enhancements_enabled(self) -> bool:
        return (
            self.merge_duplicate_selectors
            or self.optimize_shorthand_properties
            or self.advanced_color_optimization
            or not self.preserve_ie_hacks
        )


@dataclass
class CompressionStatistics:
    original_size: int = 0
    compressed_size: int = 0
    compression_ratio: float = 0.0
    selectors_merged: int = 0
    properties_optimized: int = 0
    colors_converted: int = 0
    ie_hacks_removed: int = 0
    enhanced_features_used: bool = False
    fallback_used: bool = False

    def finish(self, compressed: str) -> None:
        self.compressed_size = len(compressed)
        self.compression_ratio = compression_ratio(self.original_size, self.compressed_size)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compression_ratio(original_size: int, compressed_size: int) -> float:
    """Percentage saved, rounded to two places; 0.0 for empty input."""
    if not original_size:
        return 0.0
    return round((original_size - compressed_size) / original_size * 100, 2)


def validate_css_structure(css: str) -> None:
    """Raise :class:`MalformedCSSError` listing every structural problem."""
    errors = []

    open_braces = css.count("{")
    close_braces = css.count("}")
    if open_braces != close_braces:
        errors.append(f"Unbalanced braces: {open_braces} opening vs {close_braces} closing")

    if css.count('"') % 2:
        errors.append("Unmatched double quotes")
    if css.count("'") % 2:
        errors.append("Unmatched single quotes")

    if errors:
        raise MalformedCSSError(f"CSS validation failed: {', '.join(errors)}", errors)


COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)


def basic_compression(css: str) -> str:
    """Last-resort squeeze: drop comments and collapse whitespace."""
    css = COMMENT_RE.sub("", css)
    css = re.sub(r"\s+", " ", css)
    css = re.sub(r"\s*\{\s*", "{", css)
    css = re.sub(r"\s*\}\s*", "}", css)
    css = re.sub(r"\s*;\s*", ";", css)
    css = re.sub(r":\s+", ":", css)
    return css.strip()


class EnhancedCompressor:
    def __init__(self, config: Optional[Configuration] = None) -> None:
        self.config = config or Configuration()
        self.statistics = CompressionStatistics()

    def _passes(self) -> List[Tuple[str, Callable[[str], Tuple[str, int]], str]]:
        config = self.config
        passes = []
        if not config.preserve_ie_hacks:
            passes.append(("strip_ie_hacks", strip_ie_hacks, "ie_hacks_removed"))
        if config.merge_duplicate_selectors:
            passes.append(("merge_duplicate_selectors", merge_duplicate_selectors, "selectors_merged"))
        if config.optimize_shorthand_properties:
            passes.append(("optimize_shorthand_properties", optimize_shorthand_properties, "properties_optimized"))
        if config.advanced_color_optimization:
            passes.append(("advanced_color_optimization", advanced_color_optimization, "colors_converted"))
        return passes

    def _apply_passes(self, css: str) -> str:
        for name, optimization, counter in self._passes():
            try:
                css, count = optimization(css)
            except Exception as e:
                if self.config.strict_error_handling:
                    raise
                logger.warning(f"{name} optimization failed: {e}")
                continue
            setattr(self.statistics, counter, getattr(self.statistics, counter) + count)
            logger.debug(f"{name}: {count} change(s)")
        return css

    def _fallback(self, css: str) -> str:
        try:
            return compress(css, self.config.linebreakpos)
        except Exception as e:
            logger.warning(f"Falling back to basic compression due to: {e}")
            return basic_compression(css)

    def compress(self, source: Source) -> str:
        css = read_source(source)
        self.statistics = CompressionStatistics(original_size=len(css))

        if self.config.strict_error_handling:
            validate_css_structure(css)

        try:
            if self.config.enhancements_enabled:
                self.statistics.enhanced_features_used = True
                result = compress(css, max_line_length=None)
                result = self._apply_passes(result)
                # line breaks go in last, with strings out of the way
                result, _ = shielded(result, lambda text: (reflow_lines(text, self.config.linebreakpos), 0))
            else:
                result = compress(css, self.config.linebreakpos)
        except Exception as e:
            if self.config.strict_error_handling:
                raise EnhancedCompressionError(f"Enhanced compression failed: {e}", e) from e
            logger.warning(f"Enhanced compression failed, using the core pipeline: {e}")
            result = self._fallback(css)
            self.statistics.fallback_used = True

        self.statistics.finish(result)
        if self.config.statistics_enabled:
            stats = self.statistics
            logger.info(f"Original size: {stats.original_size} chars")
            logger.info(f"Minified size: {stats.compressed_size} chars")
            logger.info(f"Savings: {stats.compression_ratio:.1f}%")
        return result


def compress_enhanced(source: Source, options: Optional[Mapping[str, Any]] = None) -> str:
    """Compress with the post-passes selected in *options*.

    Without options this is the same as :func:`cssminify.compress`.
    """
    if not options:
        return compress(source)
    return EnhancedCompressor(Configuration.from_options(options)).compress(source)


def compress_with_stats(source: Source, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    config = Configuration.from_options(options)
    config.statistics_enabled = True

    compressor = EnhancedCompressor(config)
    compressed_css = compressor.compress(source)
    return {
        "compressed_css": compressed_css,
        "statistics": compressor.statistics.as_dict(),
    }

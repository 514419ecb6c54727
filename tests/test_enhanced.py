import logging

import pytest

from cssminify import (
    Configuration,
    EnhancedCompressionError,
    EnhancedCompressor,
    MalformedCSSError,
    compress,
    compress_enhanced,
    compress_with_stats,
)
from cssminify.enhanced import basic_compression, compression_ratio, validate_css_structure


AGGRESSIVE_SOURCE = (
    '.a { margin: 10px 10px 10px 10px; }\n'
    '.b { color: blue; }\n'
    '.a { font-weight: bold; }\n'
)


# === Configuration ===

class TestConfiguration:
    def test_defaults_leave_every_post_pass_off(self) -> None:
        config = Configuration()
        assert 5000 == config.linebreakpos
        assert config.preserve_ie_hacks
        assert not config.enhancements_enabled

    def test_aggressive_enables_post_passes(self) -> None:
        config = Configuration.aggressive()
        assert config.merge_duplicate_selectors
        assert config.optimize_shorthand_properties
        assert config.advanced_color_optimization

    def test_conservative_equals_defaults(self) -> None:
        assert Configuration() == Configuration.conservative()

    def test_from_options_ignores_unknown_keys(self) -> None:
        config = Configuration.from_options({'merge_duplicate_selectors': True, 'bogus': 1})
        assert config.merge_duplicate_selectors
        assert not hasattr(config, 'bogus')

    def test_modern_is_aggressive_with_statistics(self) -> None:
        config = Configuration.modern()
        assert config.merge_duplicate_selectors
        assert config.optimize_shorthand_properties
        assert config.advanced_color_optimization
        assert config.statistics_enabled

    def test_from_options_warns_about_unsupported_options(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger='cssminify.enhanced'):
            config = Configuration.from_options({'compress_css_variables': True})
        assert "Option 'compress_css_variables' is not supported" in caplog.text
        assert not hasattr(config, 'compress_css_variables')
        assert Configuration() == config

    def test_stripping_ie_hacks_enables_post_passes(self) -> None:
        assert Configuration(preserve_ie_hacks=False).enhancements_enabled


# === Helpers ===

def test_compression_ratio() -> None:
    assert 75.0 == compression_ratio(100, 25)
    assert 33.33 == compression_ratio(3, 2)
    assert 0.0 == compression_ratio(0, 0)


def test_basic_compression() -> None:
    assert 'a{color:red;}' == basic_compression('a {  color: red;  }')
    assert 'a{b:c}' == basic_compression('/* x */ a { b: c }')


def test_validate_css_structure_lists_every_problem() -> None:
    with pytest.raises(MalformedCSSError) as exc_info:
        validate_css_structure('a{content:"x')
    assert [
        'Unbalanced braces: 1 opening vs 0 closing',
        'Unmatched double quotes',
    ] == exc_info.value.css_errors


def test_validate_css_structure_accepts_balanced_input() -> None:
    validate_css_structure('a{content:"x"}')


# === EnhancedCompressor ===

class TestEnhancedCompressor:
    def test_without_options_matches_core(self) -> None:
        assert compress(AGGRESSIVE_SOURCE) == compress_enhanced(AGGRESSIVE_SOURCE)
        assert compress(AGGRESSIVE_SOURCE) == compress_enhanced(AGGRESSIVE_SOURCE, {})

    def test_default_configuration_matches_core(self) -> None:
        assert compress(AGGRESSIVE_SOURCE) == EnhancedCompressor().compress(AGGRESSIVE_SOURCE)

    def test_aggressive_merges_and_shortens(self) -> None:
        compressor = EnhancedCompressor(Configuration.aggressive())

        assert '.a{margin:10px;font-weight:700}.b{color:blue}' == compressor.compress(AGGRESSIVE_SOURCE)
        stats = compressor.statistics
        assert 1 == stats.selectors_merged
        assert 2 == stats.properties_optimized
        assert 0 == stats.colors_converted
        assert stats.enhanced_features_used
        assert not stats.fallback_used

    def test_advanced_colors_only(self) -> None:
        result = compress_enhanced('.a { color: hsl(0, 100%, 50%); }', {'advanced_color_optimization': True})
        assert '.a{color:red}' == result

    def test_line_breaks_still_apply_after_post_passes(self) -> None:
        options = {'merge_duplicate_selectors': True, 'linebreakpos': 10}
        assert '.a{x:1;y:2}\n.b{z:3}' == compress_enhanced('.a{x:1}.a{y:2}.b{z:3}', options)

    def test_statistics_are_reset_per_call(self) -> None:
        compressor = EnhancedCompressor(Configuration.aggressive())
        compressor.compress(AGGRESSIVE_SOURCE)
        compressor.compress('.c{color:red}')
        assert 0 == compressor.statistics.selectors_merged

    def test_ie_hacks_are_stripped_when_not_preserved(self) -> None:
        compressor = EnhancedCompressor(Configuration(preserve_ie_hacks=False))

        result = compressor.compress('#e { width: 1px; *width: 2px; _width: 3px; }\n.a { *zoom: 1; }')
        assert '#e{width:1px}' == result
        assert 3 == compressor.statistics.ie_hacks_removed

    def test_ie_hacks_are_kept_by_default(self) -> None:
        assert '#e{width:1px;*width:2px}' == compress_enhanced('#e { width: 1px; *width: 2px; }', {'linebreakpos': 0})

    def test_statistics_enabled_logs_a_size_summary(self, caplog) -> None:
        compressor = EnhancedCompressor(Configuration(statistics_enabled=True))
        with caplog.at_level(logging.INFO, logger='cssminify.enhanced'):
            compressor.compress('a { color: red; }')

        assert 'Original size: 17 chars' in caplog.text
        assert 'Minified size: 12 chars' in caplog.text
        assert 'Savings: 29.4%' in caplog.text

    def test_statistics_disabled_logs_nothing(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger='cssminify.enhanced'):
            EnhancedCompressor().compress('a { color: red; }')
        assert 'Original size' not in caplog.text


# === Fallbacks ===

class TestFallback:
    def test_failing_post_pass_is_skipped_with_a_warning(self, monkeypatch, caplog) -> None:
        def boom(css):
            raise RuntimeError('kaboom')
        monkeypatch.setattr('cssminify.enhanced.merge_duplicate_selectors', boom)

        compressor = EnhancedCompressor(Configuration.aggressive())
        with caplog.at_level(logging.WARNING, logger='cssminify.enhanced'):
            result = compressor.compress(AGGRESSIVE_SOURCE)

        assert '.a{margin:10px}.b{color:blue}.a{font-weight:700}' == result
        assert 'merge_duplicate_selectors optimization failed: kaboom' in caplog.text
        assert not compressor.statistics.fallback_used

    def test_failing_enhanced_pipeline_falls_back_to_core(self, monkeypatch) -> None:
        def boom(css, optimization):
            raise RuntimeError('kaboom')
        monkeypatch.setattr('cssminify.enhanced.shielded', boom)

        compressor = EnhancedCompressor(Configuration.aggressive())
        assert compress(AGGRESSIVE_SOURCE) == compressor.compress(AGGRESSIVE_SOURCE)
        assert compressor.statistics.fallback_used

    def test_failing_core_falls_back_to_basic(self, monkeypatch) -> None:
        def boom(source, max_line_length=None):
            raise RuntimeError('kaboom')
        monkeypatch.setattr('cssminify.enhanced.compress', boom)

        compressor = EnhancedCompressor()
        assert 'a{color:red;}' == compressor.compress('a {  color: red;  }')
        assert compressor.statistics.fallback_used


# === Strict mode ===

class TestStrictMode:
    def test_malformed_css_raises(self) -> None:
        compressor = EnhancedCompressor(Configuration(strict_error_handling=True))
        with pytest.raises(MalformedCSSError):
            compressor.compress('a{color:red')

    def test_pipeline_failure_raises_with_original_error(self, monkeypatch) -> None:
        def boom(source, max_line_length=None):
            raise RuntimeError('kaboom')
        monkeypatch.setattr('cssminify.enhanced.compress', boom)

        compressor = EnhancedCompressor(Configuration(strict_error_handling=True))
        with pytest.raises(EnhancedCompressionError) as exc_info:
            compressor.compress('a{color:red}')
        assert isinstance(exc_info.value.original_error, RuntimeError)

    def test_failing_post_pass_raises(self, monkeypatch) -> None:
        def boom(css):
            raise RuntimeError('kaboom')
        monkeypatch.setattr('cssminify.enhanced.optimize_shorthand_properties', boom)

        config = Configuration(optimize_shorthand_properties=True, strict_error_handling=True)
        with pytest.raises(EnhancedCompressionError):
            EnhancedCompressor(config).compress('a{color:red}')


# === compress_with_stats ===

def test_compress_with_stats() -> None:
    result = compress_with_stats(AGGRESSIVE_SOURCE, {'merge_duplicate_selectors': True})

    assert '.a{margin:10px 10px 10px 10px;font-weight:bold}.b{color:blue}' == result['compressed_css']
    stats = result['statistics']
    assert len(AGGRESSIVE_SOURCE) == stats['original_size']
    assert len(result['compressed_css']) == stats['compressed_size']
    assert stats['compression_ratio'] == compression_ratio(stats['original_size'], stats['compressed_size'])
    assert 1 == stats['selectors_merged']
    assert 0 == stats['ie_hacks_removed']


def test_compress_with_stats_on_empty_input() -> None:
    result = compress_with_stats('')
    assert '' == result['compressed_css']
    assert 0.0 == result['statistics']['compression_ratio']

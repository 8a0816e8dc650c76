"""
Unit tests for the sanitize policy.
"""

import pytest

from metabox.models import FieldDescriptor, SanitizeMode
from metabox.sanitizer import (
    SanitizeFlags, coerce_to_list, sanitize, sanitize_flags, sanitize_string, strip_tags
)


def field(**kwargs):
    kwargs.setdefault('type', 'text')
    kwargs.setdefault('id', 'f')
    return FieldDescriptor.model_validate(kwargs)


class TestSanitizeFlags:
    """Test cases for flag selection."""

    def test_default_field(self):
        assert sanitize_flags(field()) == SanitizeFlags(encode_quotes=True, require_array=False)

    def test_multi_field_requires_array(self):
        assert sanitize_flags(field(multi=True)) == SanitizeFlags(encode_quotes=True, require_array=True)

    @pytest.mark.parametrize("mode", ['shortcode', 'no_encode_quotes', 'quote-preserving', 'QUOTE_PRESERVING'])
    def test_quote_preserving_spellings(self, mode):
        descriptor = field(sanitize=mode)

        assert descriptor.sanitize == SanitizeMode.QUOTE_PRESERVING
        assert sanitize_flags(descriptor).encode_quotes is False

    def test_quote_preserving_takes_precedence_over_multi(self):
        flags = sanitize_flags(field(sanitize='shortcode', multi=True))

        assert flags == SanitizeFlags(encode_quotes=False, require_array=False)

    def test_unknown_mode_falls_back_to_default(self):
        assert field(sanitize='whatever').sanitize == SanitizeMode.DEFAULT


class TestSanitizeString:
    """Test cases for scalar cleaning."""

    def test_quotes_are_encoded(self):
        assert sanitize_string('say "hi" it\'s') == 'say &#34;hi&#34; it&#39;s'

    def test_quotes_preserved(self):
        assert sanitize_string('[course id="12"]', encode_quotes=False) == '[course id="12"]'

    def test_tags_stripped(self):
        assert sanitize_string('<script>alert(1)</script>ok') == 'alert(1)ok'
        assert strip_tags('a <b>bold</b> <i') == 'a bold '

    def test_stray_brackets_encoded(self):
        assert sanitize_string('1 > 0') == '1 &gt; 0'
        assert sanitize_string('a < b') == 'a &lt; b'

    def test_comparison_text_is_kept(self):
        assert sanitize('Price < 10 and rating > 4 stars', field()) == 'Price &lt; 10 and rating &gt; 4 stars'
        assert sanitize_string('x <3 y') == 'x &lt;3 y'

    def test_comments_and_declarations_stripped(self):
        assert strip_tags('a<!-- note -->b<?php x ?>c') == 'abc'

    def test_nul_bytes_removed(self):
        assert sanitize_string('a\x00b') == 'ab'

    def test_none_and_numbers(self):
        assert sanitize_string(None) == ''
        assert sanitize_string(12) == '12'


class TestSanitize:
    """Test cases for sanitize()."""

    def test_absent_value_is_empty_string(self):
        assert sanitize(None, field()) == ''
        assert sanitize(None, field(multi=True)) == ''

    def test_quote_escaping_for_default_field(self):
        assert sanitize('He said "hi"', field()) == 'He said &#34;hi&#34;'

    def test_quote_preserving_field(self):
        assert sanitize('He said "hi"', field(sanitize='shortcode')) == 'He said "hi"'

    def test_multi_keeps_list(self):
        assert sanitize(['a', 'b'], field(multi=True)) == ['a', 'b']

    def test_multi_coerces_scalar(self):
        assert sanitize('a', field(multi=True)) == ['a']

    def test_multi_sanitizes_each_element(self):
        assert sanitize(['<b>x</b>', '"y"'], field(multi=True)) == ['x', '&#34;y&#34;']

    def test_list_rejected_for_scalar_field(self):
        assert sanitize(['a', 'b'], field()) == ''

    def test_coerce_to_list(self):
        assert coerce_to_list('a') == ['a']
        assert coerce_to_list(('a', 'b')) == ['a', 'b']

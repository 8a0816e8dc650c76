"""
Sanitization policy for submitted metabox values.

Decides which sanitize flags apply to a field and cleans raw submitted
input accordingly. Pure functions: no storage, request or UI access.
"""

import re
from typing import Any, List, NamedTuple, Union
import logging

from .models import FieldDescriptor, SanitizeMode

logger = logging.getLogger(__name__)

SanitizedValue = Union[str, List[str]]

QUOTE_ENTITIES = {
    '"': '&#34;',
    "'": '&#39;',
}

# A tag opens with '<' followed by a letter, '/', '!' or '?'; an unterminated
# tag is removed to the end of the value. Any other '<' is encoded.
_TAG_PATTERN = re.compile(r'<[A-Za-z/!?][^>]*(?:>|$)', re.DOTALL)


class SanitizeFlags(NamedTuple):
    """Flags applied to a field's raw value."""
    encode_quotes: bool = True
    require_array: bool = False


def sanitize_flags(descriptor: FieldDescriptor) -> SanitizeFlags:
    """
    Determine the sanitize flags for a field.

    Quote preservation takes precedence over multi-value handling.
    """
    if descriptor.sanitize == SanitizeMode.QUOTE_PRESERVING:
        return SanitizeFlags(encode_quotes=False, require_array=False)
    if descriptor.multi:
        return SanitizeFlags(encode_quotes=True, require_array=True)
    return SanitizeFlags()


def strip_tags(value: str) -> str:
    """Remove markup tags from a string."""
    return _TAG_PATTERN.sub('', value)


def sanitize_string(value: Any, encode_quotes: bool = True) -> str:
    """
    Clean a scalar value.

    NUL bytes and tags are removed, stray angle brackets are encoded and
    quotes are encoded unless encode_quotes is False.

    Args:
        value: Raw scalar value
        encode_quotes: Whether to encode single and double quotes

    Returns:
        Sanitized string
    """
    if value is None:
        return ''

    text = str(value).replace('\x00', '')
    text = strip_tags(text)
    text = text.replace('<', '&lt;').replace('>', '&gt;')

    if encode_quotes:
        for quote, entity in QUOTE_ENTITIES.items():
            text = text.replace(quote, entity)

    return text


def coerce_to_list(raw_value: Any) -> List[Any]:
    """Coerce a value that was not submitted as an array into a one-element list."""
    if isinstance(raw_value, (list, tuple)):
        return list(raw_value)
    return [raw_value]


def sanitize(raw_value: Any, descriptor: FieldDescriptor) -> SanitizedValue:
    """
    Sanitize a raw submitted value for a field.

    Rules, in order:
    1. No submitted value -> empty string
    2. Quote-preserving fields keep quotes literal
    3. Multi fields sanitize each element; scalars become a one-element list
    4. Everything else gets default escaping

    Args:
        raw_value: Value as submitted (None when absent)
        descriptor: Field the value belongs to

    Returns:
        A string, or a list of strings for multi fields
    """
    if raw_value is None:
        return ''

    flags = sanitize_flags(descriptor)

    if flags.require_array:
        return [sanitize_string(item, encode_quotes=True) for item in coerce_to_list(raw_value)]

    if isinstance(raw_value, (list, tuple, dict)):
        logger.warning(f"Rejected array value submitted for scalar field '{descriptor.id}'")
        return ''

    return sanitize_string(raw_value, encode_quotes=flags.encode_quotes)


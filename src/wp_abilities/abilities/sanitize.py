"""Input sanitisers mirroring WordPress' ``sanitize_text_field`` and ``wp_kses_post``."""

from __future__ import annotations

import re

_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_DANGEROUS_TAGS = "script|style|iframe|object|embed"
_DANGEROUS_BLOCK_RE = re.compile(
    rf"<({_DANGEROUS_TAGS})\b[^>]*>.*?</\1\s*>|<(?:{_DANGEROUS_TAGS})\b[^>]*/?>",
    flags=re.IGNORECASE | re.DOTALL,
)
_EVENT_ATTR_RE = re.compile(
    r"""\s+on[a-z]+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""",
    flags=re.IGNORECASE,
)
_JS_URL_RE = re.compile(
    r"""(\s(?:href|src|action)\s*=\s*)(["']?)\s*javascript:[^"'\s>]*\2""",
    flags=re.IGNORECASE,
)


def sanitize_text_field(value: str) -> str:
    """Strip tags and percent-encoded octets, collapse whitespace, trim."""
    text = _TAG_RE.sub("", value)
    text = _OCTET_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def sanitize_post_content(value: str) -> str:
    """Drop executable markup from post HTML while keeping block-editor comments."""
    content = _DANGEROUS_BLOCK_RE.sub("", value)
    content = _EVENT_ATTR_RE.sub("", content)
    return _JS_URL_RE.sub(r'\1\2#\2', content)

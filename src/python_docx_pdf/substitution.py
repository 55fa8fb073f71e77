"""
Placeholder substitution on serialized XML parts.

The functions here operate on plain strings: a part's XML goes in, the edited
XML comes out. Tag names are matched literally even though the match runs
through ``re`` so that an occurrence limit can be honoured.
"""

import html
import logging
import re

from .constants import END_TAG_OPEN, PLACEHOLDER_PATTERN, TAG_CLOSE, TAG_OPEN
from .errors import EncodingError

logger = logging.getLogger(__name__)

# Characters XML 1.0 does not allow anywhere in a document
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def tag_name(value: str) -> str:
    """Strip placeholder delimiters from a tag.

    Example:
        >>> tag_name("${/CLONEME}")
        'CLONEME'
        >>> tag_name("name")
        'name'
    """
    if value.startswith(TAG_OPEN) and value.endswith(TAG_CLOSE):
        value = value[len(TAG_OPEN) : -len(TAG_CLOSE)]
    return value.lstrip("/")


def normalize_start_tag(value: str) -> str:
    """Ensure a tag carries the ``${...}`` syntax.

    Example:
        >>> normalize_start_tag("name")
        '${name}'
        >>> normalize_start_tag("${name}")
        '${name}'
    """
    if value.startswith(TAG_OPEN) and value.endswith(TAG_CLOSE):
        return value
    return f"{TAG_OPEN}{value}{TAG_CLOSE}"


def normalize_end_tag(value: str) -> str:
    """Build the ``${/...}`` end marker for a block name or start tag.

    Example:
        >>> normalize_end_tag("CLONEME")
        '${/CLONEME}'
        >>> normalize_end_tag("${CLONEME}")
        '${/CLONEME}'
    """
    return f"{END_TAG_OPEN}{tag_name(value)}{TAG_CLOSE}"


def escape_value(value: object) -> str:
    """Convert a replacement value to escaped XML character data.

    Bytes are decoded as UTF-8; any other non-string value is converted with
    ``str()``.

    Args:
        value: The replacement value

    Returns:
        The value with ``&``, ``<``, ``>``, ``"`` and ``'`` escaped

    Raises:
        EncodingError: If the value is not valid Unicode text or contains
            characters XML cannot represent
    """
    if isinstance(value, bytes):
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(value, f"not valid UTF-8 ({e.reason})") from e
    elif isinstance(value, str):
        text = value
    else:
        text = str(value)

    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(value, f"not valid Unicode text ({e.reason})") from e

    invalid = _INVALID_XML_CHARS.search(text)
    if invalid:
        raise EncodingError(
            value, f"character {invalid.group()!r} is not allowed in XML"
        )

    return html.escape(text, quote=True)


def substitute_n(xml: str, search: str, replace: object, limit: int = -1) -> tuple[str, int]:
    """Replace a placeholder and report how many occurrences were replaced.

    Args:
        xml: Serialized XML of one package part
        search: Tag name, with or without ``${...}`` delimiters
        replace: Replacement value (escaped before insertion)
        limit: Maximum number of replacements; negative means all

    Returns:
        Tuple of (new XML, number of replacements made)

    Raises:
        EncodingError: If the replacement value is not valid text
    """
    tag = normalize_start_tag(search)
    escaped = escape_value(replace)

    if limit == 0:
        return xml, 0

    pattern = re.compile(re.escape(tag))
    result, count = pattern.subn(lambda _: escaped, xml, count=max(limit, 0))
    if count:
        logger.debug("Replaced %d occurrence(s) of %s", count, tag)
    return result, count


def substitute(xml: str, search: str, replace: object, limit: int = -1) -> str:
    """Replace a placeholder in one part.

    A tag that does not occur leaves the XML unchanged; that is not an error.

    Example:
        >>> substitute("<w:t>Hello ${name}.</w:t>", "name", "Brad & Co")
        '<w:t>Hello Brad &amp; Co.</w:t>'
    """
    return substitute_n(xml, search, replace, limit)[0]


def suffix_placeholders(xml: str, ordinal: int) -> str:
    """Append ``_<ordinal>`` to every placeholder name in a fragment.

    Used when cloning blocks and rows so that every clone's placeholders can be
    addressed on their own afterwards.

    Example:
        >>> suffix_placeholders("${a} and ${/b}", 2)
        '${a_2} and ${/b_2}'
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda m: f"{TAG_OPEN}{m.group(1)}_{ordinal}{TAG_CLOSE}", xml
    )


def render_clones(fragment: str, clones: int) -> str:
    """Concatenate copies of a fragment, suffixing placeholders ``_1`` ... ``_N``."""
    return "".join(suffix_placeholders(fragment, i) for i in range(1, clones + 1))

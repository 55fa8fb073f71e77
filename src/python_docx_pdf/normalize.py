"""
Placeholder normalization for fragmented WordprocessingML runs.

Word frequently splits a single logical run of text into several formatting
runs at arbitrary character boundaries (spell-checking, language detection, a
stray bold toggle). A placeholder typed as ``${tag_1}`` can therefore reach
the XML as::

    <w:r>
        <w:rPr/>
        <w:t>Hello ${tag_</w:t>
    </w:r>
    <w:r>
        <w:rPr><w:b/><w:bCs/></w:rPr>
        <w:t>1}</w:t>
    </w:r>

Every text search for ``${tag_1}`` fails against that markup. The pass in
this module removes the interposed tags so that the placeholder becomes a
single contiguous token::

    <w:r>
        <w:rPr/>
        <w:t>Hello ${tag_1}</w:t>
    </w:r>

The formatting of the run holding the ``${`` wins; the formatting of later
fragments is dropped together with their markup.
"""

import logging
import re

from .constants import MARKUP_PATTERN, PLACEHOLDER_PATTERN, SPLIT_TAG_PATTERN

logger = logging.getLogger(__name__)


def fix_split_tags(xml: str) -> str:
    """Merge placeholders whose characters are split across XML tags.

    Finds every shortest ``${`` ... ``}`` match in the text and strips all markup
    found inside it. All matches are rewritten in a single left-to-right
    pass, so running the function on its own output returns the text unchanged.

    Args:
        xml: Serialized XML of one package part

    Returns:
        The XML with every placeholder as an unbroken text token
    """
    fixed = 0

    def merge(match: re.Match) -> str:
        nonlocal fixed
        cleaned = MARKUP_PATTERN.sub("", match.group())
        if cleaned != match.group():
            fixed += 1
        return cleaned

    xml = SPLIT_TAG_PATTERN.sub(merge, xml)

    if fixed:
        logger.debug("Merged %d split placeholder(s)", fixed)
    return xml


def find_placeholders(xml: str) -> list[str]:
    """List the distinct placeholder names in a part, in document order.

    Block end markers (``${/name}``) are not reported separately; the block
    start marker already names the block.

    Args:
        xml: Normalized XML of one package part

    Returns:
        Placeholder names without their ``${`` / ``}`` delimiters
    """
    names: list[str] = []
    seen: set[str] = set()
    for name in PLACEHOLDER_PATTERN.findall(xml):
        if not name or name.startswith("/") or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names

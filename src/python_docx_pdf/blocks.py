"""
Block location and editing for ``${name}`` ... ``${/name}`` regions.

A block is bracketed by two paragraphs: the one holding the ``${name}`` start
marker and the one holding the ``${/name}`` end marker. Locating those
paragraphs is done on a parsed lxml tree (walking from the text node up to its
paragraph); the edit itself is a splice on the serialized body so that every
byte outside the block stays exactly as it was.

Block operations only look at the main document body. Headers and footers
are never searched for blocks.
"""

import logging
import re
from dataclasses import dataclass, field

from lxml import etree

from .constants import DOCUMENT_PART, w
from .errors import ArchiveError
from .normalize import fix_split_tags
from .substitution import normalize_end_tag, normalize_start_tag, render_clones, tag_name

logger = logging.getLogger(__name__)


@dataclass
class BlockRegion:
    """Location of a block inside the serialized body XML.

    The outer span runs from the first character of the start paragraph to
    the last character of the end paragraph. The inner span is everything
    between the two paragraphs.

    Attributes:
        name: The block name (without delimiters)
        start: Offset of the start paragraph's opening tag
        end: Offset just past the end paragraph's closing tag
        inner_start: Offset just past the start paragraph
        inner_end: Offset of the end paragraph's opening tag
        start_paragraph: The w:p element holding the start marker
        end_paragraph: The w:p element holding the end marker
    """

    name: str
    start: int
    end: int
    inner_start: int
    inner_end: int
    start_paragraph: etree._Element = field(repr=False, compare=False)
    end_paragraph: etree._Element = field(repr=False, compare=False)

    def outer(self, xml: str) -> str:
        """Get the XML of the whole block, marker paragraphs included."""
        return xml[self.start : self.end]

    def inner(self, xml: str) -> str:
        """Get the XML between the marker paragraphs."""
        return xml[self.inner_start : self.inner_end]


def parse_part(xml: str, part_name: str = DOCUMENT_PART) -> etree._Element:
    """Parse a part's XML text into an lxml element tree.

    Raises:
        ArchiveError: If the part is not well-formed XML
    """
    parser = etree.XMLParser(remove_blank_text=False, huge_tree=True)
    try:
        return etree.fromstring(xml.encode("utf-8"), parser)
    except etree.XMLSyntaxError as e:
        raise ArchiveError(f"Invalid XML in {part_name}: {e}") from e


def _enclosing_paragraph(node: etree._Element) -> etree._Element | None:
    """Walk up from a node to the nearest w:p ancestor."""
    parent = node.getparent()
    while parent is not None:
        if parent.tag == w("p"):
            return parent
        parent = parent.getparent()
    return None


def element_span(xml: str, root: etree._Element, element: etree._Element) -> tuple[int, int]:
    """Find the character span of an element inside the XML it was parsed from.

    The element is identified by its ordinal among same-named elements in
    document order, which is also the order of their opening tags in the
    text. Nested elements of the same name are balanced when looking for the
    closing tag.

    Args:
        xml: The serialized XML that root was parsed from
        root: The parsed root element
        element: The element to locate

    Returns:
        Tuple of (offset of the opening tag, offset just past the closing tag)
    """
    qname = etree.QName(element)
    prefixed = f"{element.prefix}:{qname.localname}" if element.prefix else qname.localname
    siblings = [el for el in root.iter(element.tag) if el.prefix == element.prefix]
    ordinal = next(i for i, el in enumerate(siblings) if el is element)

    tag_pattern = re.compile(rf"<(/?){re.escape(prefixed)}(?=[\s/>])[^>]*?(/?)>")
    seen = -1
    start = -1
    depth = 0
    for match in tag_pattern.finditer(xml):
        closing, self_closing = match.group(1), match.group(2)
        if start < 0:
            if closing:
                continue
            seen += 1
            if seen != ordinal:
                continue
            start = match.start()
            if self_closing:
                return start, match.end()
            depth = 1
            continue

        if closing:
            depth -= 1
            if depth == 0:
                return start, match.end()
        elif not self_closing:
            depth += 1

    raise ArchiveError(f"Could not locate <{prefixed}> element #{ordinal + 1} in part XML")


def find_block(xml: str, name: str) -> BlockRegion | None:
    """Locate the paragraphs bracketing a block.

    Scans every w:t node in document order. The first node containing
    ``${name}`` is the start anchor; the first later node containing
    ``${/name}`` is the end anchor. Each anchor is walked up to its paragraph.

    Args:
        xml: Serialized body XML
        name: Block name, with or without ``${...}`` delimiters

    Returns:
        The BlockRegion, or None if either marker is missing
    """
    start_tag = normalize_start_tag(name)
    end_tag = normalize_end_tag(name)
    root = parse_part(xml)

    start_node = None
    end_node = None
    for node in root.iter(w("t")):
        text = node.text or ""
        if start_node is None:
            if start_tag in text:
                start_node = node
            continue
        if end_tag in text:
            end_node = node
            break

    if start_node is None or end_node is None:
        logger.debug("Block %s not found", start_tag)
        return None

    start_paragraph = _enclosing_paragraph(start_node)
    end_paragraph = _enclosing_paragraph(end_node)
    if start_paragraph is None or end_paragraph is None:
        logger.debug("Block %s markers are not inside paragraphs", start_tag)
        return None

    start, inner_start = element_span(xml, root, start_paragraph)
    if end_paragraph is start_paragraph:
        return BlockRegion(
            name=tag_name(name),
            start=start,
            end=inner_start,
            inner_start=inner_start,
            inner_end=inner_start,
            start_paragraph=start_paragraph,
            end_paragraph=end_paragraph,
        )

    inner_end, end = element_span(xml, root, end_paragraph)
    if inner_end < inner_start:
        logger.warning(
            "Block %s markers sit in nested paragraphs; leaving it untouched", start_tag
        )
        return None

    return BlockRegion(
        name=tag_name(name),
        start=start,
        end=end,
        inner_start=inner_start,
        inner_end=inner_end,
        start_paragraph=start_paragraph,
        end_paragraph=end_paragraph,
    )


def splice_block(xml: str, region: BlockRegion, replacement: str) -> str:
    """Replace a located block (marker paragraphs included) with replacement."""
    return xml[: region.start] + replacement + xml[region.end :]


def clone_block(
    xml: str, name: str, clones: int = 1, replace: bool = True
) -> tuple[str, str | None]:
    """Repeat the contents of a block.

    Every copy has its placeholders suffixed with the copy's 1-based ordinal
    (``${item}`` becomes ``${item_1}``, ``${item_2}``, ...). The marker
    paragraphs are dropped.

    Args:
        xml: Serialized body XML
        name: Block name
        clones: Number of copies
        replace: If False, leave the body alone and only extract the block

    Returns:
        Tuple of (body XML, block text). The body is unchanged when replace
        is False or the block is missing; the block text is None when the
        block is missing.
    """
    region = find_block(xml, name)
    if region is None:
        return xml, None

    block = region.inner(xml)
    if not replace:
        return xml, block

    logger.debug("Cloning block %s %d time(s)", region.name, clones)
    return splice_block(xml, region, render_clones(block, clones)), block


def replace_block(xml: str, name: str, replacement: str) -> tuple[str, bool]:
    """Replace a block, marker paragraphs included, with raw WordprocessingML.

    The replacement is not validated; it must be well-formed OOXML that fits
    where the block stood. Placeholders split inside the replacement are
    merged like those of a freshly loaded part.

    Returns:
        Tuple of (body XML, whether the block was found)
    """
    region = find_block(xml, name)
    if region is None:
        return xml, False
    return splice_block(xml, region, fix_split_tags(replacement)), True


def delete_block(xml: str, name: str) -> tuple[str, bool]:
    """Remove a block, marker paragraphs included."""
    return replace_block(xml, name, "")

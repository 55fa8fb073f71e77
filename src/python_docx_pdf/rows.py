"""
Table row location and cloning on serialized body XML.

Rows are found by scanning the text around a placeholder for the nearest
``<w:tr>`` before it and the nearest ``</w:tr>`` after it. When the row opens
a vertically merged cell (``<w:vMerge w:val="restart"/>``), the following
rows that continue the merge are treated as part of the same logical row, so
every clone repeats the whole merged span.

Row operations only look at the main document body.
"""

import logging
from dataclasses import dataclass

from .constants import (
    DOCUMENT_PART,
    ROW_CLOSE,
    ROW_OPEN_ATTRIBUTED,
    ROW_OPEN_BARE,
    TABLE_CLOSE,
    VMERGE_CONTINUE_PATTERN,
    VMERGE_RESTART_PATTERN,
)
from .errors import NotFoundError, RowBoundaryError
from .substitution import normalize_start_tag, render_clones

logger = logging.getLogger(__name__)


@dataclass
class RowRegion:
    """Span of a (possibly merge-extended) table row in the body XML.

    Attributes:
        start: Offset of the first row's opening tag
        end: Offset just past the last row's closing tag
        rows: Number of physical w:tr elements in the span
    """

    start: int
    end: int
    rows: int = 1

    def text(self, xml: str) -> str:
        """Get the XML of every row in the span."""
        return xml[self.start : self.end]


def find_row_start(xml: str, offset: int) -> int:
    """Find the nearest row opening tag at or before offset.

    Both the bare ``<w:tr>`` and the attributed ``<w:tr ...>`` forms count.

    Raises:
        RowBoundaryError: If no row opens before offset
    """
    limit = offset + len(ROW_OPEN_ATTRIBUTED)
    start = max(
        xml.rfind(ROW_OPEN_ATTRIBUTED, 0, limit),
        xml.rfind(ROW_OPEN_BARE, 0, limit),
    )
    if start < 0:
        raise RowBoundaryError(offset, "no table row starts before the placeholder")
    return start


def find_next_row_start(xml: str, offset: int) -> int | None:
    """Find the nearest row opening tag at or after offset, or None."""
    candidates = [
        pos
        for pos in (xml.find(ROW_OPEN_ATTRIBUTED, offset), xml.find(ROW_OPEN_BARE, offset))
        if pos >= 0
    ]
    return min(candidates) if candidates else None


def find_row_end(xml: str, offset: int) -> int | None:
    """Find the offset just past the nearest ``</w:tr>`` at or after offset.

    Returns:
        The offset following the closing tag, or None if no row closes after
        offset
    """
    pos = xml.find(ROW_CLOSE, offset)
    if pos < 0:
        return None
    return pos + len(ROW_CLOSE)


def _extend_over_merged_rows(xml: str, region: RowRegion) -> RowRegion:
    """Grow a row span over the rows continuing its vertical merges."""
    end = region.end
    rows = region.rows
    while True:
        next_start = find_next_row_start(xml, end)
        if next_start is None or TABLE_CLOSE in xml[end:next_start]:
            break
        next_end = find_row_end(xml, next_start)
        if next_end is None:
            break
        if not VMERGE_CONTINUE_PATTERN.search(xml[next_start:next_end]):
            break
        end = next_end
        rows += 1
    return RowRegion(start=region.start, end=end, rows=rows)


def find_row(xml: str, search: str) -> RowRegion:
    """Locate the table row holding a placeholder.

    Args:
        xml: Serialized body XML
        search: Tag name, with or without ``${...}`` delimiters

    Returns:
        RowRegion covering the row and any vertically merged continuation rows

    Raises:
        NotFoundError: If the placeholder does not occur in the body
        RowBoundaryError: If the placeholder is not inside a table row
    """
    tag = normalize_start_tag(search)
    tag_pos = xml.find(tag)
    if tag_pos < 0:
        raise NotFoundError(tag, DOCUMENT_PART)

    start = find_row_start(xml, tag_pos)
    if xml.find(ROW_CLOSE, start, tag_pos) >= 0:
        raise RowBoundaryError(tag_pos, f"{tag} is not inside a table row")

    end = find_row_end(xml, tag_pos)
    if end is None:
        raise RowBoundaryError(tag_pos, "no table row ends after the placeholder")

    region = RowRegion(start=start, end=end)
    if VMERGE_RESTART_PATTERN.search(region.text(xml)):
        region = _extend_over_merged_rows(xml, region)
    return region


def clone_row(xml: str, search: str, clones: int) -> str:
    """Repeat the table row holding a placeholder.

    Each copy has every placeholder suffixed with its 1-based ordinal, so
    ``${rowValue}`` in the third copy becomes ``${rowValue_3}``.

    Args:
        xml: Serialized body XML
        search: Tag name, with or without ``${...}`` delimiters
        clones: Number of copies replacing the original row

    Returns:
        The edited body XML

    Raises:
        NotFoundError: If the placeholder does not occur in the body
        RowBoundaryError: If the row around the placeholder cannot be found
    """
    region = find_row(xml, search)
    logger.debug(
        "Cloning %d row(s) at offset %d %d time(s)", region.rows, region.start, clones
    )
    return xml[: region.start] + render_clones(region.text(xml), clones) + xml[region.end :]

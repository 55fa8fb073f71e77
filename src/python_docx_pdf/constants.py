"""
Centralized constants for OOXML part names, namespaces and placeholder syntax.

Import from here rather than repeating part names or regular expressions in
the individual modules.
"""

import re

# =============================================================================
# Word Processing Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# Basic namespace map with just the main Word namespace
NSMAP = {"w": WORD_NAMESPACE}


# =============================================================================
# Package Part Names
# =============================================================================

DOCUMENT_PART = "word/document.xml"
HEADER_PART_TEMPLATE = "word/header{index}.xml"
FOOTER_PART_TEMPLATE = "word/footer{index}.xml"

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


# =============================================================================
# Placeholder Syntax
# =============================================================================

TAG_OPEN = "${"
TAG_CLOSE = "}"
END_TAG_OPEN = "${/"

# Shortest "${" ... "}" match, markup in between included
SPLIT_TAG_PATTERN = re.compile(r"\$\{[^}]+\}")

# Any XML tag, opening, closing or self-closing
MARKUP_PATTERN = re.compile(r"<[^>]+>")

# A contiguous placeholder; group 1 is the name
PLACEHOLDER_PATTERN = re.compile(r"\$\{(.*?)\}")


# =============================================================================
# Table Row Markup
# =============================================================================

ROW_OPEN_BARE = "<w:tr>"
ROW_OPEN_ATTRIBUTED = "<w:tr "
ROW_CLOSE = "</w:tr>"
TABLE_CLOSE = "</w:tbl>"

VMERGE_RESTART_PATTERN = re.compile(r"""<w:vMerge\s+w:val=["']restart["']\s*/>""")
VMERGE_CONTINUE_PATTERN = re.compile(
    r"""<w:vMerge\s*/>|<w:vMerge\s+w:val=["']continue["']\s*/>"""
)


# =============================================================================
# Helper Functions
# =============================================================================


def w(tag: str) -> str:
    """Create a fully qualified Word namespace tag.

    Args:
        tag: Tag name without namespace prefix (e.g., "p", "r", "t")

    Returns:
        Fully qualified tag (e.g., "{http://...wordprocessingml/2006/main}p")

    Example:
        >>> w("p")
        '{http://schemas.openxmlformats.org/wordprocessingml/2006/main}p'
    """
    return f"{{{WORD_NAMESPACE}}}{tag}"


def header_part_name(index: int) -> str:
    """Get the package part name of header ``index`` (1-based)."""
    return HEADER_PART_TEMPLATE.format(index=index)


def footer_part_name(index: int) -> str:
    """Get the package part name of footer ``index`` (1-based)."""
    return FOOTER_PART_TEMPLATE.format(index=index)

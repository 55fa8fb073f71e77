"""
Entry points that pick the template backend for a source document.

Usage:
    from python_docx_pdf import open_template, save_pdf

    template = open_template("invoice.docx")
    template.set_value("name", "Brad Jones")
    save_pdf(template)  # writes invoice.pdf next to invoice.docx

    # Or, without edits:
    from python_docx_pdf import convert
    convert("invoice.docx")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from .backend import Backend
from .errors import UnsupportedDocumentError
from .html import HtmlTemplate, is_html_string
from .template import DocxTemplate

if TYPE_CHECKING:
    from .converters import Converter

logger = logging.getLogger(__name__)

DOCX_SUFFIX = ".docx"
HTML_SUFFIXES = (".html", ".htm")


def open_template(
    source: str | Path | bytes | BinaryIO, converter: Converter | None = None
) -> Backend:
    """Open a template with the backend matching its kind.

    Detection rules:
    - bytes or a binary stream: a .docx archive
    - a string containing ``DOCTYPE``: HTML markup
    - a path ending in .docx: a .docx file
    - a path ending in .html or .htm: an HTML file

    Args:
        source: The template source
        converter: Converter handed to the backend

    Returns:
        DocxTemplate or HtmlTemplate

    Raises:
        UnsupportedDocumentError: If the source kind cannot be recognised
    """
    if isinstance(source, bytes) or hasattr(source, "read"):
        return DocxTemplate(source, converter=converter)

    if isinstance(source, str) and is_html_string(source):
        logger.debug("Opening HTML string template")
        return HtmlTemplate(source, converter=converter)

    path = Path(source)  # type: ignore[arg-type]
    suffix = path.suffix.lower()
    if suffix == DOCX_SUFFIX:
        return DocxTemplate(path, converter=converter)
    if suffix in HTML_SUFFIXES:
        return HtmlTemplate(path, converter=converter)

    raise UnsupportedDocumentError(
        f"Unrecognised document type: {str(source)[:60]!r} (must be a DOCX or HTML file, "
        "or an HTML string with a DOCTYPE)"
    )


def default_pdf_path(template: Backend) -> Path:
    """Get the PDF path next to a template's source file.

    Raises:
        ValueError: If the template was not loaded from a file
    """
    if template.source_path is None:
        raise ValueError("You must supply a path to save the PDF to")
    return template.source_path.with_suffix(".pdf")


def save_pdf(template: Backend, path: str | Path | None = None) -> Path:
    """Generate a template's PDF and write it to disk.

    Args:
        template: The (possibly edited) template
        path: Output path; defaults to the source path with a .pdf suffix

    Returns:
        The path written

    Raises:
        ValueError: If no path is given and the template has no source file
        ConversionError: If the conversion fails
    """
    output = Path(path) if path is not None else default_pdf_path(template)
    pdf = template.generate()
    output.write_bytes(pdf)
    logger.debug("Saved PDF to %s", output)
    return output


def convert(
    source: str | Path | bytes | BinaryIO,
    output: str | Path | None = None,
    converter: Converter | None = None,
) -> Path | bytes:
    """Convert a document to PDF without editing it.

    Args:
        source: Anything ``open_template()`` accepts
        output: PDF path; defaults to the source path with a .pdf suffix

    Returns:
        The PDF path when the source is a file or an output path is given,
        otherwise the PDF bytes
    """
    template = open_template(source, converter=converter)
    if output is None and template.source_path is None:
        return template.generate()
    return save_pdf(template, output)

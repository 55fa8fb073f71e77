"""
python_docx_pdf - Fill ${placeholder} templates in Word documents and convert them to PDF.

This package edits the XML parts of a .docx template directly: it replaces
placeholders (even when Word has split them across formatting runs), repeats
or removes ${block} ... ${/block} regions, clones table rows, and hands the
result to LibreOffice or unoconv for PDF conversion.

Example:
    >>> from python_docx_pdf import open_template, save_pdf
    >>> template = open_template("invoice.docx")
    >>> template.clone_row("rowValue", 2)
    >>> template.set_values({"rowValue_1": "Sun", "rowValue_2": "Mercury"})
    2
    >>> save_pdf(template, "invoice.pdf")
"""

__version__ = "0.1.0"
__all__ = [
    "DocxTemplate",
    "HtmlTemplate",
    "Backend",
    "open_template",
    "convert",
    "save_pdf",
    "DocxPackage",
    "PartsBundle",
    "Converter",
    "ConverterSettings",
    "LibreOfficeConverter",
    "UnoconvConverter",
    "get_converter",
    "fix_split_tags",
    "find_placeholders",
    "EditResult",
    "DocxPdfError",
    "ArchiveError",
    "NotFoundError",
    "RowBoundaryError",
    "EncodingError",
    "ConversionError",
    "UnsupportedDocumentError",
    "UnsupportedOperationError",
    "ValidationError",
]

# Import backends
from .backend import Backend

# Import converters
from .converters import (
    Converter,
    ConverterSettings,
    LibreOfficeConverter,
    UnoconvConverter,
    get_converter,
)
from .errors import (
    ArchiveError,
    ConversionError,
    DocxPdfError,
    EncodingError,
    NotFoundError,
    RowBoundaryError,
    UnsupportedDocumentError,
    UnsupportedOperationError,
    ValidationError,
)

# Import entry points
from .factory import convert, open_template, save_pdf
from .html import HtmlTemplate

# Import placeholder normalization
from .normalize import find_placeholders, fix_split_tags

# Import package class
from .package import DocxPackage, PartsBundle

# Import result types
from .results import EditResult
from .template import DocxTemplate

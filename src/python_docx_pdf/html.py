"""
HtmlTemplate: placeholder substitution in an HTML document before conversion.

HTML templates support plain value substitution only; blocks and table rows
are WordprocessingML structures and have no counterpart here.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from .backend import Backend
from .errors import UnsupportedDocumentError
from .normalize import find_placeholders
from .substitution import escape_value, substitute_n

if TYPE_CHECKING:
    from .converters import Converter

logger = logging.getLogger(__name__)

DOCTYPE_MARKER = "DOCTYPE"


def is_html_string(value: str) -> bool:
    """Check whether a string is HTML markup rather than a file path."""
    return DOCTYPE_MARKER in value


class HtmlTemplate(Backend):
    """An HTML document held in memory while it is being filled."""

    name = "html"

    def __init__(self, source: str | Path, converter: Converter | None = None) -> None:
        """Load an HTML template.

        Args:
            source: Path to an .html file, or an HTML string containing a
                DOCTYPE declaration
            converter: Converter for ``generate()``; LibreOffice when omitted

        Raises:
            UnsupportedDocumentError: If source is neither an HTML file nor an
                HTML string
        """
        self._source_path: Path | None = None
        if isinstance(source, str) and is_html_string(source):
            self.text = source
        else:
            path = Path(source)
            if not path.is_file():
                raise UnsupportedDocumentError(
                    f"Not an HTML file or HTML string: {str(source)[:60]!r}"
                )
            self._source_path = path
            self.text = path.read_text(encoding="utf-8")
        self.converter = converter

    @property
    def source_path(self) -> Path | None:
        return self._source_path

    def set_value(self, search: str, replace: object, limit: int = -1) -> int:
        escape_value(replace)
        self.text, count = substitute_n(self.text, search, replace, limit)
        return count

    def placeholders(self) -> list[str]:
        return find_placeholders(self.text)

    def save(self, path: str | Path | None = None) -> Path:
        """Write the filled HTML to path (default: the source file)."""
        if path is None:
            if self._source_path is None:
                raise ValueError("No output path given for a template loaded from a string")
            path = self._source_path
        path = Path(path)
        path.write_text(self.text, encoding="utf-8")
        return path

    def generate(self) -> bytes:
        if self.converter is None:
            from .converters import LibreOfficeConverter

            self.converter = LibreOfficeConverter()

        stem = self._source_path.stem if self._source_path else "document"
        with tempfile.TemporaryDirectory(prefix="docx_pdf_") as temp_dir:
            html_path = Path(temp_dir) / f"{stem}.html"
            html_path.write_text(self.text, encoding="utf-8")
            logger.debug("Converting %s with %s", html_path, self.converter.name)
            return self.converter.convert(html_path)

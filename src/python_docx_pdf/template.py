"""
DocxTemplate: placeholder editing of a .docx template before PDF conversion.

Example:
    >>> from python_docx_pdf import DocxTemplate
    >>> template = DocxTemplate("invoice.docx")
    >>> template.set_value("name", "Brad Jones")
    1
    >>> template.clone_row("rowValue", 3)
    >>> template.save("invoice-filled.docx")
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from . import blocks, rows
from .backend import Backend
from .normalize import find_placeholders
from .package import DocxPackage, PartsBundle
from .substitution import escape_value, substitute_n

if TYPE_CHECKING:
    from .converters import Converter

logger = logging.getLogger(__name__)


class DocxTemplate(Backend):
    """A .docx template held in memory while it is being filled.

    The archive is read once on construction. Every edit works on the
    in-memory parts; nothing touches the disk until ``save()`` or
    ``generate()`` is called.

    Attributes:
        converter: The converter used by ``generate()`` (LibreOffice when not
            given)
    """

    name = "docx"

    def __init__(
        self,
        source: str | Path | bytes | BinaryIO,
        converter: Converter | None = None,
    ) -> None:
        """Open a template.

        Args:
            source: Path to a .docx file, its bytes, or a binary stream
            converter: Converter for ``generate()``; discovered on first use
                when omitted

        Raises:
            ArchiveError: If the source is not a readable .docx archive
        """
        self._package = DocxPackage.open(source)
        self._parts: PartsBundle = self._package.load()
        self.converter = converter

    @property
    def source_path(self) -> Path | None:
        return self._package.source_path

    @property
    def parts(self) -> PartsBundle:
        """Get the in-memory XML parts."""
        return self._parts

    def set_value(self, search: str, replace: object, limit: int = -1) -> int:
        """Replace a placeholder in the body, then the headers, then the footers.

        The limit applies to each part on its own. A placeholder that does not
        occur anywhere is not an error.

        Args:
            search: Tag name, with or without ``${...}`` delimiters
            replace: Replacement value; escaped before insertion
            limit: Maximum replacements per part; negative means all

        Returns:
            Total number of replacements made

        Raises:
            EncodingError: If the value cannot be written as XML text
        """
        # Validate before touching any part so a bad value changes nothing
        escape_value(replace)

        bundle = self._parts
        total = 0
        bundle.body, count = substitute_n(bundle.body, search, replace, limit)
        total += count
        for index, xml in bundle.headers.items():
            bundle.headers[index], count = substitute_n(xml, search, replace, limit)
            total += count
        for index, xml in bundle.footers.items():
            bundle.footers[index], count = substitute_n(xml, search, replace, limit)
            total += count

        if total == 0:
            logger.debug("No occurrence of %s to replace", search)
        return total

    def clone_block(self, name: str, clones: int = 1, replace: bool = True) -> str | None:
        """Repeat a block of the body.

        Args:
            name: Block name
            clones: Number of copies
            replace: If False, leave the body alone and only return the block

        Returns:
            The block's inner XML, or None if the block does not exist
        """
        self._parts.body, block = blocks.clone_block(self._parts.body, name, clones, replace)
        if block is None:
            logger.debug("Block %s not found; nothing to clone", name)
        return block

    def replace_block(self, name: str, replacement: str) -> bool:
        """Replace a block of the body with raw WordprocessingML.

        Returns:
            True if the block was found and replaced
        """
        self._parts.body, found = blocks.replace_block(self._parts.body, name, replacement)
        if not found:
            logger.debug("Block %s not found; nothing to replace", name)
        return found

    def delete_block(self, name: str) -> bool:
        """Remove a block of the body.

        Returns:
            True if the block was found and removed
        """
        self._parts.body, found = blocks.delete_block(self._parts.body, name)
        if not found:
            logger.debug("Block %s not found; nothing to delete", name)
        return found

    def clone_row(self, search: str, clones: int) -> None:
        """Repeat the table row holding a placeholder.

        Raises:
            NotFoundError: If the placeholder is not in the body
            RowBoundaryError: If the placeholder is not inside a table row
        """
        self._parts.body = rows.clone_row(self._parts.body, search, clones)

    def placeholders(self) -> list[str]:
        names: list[str] = []
        for _, xml in self._parts.parts():
            for placeholder in find_placeholders(xml):
                if placeholder not in names:
                    names.append(placeholder)
        return names

    def save(self, path: str | Path | None = None) -> Path:
        """Save the template as a .docx file.

        Args:
            path: Output path; defaults to the file the template came from

        Returns:
            The path written

        Raises:
            ValueError: If no path is given for a template loaded from memory
            ArchiveError: If the archive cannot be written
        """
        if path is None:
            if self.source_path is None:
                raise ValueError("No output path given for a template loaded from memory")
            path = self.source_path
        path = Path(path)
        self._package.save(self._parts, path)
        return path

    def save_to_bytes(self) -> bytes:
        """Get the filled template as .docx bytes."""
        return self._package.save_to_bytes(self._parts)

    def generate(self) -> bytes:
        """Convert the filled template to PDF.

        The template is written to a temporary .docx (named after the source
        file when there is one) and handed to the converter.

        Raises:
            ConversionError: If no converter is available or conversion fails
        """
        if self.converter is None:
            from .converters import LibreOfficeConverter

            self.converter = LibreOfficeConverter()

        stem = self.source_path.stem if self.source_path else "document"
        with tempfile.TemporaryDirectory(prefix="docx_pdf_") as temp_dir:
            docx_path = Path(temp_dir) / f"{stem}.docx"
            docx_path.write_bytes(self.save_to_bytes())
            logger.debug("Converting %s with %s", docx_path, self.converter.name)
            return self.converter.convert(docx_path)

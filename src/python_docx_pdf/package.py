"""
DocxPackage class for reading and writing the XML parts of a .docx template.

This module provides a clean abstraction for the OOXML package format,
separating ZIP handling from the text edits applied to the parts.
"""

import io
import logging
import os
import tempfile
import zipfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from .constants import DOCUMENT_PART, footer_part_name, header_part_name
from .errors import ArchiveError
from .normalize import fix_split_tags

logger = logging.getLogger(__name__)


@dataclass
class PartsBundle:
    """The editable XML parts of one template.

    Attributes:
        body: XML of word/document.xml
        headers: Header XML keyed by 1-based index (word/header<N>.xml)
        footers: Footer XML keyed by 1-based index (word/footer<N>.xml)
    """

    body: str
    headers: dict[int, str] = field(default_factory=dict)
    footers: dict[int, str] = field(default_factory=dict)

    def parts(self) -> Iterator[tuple[str, str]]:
        """Iterate over (part name, XML) pairs: body, headers, then footers."""
        yield DOCUMENT_PART, self.body
        for index, xml in self.headers.items():
            yield header_part_name(index), xml
        for index, xml in self.footers.items():
            yield footer_part_name(index), xml

    @property
    def part_names(self) -> list[str]:
        """Get the package part names held by this bundle."""
        return [name for name, _ in self.parts()]


class DocxPackage:
    """Manages the ZIP container of a .docx template.

    The archive is read into memory once when opened and written once when
    saved; no file handle stays open in between, so a session of edits never
    holds a lock on the source file.

    Example:
        >>> package = DocxPackage.open("template.docx")
        >>> bundle = package.load()
        >>> bundle.body = bundle.body.replace("${name}", "Brad")
        >>> package.save(bundle, "filled.docx")
    """

    def __init__(self, data: bytes, source_path: Path | None = None) -> None:
        """Initialize package from the raw bytes of a .docx file.

        Use the class methods `open()` or `from_bytes()` instead of
        calling this constructor directly.

        Args:
            data: The complete .docx file as bytes
            source_path: Original source file path, if loaded from disk
        """
        self._data = data
        self._source_path = source_path

    @classmethod
    def open(cls, source: str | Path | bytes | BinaryIO) -> "DocxPackage":
        """Open a .docx package from a path, bytes or a binary stream.

        Args:
            source: Path to .docx file, its bytes, or a file-like object

        Returns:
            DocxPackage holding the archive contents

        Raises:
            ArchiveError: If the source cannot be read or is not a valid ZIP
                file with a main document part
        """
        source_path: Path | None = None

        if isinstance(source, bytes):
            data = source
        elif hasattr(source, "read"):
            data = source.read()  # type: ignore[union-attr]
            if not isinstance(data, bytes):
                raise ArchiveError("Stream must be opened in binary mode")
        else:
            source_path = Path(source)  # type: ignore[arg-type]
            if not source_path.is_file():
                raise ArchiveError(f"Document not found: {source_path}")
            try:
                data = source_path.read_bytes()
            except OSError as e:
                raise ArchiveError(f"Failed to read {source_path}: {e}") from e

        if not zipfile.is_zipfile(io.BytesIO(data)):
            raise ArchiveError("Source must be a valid .docx (ZIP) file")

        package = cls(data, source_path)
        if not package.part_exists(DOCUMENT_PART):
            raise ArchiveError(f"{DOCUMENT_PART} not found in {package.describe()}")
        return package

    @classmethod
    def from_bytes(cls, data: bytes) -> "DocxPackage":
        """Open a .docx package from bytes."""
        return cls.open(data)

    @property
    def source_path(self) -> Path | None:
        """Get the original source file path, if available."""
        return self._source_path

    def describe(self) -> str:
        """Describe the package source for log and error messages."""
        return str(self._source_path) if self._source_path else "<in-memory document>"

    def part_exists(self, part_name: str) -> bool:
        """Check if a package part exists.

        Args:
            part_name: Relative path within the package (e.g., "word/header1.xml")

        Returns:
            True if the part exists
        """
        with zipfile.ZipFile(io.BytesIO(self._data)) as zf:
            return part_name in zf.namelist()

    def load(self) -> PartsBundle:
        """Read the body, headers and footers into a normalized PartsBundle.

        Headers and footers are probed as header1, header2, ... and stop at
        the first missing index. Every part is run through the split-tag
        normalizer exactly once here.

        Returns:
            PartsBundle with the normalized XML of every part

        Raises:
            ArchiveError: If a part cannot be read or is not valid UTF-8
        """
        try:
            with zipfile.ZipFile(io.BytesIO(self._data)) as zf:
                names = set(zf.namelist())
                body = self._read_part(zf, DOCUMENT_PART)
                headers = self._probe_parts(zf, names, header_part_name)
                footers = self._probe_parts(zf, names, footer_part_name)
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Failed to read {self.describe()}: {e}") from e

        logger.debug(
            "Loaded %s with %d header(s) and %d footer(s)",
            self.describe(),
            len(headers),
            len(footers),
        )
        return PartsBundle(body=body, headers=headers, footers=footers)

    def _probe_parts(
        self, zf: zipfile.ZipFile, names: set[str], name_for: Callable[[int], str]
    ) -> dict[int, str]:
        """Read numbered parts from index 1 until the first missing one."""
        parts: dict[int, str] = {}
        index = 1
        while name_for(index) in names:
            parts[index] = self._read_part(zf, name_for(index))
            index += 1
        return parts

    def _read_part(self, zf: zipfile.ZipFile, part_name: str) -> str:
        """Read one part as UTF-8 text and normalize its placeholders."""
        try:
            text = zf.read(part_name).decode("utf-8")
        except KeyError as e:
            raise ArchiveError(f"{part_name} not found in {self.describe()}") from e
        except UnicodeDecodeError as e:
            raise ArchiveError(f"{part_name} is not valid UTF-8: {e}") from e
        return fix_split_tags(text)

    def _write_archive(self, bundle: PartsBundle, target: BinaryIO) -> None:
        """Write the original archive to target with the bundle's parts replaced.

        Entry order, timestamps and compression of the original are kept.
        """
        replacements = {name: xml.encode("utf-8") for name, xml in bundle.parts()}

        with zipfile.ZipFile(io.BytesIO(self._data)) as zin:
            with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as zout:
                for info in zin.infolist():
                    entry = zipfile.ZipInfo(info.filename, date_time=info.date_time)
                    entry.compress_type = info.compress_type
                    entry.external_attr = info.external_attr
                    data = replacements.pop(info.filename, None)
                    zout.writestr(entry, data if data is not None else zin.read(info))

                # Parts added to the bundle that the original archive lacked
                for name, data in replacements.items():
                    zout.writestr(name, data)

    def save(self, bundle: PartsBundle, output_path: str | Path) -> None:
        """Write the bundle's parts into a .docx file.

        The new archive is written next to the target and moved into place,
        so a failed write never leaves a truncated file at output_path.

        Args:
            bundle: The parts to write back
            output_path: Path of the .docx file to (over)write

        Raises:
            ArchiveError: If the archive cannot be written or finalized
        """
        output_path = Path(output_path)
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=".python_docx_pdf_", suffix=".docx", dir=output_path.parent
            )
        except OSError as e:
            raise ArchiveError(f"Failed to save document to {output_path}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                self._write_archive(bundle, f)
            os.replace(temp_name, output_path)
        except (OSError, zipfile.BadZipFile) as e:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise ArchiveError(f"Failed to save document to {output_path}: {e}") from e

        logger.debug("Saved %d part(s) to %s", len(bundle.part_names), output_path)

    def save_to_bytes(self, bundle: PartsBundle) -> bytes:
        """Write the bundle's parts into a .docx archive in memory.

        Returns:
            The complete .docx file as bytes
        """
        buffer = io.BytesIO()
        try:
            self._write_archive(bundle, buffer)
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Failed to save document to bytes: {e}") from e
        return buffer.getvalue()

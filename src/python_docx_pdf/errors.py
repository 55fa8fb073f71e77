"""
Custom exception classes for python_docx_pdf package.

These exceptions carry enough context to tell the caller which part,
placeholder or external command was involved when a template operation fails.
"""


class DocxPdfError(Exception):
    """Base exception for all python_docx_pdf errors."""

    pass


class ArchiveError(DocxPdfError):
    """Raised when the .docx container cannot be read or written.

    This can occur when:
    - The source is not a valid ZIP file
    - The main document part (word/document.xml) is missing
    - A part is not valid UTF-8
    - The archive cannot be finalized on save
    """

    pass


class NotFoundError(DocxPdfError):
    """Raised when a placeholder, block or row anchor does not exist.

    Attributes:
        tag: The placeholder that was searched for (e.g. "${rowValue}")
        part: The package part that was searched (None if every part)
    """

    def __init__(self, tag: str, part: str | None = None) -> None:
        self.tag = tag
        self.part = part
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message naming the missing tag."""
        msg = f"Could not find '{self.tag}'"
        if self.part:
            msg += f" in {self.part}"
        msg += (
            "\n\nThe template variable is missing, or it still contains markup "
            "that could not be merged into a single token."
        )
        return msg


class RowBoundaryError(DocxPdfError):
    """Raised when the table row around a placeholder cannot be determined.

    Attributes:
        offset: Character offset of the placeholder in the part XML
    """

    def __init__(self, offset: int, reason: str | None = None) -> None:
        self.offset = offset
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with the failing offset."""
        msg = f"Can not find the table row around offset {self.offset}"
        if self.reason:
            msg += f": {self.reason}"
        return msg


class EncodingError(DocxPdfError):
    """Raised when a replacement value cannot be written as XML character data.

    Attributes:
        value: The offending value (truncated representation in the message)
    """

    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid replacement value {repr(value)[:60]}: {reason}")


class ConversionError(DocxPdfError):
    """Raised when an external converter fails or cannot be found.

    Attributes:
        command: The command line that was run (None if it never ran)
        returncode: Exit status of the converter process
        stderr: Error output captured from the converter
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class UnsupportedDocumentError(DocxPdfError):
    """Raised when a source is neither a .docx/.html file nor an HTML string."""

    pass


class UnsupportedOperationError(DocxPdfError):
    """Raised when a template operation is not available for a backend.

    Attributes:
        operation: Name of the requested operation
        backend: Name of the backend that rejected it
    """

    def __init__(self, operation: str, backend: str) -> None:
        self.operation = operation
        self.backend = backend
        super().__init__(f"{backend} does not support '{operation}'")


class ValidationError(DocxPdfError):
    """Raised when an edit file or an edit entry is malformed."""

    pass

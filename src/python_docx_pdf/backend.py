"""
Backend capability interface shared by the DOCX and HTML templates.

A template is picked once, when the source is opened (see ``factory``), and
every operation after that is a plain method call on the chosen backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .errors import UnsupportedOperationError
from .operations import BatchOperations
from .results import EditResult


class Backend(ABC):
    """Operations every template backend answers.

    Backends that cannot perform a structural edit raise
    UnsupportedOperationError instead of silently ignoring the call.
    """

    #: Short name used in log and error messages
    name: str = "backend"

    @property
    @abstractmethod
    def source_path(self) -> Path | None:
        """Get the path the template was loaded from, if any."""

    @abstractmethod
    def set_value(self, search: str, replace: object, limit: int = -1) -> int:
        """Replace a placeholder and return the number of replacements."""

    def set_values(self, values: dict[str, object]) -> int:
        """Replace several placeholders at once.

        Args:
            values: Mapping of tag name to replacement value

        Returns:
            Total number of replacements made
        """
        return sum(self.set_value(search, replace) for search, replace in values.items())

    def clone_block(self, name: str, clones: int = 1, replace: bool = True) -> str | None:
        raise UnsupportedOperationError("clone_block", self.name)

    def replace_block(self, name: str, replacement: str) -> bool:
        raise UnsupportedOperationError("replace_block", self.name)

    def delete_block(self, name: str) -> bool:
        raise UnsupportedOperationError("delete_block", self.name)

    def clone_row(self, search: str, clones: int) -> None:
        raise UnsupportedOperationError("clone_row", self.name)

    @abstractmethod
    def placeholders(self) -> list[str]:
        """List the distinct placeholder names in the template."""

    @abstractmethod
    def save(self, path: str | Path | None = None) -> Path:
        """Write the filled template in its own format and return the path."""

    @abstractmethod
    def generate(self) -> bytes:
        """Render the current template state to PDF bytes."""

    @property
    def _batch_ops(self) -> BatchOperations:
        """Get the BatchOperations instance (lazy initialization)."""
        if not hasattr(self, "_batch_ops_instance"):
            self._batch_ops_instance = BatchOperations(self)
        return self._batch_ops_instance

    def apply_edits(
        self, edits: list[dict[str, Any]], stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply a list of edit dictionaries in order.

        See BatchOperations.apply_edits for the accepted edit types.
        """
        return self._batch_ops.apply_edits(edits, stop_on_error=stop_on_error)

    def apply_edit_file(
        self, path: str | Path, format: str | None = None, stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply edits from a YAML or JSON edit file.

        Example:
            >>> results = template.apply_edit_file("edits.yaml")
            >>> print(f"Applied {sum(r.success for r in results)}/{len(results)} edits")
        """
        return self._batch_ops.apply_edit_file(path, format=format, stop_on_error=stop_on_error)

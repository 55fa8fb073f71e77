"""
Result classes for template operations.

This module provides result types that track the success/failure of
batch-applied template edits.
"""

from dataclasses import dataclass


@dataclass
class EditResult:
    """Result of applying a single edit operation.

    Attributes:
        success: Whether the edit was applied successfully
        edit_type: Type of edit (e.g., "set_value", "clone_row")
        message: Human-readable message about the result
        count: Number of places the edit touched, where that is known
        error: Optional exception that occurred during the edit
    """

    success: bool
    edit_type: str
    message: str
    count: int | None = None
    error: Exception | None = None

    def __str__(self) -> str:
        """Get string representation of the result."""
        status = "✓" if self.success else "✗"
        return f"{status} {self.edit_type}: {self.message}"

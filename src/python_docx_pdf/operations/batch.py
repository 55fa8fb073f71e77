"""
BatchOperations class for applying template edits in bulk.

Edits are plain dictionaries, either built in code or loaded from a YAML or
JSON edit file, so that a template can be filled from data prepared by
another program.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from ..errors import NotFoundError, RowBoundaryError, ValidationError
from ..results import EditResult

if TYPE_CHECKING:
    from ..backend import Backend


class BatchOperations:
    """Handles batch edit operations.

    The class takes a template reference and dispatches each edit to the
    matching template method.

    Example:
        >>> template = DocxTemplate("invoice.docx")
        >>> edits = [
        ...     {"type": "clone_row", "name": "rowValue", "count": 2},
        ...     {"type": "set_value", "name": "rowValue_1", "value": "Sun"},
        ...     {"type": "delete_block", "name": "DELETEME"},
        ... ]
        >>> results = template.apply_edits(edits)
    """

    def __init__(self, template: Backend) -> None:
        """Initialize BatchOperations with a template reference.

        Args:
            template: The template to operate on
        """
        self._template = template

    def apply_edits(
        self, edits: list[dict[str, Any]], stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply multiple edits in sequence.

        Args:
            edits: List of edit dictionaries with keys:
                - type: Edit operation ("set_value", "clone_block",
                  "replace_block", "delete_block", "clone_row")
                - Other parameters specific to the edit type
            stop_on_error: If True, stop processing on first error

        Returns:
            List of EditResult objects, one per edit
        """
        results = []

        for i, edit in enumerate(edits):
            if not isinstance(edit, dict):
                result = EditResult(
                    success=False,
                    edit_type="unknown",
                    message=f"Edit {i}: Expected a mapping, got {type(edit).__name__}",
                    error=ValidationError("Edit must be a mapping"),
                )
            elif not edit.get("type"):
                result = EditResult(
                    success=False,
                    edit_type="unknown",
                    message=f"Edit {i}: Missing 'type' field",
                    error=ValidationError("Missing 'type' field"),
                )
            else:
                result = self._apply_single_edit(edit["type"], edit)

            results.append(result)
            if not result.success and stop_on_error:
                break

        return results

    def _apply_single_edit(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Apply a single edit operation.

        Args:
            edit_type: The type of edit to perform
            edit: Dictionary with edit parameters

        Returns:
            EditResult indicating success or failure
        """
        # Dispatch table mapping edit types to handler methods
        handlers = {
            "set_value": self._handle_set_value,
            "clone_block": self._handle_clone_block,
            "replace_block": self._handle_replace_block,
            "delete_block": self._handle_delete_block,
            "clone_row": self._handle_clone_row,
        }

        handler = handlers.get(edit_type)
        if handler is None:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message=f"Unknown edit type: {edit_type}",
                error=ValidationError(f"Unknown edit type: {edit_type}"),
            )

        name = edit.get("name")
        if not name:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message="Missing required parameter: 'name'",
                error=ValidationError("Missing required parameter"),
            )

        try:
            return handler(edit_type, str(name), edit)
        except NotFoundError as e:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message=f"Placeholder not found: {e.tag}",
                error=e,
            )
        except RowBoundaryError as e:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message=f"Row not found: {e}",
                error=e,
            )
        except Exception as e:
            return EditResult(
                success=False, edit_type=edit_type, message=f"Error: {str(e)}", error=e
            )

    def _handle_set_value(self, edit_type: str, name: str, edit: dict[str, Any]) -> EditResult:
        """Handle set_value edit type."""
        if "value" not in edit:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message="Missing required parameter: 'value'",
                error=ValidationError("Missing required parameter"),
            )

        value = edit["value"]
        limit = int(edit.get("limit", -1))
        count = self._template.set_value(name, "" if value is None else value, limit=limit)
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Replaced {count} occurrence(s) of '{name}'",
            count=count,
        )

    def _handle_clone_block(self, edit_type: str, name: str, edit: dict[str, Any]) -> EditResult:
        """Handle clone_block edit type."""
        count = int(edit.get("count", 1))
        block = self._template.clone_block(name, clones=count)
        if block is None:
            return EditResult(
                success=True,
                edit_type=edit_type,
                message=f"Block '{name}' not found; nothing to clone",
                count=0,
            )
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Cloned block '{name}' {count} time(s)",
            count=count,
        )

    def _handle_replace_block(
        self, edit_type: str, name: str, edit: dict[str, Any]
    ) -> EditResult:
        """Handle replace_block edit type."""
        replacement = edit.get("xml")
        if replacement is None:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message="Missing required parameter: 'xml'",
                error=ValidationError("Missing required parameter"),
            )

        found = self._template.replace_block(name, str(replacement))
        message = f"Replaced block '{name}'" if found else f"Block '{name}' not found"
        return EditResult(
            success=True, edit_type=edit_type, message=message, count=int(found)
        )

    def _handle_delete_block(self, edit_type: str, name: str, edit: dict[str, Any]) -> EditResult:
        """Handle delete_block edit type."""
        found = self._template.delete_block(name)
        message = f"Deleted block '{name}'" if found else f"Block '{name}' not found"
        return EditResult(
            success=True, edit_type=edit_type, message=message, count=int(found)
        )

    def _handle_clone_row(self, edit_type: str, name: str, edit: dict[str, Any]) -> EditResult:
        """Handle clone_row edit type."""
        if "count" not in edit:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message="Missing required parameter: 'count'",
                error=ValidationError("Missing required parameter"),
            )

        count = int(edit["count"])
        self._template.clone_row(name, count)
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Cloned row of '{name}' {count} time(s)",
            count=count,
        )

    def apply_edit_file(
        self, path: str | Path, format: str | None = None, stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply edits from a YAML or JSON file.

        The file should contain an 'edits' key with a list of edit dictionaries.

        Args:
            path: Path to the edit file
            format: "yaml" or "json"; guessed from the file suffix when omitted
            stop_on_error: If True, stop processing on first error

        Returns:
            List of EditResult objects, one per edit

        Raises:
            ValidationError: If file cannot be parsed or has invalid format
            FileNotFoundError: If file does not exist

        Example YAML file:
            ```yaml
            edits:
              - type: clone_row
                name: rowValue
                count: 2
              - type: set_value
                name: rowValue_1
                value: Sun
            ```
        """
        file_path = Path(path)

        if not file_path.exists():
            raise FileNotFoundError(f"Edit file not found: {path}")

        if format is None:
            format = "json" if file_path.suffix.lower() == ".json" else "yaml"

        try:
            with open(file_path, encoding="utf-8") as f:
                if format == "yaml":
                    data = yaml.safe_load(f)
                elif format == "json":
                    data = json.load(f)
                else:
                    raise ValidationError(f"Unsupported format: {format}")
        except yaml.YAMLError as e:
            raise ValidationError(f"Failed to parse YAML file: {e}") from e
        except json.JSONDecodeError as e:
            raise ValidationError(f"Failed to parse JSON file: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("Edit file must contain a dictionary/object")

        if "edits" not in data:
            raise ValidationError("Edit file must contain an 'edits' key")

        edits = data["edits"]
        if not isinstance(edits, list):
            raise ValidationError("'edits' must be a list")

        return self.apply_edits(edits, stop_on_error=stop_on_error)

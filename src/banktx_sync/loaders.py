"""
Loaders for JSON input files.

Updated transactions (what the bank shows) and stored rows (for offline
planning) are JSON arrays of objects, checked against a JSON Schema before
anything else looks at them.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema

from .sequence.models import DEFAULT_FIELDS, FieldMap


class InputFileError(Exception):
    """Raised when an input file is missing, unreadable or malformed."""


_SCALAR = {"type": ["string", "number"]}


def updated_transactions_schema(fields: FieldMap = DEFAULT_FIELDS, require_date: bool = True) -> dict:
    required = [fields.description, fields.amount]
    if require_date:
        required.append(fields.date)
    return {
        "type": "array",
        "items": {
            "type": "object",
            "required": required,
            "properties": {
                fields.description: {"type": "string"},
                fields.amount: _SCALAR,
                fields.date: {"type": "string"},
            },
        },
    }


def stored_rows_schema(fields: FieldMap = DEFAULT_FIELDS) -> dict:
    return {
        "type": "array",
        "items": {
            "type": "object",
            "required": [fields.identity, fields.position, fields.description, fields.amount],
            "properties": {
                fields.identity: {"type": ["string", "integer"]},
                fields.position: {"type": "integer"},
                fields.description: {"type": "string"},
                fields.amount: _SCALAR,
            },
        },
    }


def _load_json(path: str | Path) -> Any:
    file_path = Path(path)
    if not file_path.exists():
        raise InputFileError(f"File not found: {file_path}")
    try:
        with file_path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InputFileError(f"Invalid JSON in {file_path}: {e}") from e


def _check(data: Any, schema: dict, path: str | Path) -> None:
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.exceptions.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise InputFileError(f"{path}: {location}: {e.message}") from e


def load_updated_transactions(
    path: str | Path,
    fields: FieldMap = DEFAULT_FIELDS,
    require_date: bool = True,
) -> list[dict[str, Any]]:
    """
    Load the bank's current transactions.

    Raises:
        InputFileError: If the file is missing or does not match the schema
    """
    data = _load_json(path)
    _check(data, updated_transactions_schema(fields, require_date), path)
    return data


def load_stored_rows(path: str | Path, fields: FieldMap = DEFAULT_FIELDS) -> list[dict[str, Any]]:
    """
    Load stored rows for offline planning.

    Rows are returned in file order; position checks are the validator's job.

    Raises:
        InputFileError: If the file is missing or does not match the schema
    """
    data = _load_json(path)
    _check(data, stored_rows_schema(fields), path)
    return data

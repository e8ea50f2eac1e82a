"""
Report formatting and export for reconciliation runs.

Console output for people, JSON for scripts.
"""

import json
from pathlib import Path
from typing import Any

from .sequence.operations import Operation, OperationType, count_by_type
from .sequence.reconciler import ReconcileResult
from .sync import SyncResult


def describe_operation(op: Operation) -> str:
    """One-line human description of an operation."""
    if op.op_type == OperationType.RENUMBER:
        return f"RENUMBER id={op.identity} -> {op.new_position}"
    if op.op_type == OperationType.INSERT:
        extra = ""
        if op.attributes:
            extra = " " + ", ".join(f"{k}={v}" for k, v in sorted(op.attributes.items()))
        return f"INSERT   pos={op.position} {op.description!r} {op.amount}{extra}"
    return f"DELETE   id={op.identity}"


def _format_day(result: ReconcileResult, lines: list[str]) -> None:
    counts = count_by_type(result.operations)
    lines.append(f"Day: {result.day or '-'}")
    lines.append(f"  Status: {result.status} ({result.code})")
    lines.append(f"  Message: {result.message}")
    if result.issue:
        lines.append(f"  Issue: {result.issue}")
    if result.protected_identity is not None:
        lines.append(f"  Protected id: {result.protected_identity}")
    if result.operations:
        lines.append(
            f"  Operations: {len(result.operations)} "
            f"({counts['INSERT']} insert, {counts['DELETE']} delete, "
            f"{counts['RENUMBER']} renumber)"
        )
        for i, op in enumerate(result.operations, 1):
            lines.append(f"    {i:>3}. {describe_operation(op)}")
    lines.append("")


def format_plan_console(
    result: ReconcileResult,
    final_rows: list[dict[str, Any]] | None = None,
    position_field: str = "seq",
) -> str:
    """
    Format an offline plan for console output

    Args:
        result: Reconciliation result for the day
        final_rows: Rows after replaying the operations, if they were replayed
        position_field: Name of the position column in ``final_rows``

    Returns:
        Formatted string for console display
    """
    lines = ["=" * 80, "SEQUENCE PLAN", "=" * 80]
    _format_day(result, lines)

    if final_rows is not None:
        lines.append("RESULTING ROWS")
        lines.append("-" * 80)
        for row in final_rows:
            row_text = ", ".join(f"{k}={v}" for k, v in row.items() if k != position_field)
            lines.append(f"{row.get(position_field):>4}  {row_text}")
        lines.append("")

    lines.append("=" * 80)
    return "\n".join(lines)


def format_sync_console(result: SyncResult) -> str:
    """
    Format a database run for console output

    Args:
        result: Result of ``update_banktx_db``

    Returns:
        Formatted string for console display
    """
    lines = ["=" * 80, "BANK TRANSACTION UPDATE", "=" * 80]
    lines.append(f"Result: {result.code} {result.message}")
    lines.append(f"Days: {len(result.days)}")
    if result.apply:
        lines.append(f"Apply: {result.apply.status} ({result.apply.applied} statement(s))")
    lines.append("")

    if result.days:
        lines.append("DAYS")
        lines.append("-" * 80)
        for day in result.days:
            _format_day(day, lines)

    lines.append("=" * 80)
    return "\n".join(lines)


def export_json(data: dict[str, Any], output_path: str) -> None:
    """
    Write a result dictionary to a JSON file

    Args:
        data: Result of ``to_dict()``
        output_path: Path to output file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)

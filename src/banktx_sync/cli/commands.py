"""
CLI command implementations.

This module contains the implementation of the two CLI commands:
- update: Reconcile a PostgreSQL table with the bank's transactions
- plan: Reconcile one day offline from JSON files

Both return the process exit code.
"""

import argparse
import json
import logging
from pathlib import Path

import psycopg2

from ..config import DatabaseConfig, SyncConfig, fields_from_args, parse_extra_columns
from ..emit import EmitError, InMemoryEmitter, generate_script
from ..loaders import load_stored_rows, load_updated_transactions
from ..report import export_json, format_plan_console, format_sync_console
from ..sequence import SequenceReconciler, get_fingerprint
from ..sync import update_banktx_db

logger = logging.getLogger(__name__)

EXIT_CODES = {
    200: 0,
    304: 0,
    400: 2,
    412: 3,
}


def exit_code_for(status_code: int) -> int:
    """Map a result code to a process exit code (1 for anything unexpected)."""
    return EXIT_CODES.get(status_code, 1)


def parse_protected_ids(value: str | None) -> set:
    """
    Parse ``--protected-ids``; numeric items become ints to match JSON ids.
    """
    if not value:
        return set()
    ids = set()
    for item in value.split(','):
        item = item.strip()
        if not item:
            continue
        ids.add(int(item) if item.lstrip('-').isdigit() else item)
    return ids


def _write_script(path: str, text: str) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    logger.info(f"SQL script saved to {output}")


def cmd_update(args: argparse.Namespace) -> int:
    """
    Reconcile a table against the bank's current transactions

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    db_config = DatabaseConfig.from_args(args)
    sync_config = SyncConfig.from_args(args)
    updated = load_updated_transactions(args.updates, sync_config.fields)

    logger.info(f"Updating {sync_config.table} from {len(updated)} bank transaction(s)")

    try:
        connection = psycopg2.connect(**db_config.connect_kwargs())
    except psycopg2.Error as e:
        logger.error(f"Cannot connect to PostgreSQL: {e}")
        return 1

    try:
        result = update_banktx_db(connection, updated, sync_config, dry_run=args.dry_run)
    finally:
        connection.close()

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        print(format_sync_console(result))

    if args.sql_output and result.operations:
        days = ", ".join(day.day for day in result.days if day.day)
        _write_script(
            args.sql_output,
            generate_script(result.operations, sync_config.table, sync_config.fields, f"Days: {days}"),
        )

    if args.report:
        export_json(result.to_dict(), args.report)
        logger.info(f"Report saved to {args.report}")

    if not result.ok:
        logger.warning(f"Update not applied: {result.code} {result.message}")
    return exit_code_for(result.code)


def cmd_plan(args: argparse.Namespace) -> int:
    """
    Reconcile one day from JSON files without a database

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    fields = fields_from_args(args)
    stored = load_stored_rows(args.stored, fields)
    targets = load_updated_transactions(args.updates, fields, require_date=False)

    reconciler = SequenceReconciler(
        fields=fields,
        fingerprint=get_fingerprint(args.fingerprint),
        insert_defaults=parse_extra_columns(args.extra_column or []),
    )
    result = reconciler.reconcile(
        stored, targets, protection=parse_protected_ids(args.protected_ids), day=args.day
    )

    final_rows = None
    if result.ok:
        emitter = InMemoryEmitter(stored, fields)
        try:
            emitter.apply_all(result.operations)
        except EmitError as e:
            logger.error(f"Replaying the plan failed: {e}")
            return 1
        final_rows = emitter.rows

    if args.format == "json":
        data = result.to_dict()
        data["rows"] = final_rows
        print(json.dumps(data, indent=2, default=str))
    else:
        print(format_plan_console(result, final_rows, fields.position))

    if args.output:
        data = result.to_dict()
        data["rows"] = final_rows
        export_json(data, args.output)
        logger.info(f"Plan saved to {args.output}")

    return exit_code_for(result.code)

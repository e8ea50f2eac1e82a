"""
Argument parser for the banktx-sync CLI: global logging and metrics
options plus the `update` and `plan` commands.
"""

import argparse

from ..sequence.models import FINGERPRINTS


def _add_column_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--id-column', help='Identity column (default: id)')
    parser.add_argument('--seq-column', help='Position column (default: seq)')
    parser.add_argument('--description-column', help='Description column (default: description)')
    parser.add_argument('--amount-column', help='Amount column (default: amount)')
    parser.add_argument('--date-column', help='Date column (default: date)')


def _add_matching_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--fingerprint',
        choices=sorted(FINGERPRINTS),
        default='exact',
        help='How stored and bank rows are matched (default: exact)'
    )
    parser.add_argument(
        '--extra-column',
        action='append',
        metavar='COLUMN=VALUE',
        help='Value for a column of inserted rows the bank data lacks (repeatable)'
    )


def _add_format_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--format', choices=['console', 'json'], default='console',
                        help='Print a console report or the JSON result (default: console)')


def create_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with its `update` and `plan` subcommands."""
    parser = argparse.ArgumentParser(
        prog='banktx-sync',
        description="Keep a bank transactions table in the order the bank shows it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Update the table from the bank's current view
  banktx-sync update --updates bank.json --table banktx --extra-column acc_id=8 \\
      --select-filter "acc_id = 8"

  # Never delete rows referenced by invoices
  banktx-sync update --updates bank.json --table banktx \\
      --protected-expr "EXISTS(SELECT 1 FROM banktx_inv WHERE banktx_id=banktx.id)"

  # Dry run, saving the SQL that would be executed
  banktx-sync update --updates bank.json --table banktx --dry-run --sql-output update.sql

  # Plan one day offline from two JSON files
  banktx-sync plan --stored stored.json --updates bank.json --protected-ids 1234
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Minimum level logged (default: INFO)'
    )
    parser.add_argument('--log-json', action='store_true', help='Emit JSON log records')
    parser.add_argument('--log-file', help='Also log to this rotating file')
    parser.add_argument(
        '--metrics-file',
        help='Write Prometheus metrics to this textfile after the run'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # ========== Update command ==========
    update_parser = subparsers.add_parser('update', help='Reconcile a database table')
    update_parser.add_argument(
        '--updates',
        required=True,
        help='JSON file with the bank transactions (description, amount, date)'
    )
    update_parser.add_argument('--table', help='Transactions table (default: $BANKTX_TABLE)')
    update_parser.add_argument(
        '--select-filter',
        help='SQL condition restricting the rows of each day, e.g. "acc_id = 8"'
    )
    update_parser.add_argument(
        '--protected-expr',
        dest='protected_expression',
        help='SQL expression true for rows that must never be deleted'
    )
    update_parser.add_argument(
        '--max-day-size',
        dest='max_records_per_day',
        type=int,
        help='Reject days with more rows than this'
    )
    update_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show the SQL without executing it'
    )
    update_parser.add_argument('--sql-output', help='Write the SQL script to this file')
    update_parser.add_argument('--report', help='Write a JSON report to this file')
    _add_format_option(update_parser)
    _add_column_options(update_parser)
    _add_matching_options(update_parser)
    # Database options
    update_parser.add_argument('--dsn', help='libpq connection string')
    update_parser.add_argument('--db-host', help='PostgreSQL host')
    update_parser.add_argument('--db-port', help='PostgreSQL port')
    update_parser.add_argument('--db-name', help='PostgreSQL database name')
    update_parser.add_argument('--db-user', help='PostgreSQL username')
    update_parser.add_argument('--db-password', help='PostgreSQL password')

    # ========== Plan command ==========
    plan_parser = subparsers.add_parser('plan', help='Plan one day offline from JSON files')
    plan_parser.add_argument(
        '--stored',
        required=True,
        help='JSON file with the stored rows of the day (id, seq, description, amount)'
    )
    plan_parser.add_argument(
        '--updates',
        required=True,
        help='JSON file with the bank transactions of the day'
    )
    plan_parser.add_argument(
        '--protected-ids',
        help='Comma-separated identities that must never be deleted'
    )
    plan_parser.add_argument('--day', help='Label for the day in the output')
    _add_format_option(plan_parser)
    plan_parser.add_argument('--output', help='Write the JSON result to this file')
    _add_column_options(plan_parser)
    _add_matching_options(plan_parser)

    return parser

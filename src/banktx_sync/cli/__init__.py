"""
Command-line interface for banktx-sync.

Available commands:
- update: Reconcile a PostgreSQL transactions table with bank data
- plan: Reconcile one day offline from JSON files

Exit codes: 0 success or nothing to do, 1 internal or database failure,
2 invalid input or configuration, 3 protected row would be deleted.
"""

import sys

from ..config import ConfigError
from ..loaders import InputFileError
from ..utils.logging import get_logger, setup_logging
from ..utils.metrics import write_metrics_file
from ..utils.tracing import initialize_tracing, shutdown_tracing
from .commands import cmd_plan, cmd_update, exit_code_for
from .parser import create_parser

logger = get_logger(__name__)

COMMANDS = {
    'update': cmd_update,
    'plan': cmd_plan,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the banktx-sync CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file, json_format=args.log_json)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    initialize_tracing()
    try:
        code = command(args)
    except (ConfigError, InputFileError) as e:
        logger.error(str(e))
        code = 2
    finally:
        shutdown_tracing()
        if args.metrics_file:
            write_metrics_file(args.metrics_file)

    sys.exit(code)


__all__ = [
    'main',
    'create_parser',
    'cmd_update',
    'cmd_plan',
    'exit_code_for',
]


if __name__ == '__main__':
    main()

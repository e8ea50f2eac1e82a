"""
Runtime configuration for database runs.

Values come from command-line arguments first, then environment variables:

    BANKTX_DB_DSN        libpq connection string (takes precedence)
    POSTGRES_HOST        default: localhost
    POSTGRES_PORT        default: 5432
    POSTGRES_DB          default: banking
    POSTGRES_USER        default: postgres
    POSTGRES_PASSWORD    required unless a DSN is given
    BANKTX_TABLE         default table name
"""

import argparse
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .emit.quoting import quote_table, validate_identifier
from .sequence.models import DEFAULT_FIELDS, FieldMap, Fingerprint, get_fingerprint


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


@dataclass
class DatabaseConfig:
    host: str = "localhost"
    port: int = 5432
    database: str = "banking"
    username: str = "postgres"
    password: str | None = None
    dsn: str | None = None

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``psycopg2.connect``."""
        if self.dsn:
            kwargs: dict[str, Any] = {"dsn": self.dsn}
            if self.password:
                kwargs["password"] = self.password
            return kwargs
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.username,
            "password": self.password,
            "connect_timeout": 10,
        }

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "DatabaseConfig":
        """
        Build from CLI arguments with environment fallbacks.

        Raises:
            ConfigError: If neither a DSN nor a password is available
        """
        dsn = getattr(args, "dsn", None) or os.getenv("BANKTX_DB_DSN")
        password = getattr(args, "db_password", None) or os.getenv("POSTGRES_PASSWORD")
        port = getattr(args, "db_port", None) or os.getenv("POSTGRES_PORT", "5432")

        try:
            port = int(port)
        except ValueError:
            raise ConfigError(f"Invalid database port: {port!r}") from None

        if not dsn and not password:
            raise ConfigError("Database password not provided (use --db-password or POSTGRES_PASSWORD)")

        return cls(
            host=getattr(args, "db_host", None) or os.getenv("POSTGRES_HOST", "localhost"),
            port=port,
            database=getattr(args, "db_name", None) or os.getenv("POSTGRES_DB", "banking"),
            username=getattr(args, "db_user", None) or os.getenv("POSTGRES_USER", "postgres"),
            password=password,
            dsn=dsn,
        )


@dataclass
class SyncConfig:
    """
    What to reconcile and how.

    Args:
        table: Transactions table (``table`` or ``schema.table``)
        fields: Column names for id, position, description, amount and date
        insert_extra_columns: Values for inserted rows' columns the bank
            data does not carry (e.g. an account id)
        select_filter: Extra SQL condition ANDed into the per-day select,
            e.g. ``acc_id = 8`` when several accounts share a table
        protected_expression: SQL expression true for rows that must never
            be deleted, e.g.
            ``EXISTS(SELECT 1 FROM banktx_inv WHERE banktx_id=banktx.id)``
        max_records_per_day: Reject days longer than this (alignment is O(N*M))
        fingerprint: Matching policy name (``exact`` or ``normalized``)
    """

    table: str
    fields: FieldMap = DEFAULT_FIELDS
    insert_extra_columns: dict[str, Any] = field(default_factory=dict)
    select_filter: str | None = None
    protected_expression: str | None = None
    max_records_per_day: int | None = None
    fingerprint: str = "exact"

    def __post_init__(self):
        try:
            quote_table(self.table)
            for name in (
                self.fields.identity,
                self.fields.position,
                self.fields.description,
                self.fields.amount,
                self.fields.date,
                *self.insert_extra_columns,
            ):
                validate_identifier(name)
            get_fingerprint(self.fingerprint)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        if self.max_records_per_day is not None and self.max_records_per_day < 1:
            raise ConfigError("max_records_per_day must be positive")

    @property
    def fingerprint_func(self) -> Fingerprint:
        return get_fingerprint(self.fingerprint)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SyncConfig":
        table = getattr(args, "table", None) or os.getenv("BANKTX_TABLE")
        if not table:
            raise ConfigError("Table not provided (use --table or BANKTX_TABLE)")

        return cls(
            table=table,
            fields=fields_from_args(args),
            insert_extra_columns=parse_extra_columns(getattr(args, "extra_column", None) or []),
            select_filter=getattr(args, "select_filter", None),
            protected_expression=getattr(args, "protected_expression", None),
            max_records_per_day=getattr(args, "max_records_per_day", None),
            fingerprint=getattr(args, "fingerprint", None) or "exact",
        )


def fields_from_args(args: argparse.Namespace) -> FieldMap:
    return FieldMap(
        identity=getattr(args, "id_column", None) or DEFAULT_FIELDS.identity,
        position=getattr(args, "seq_column", None) or DEFAULT_FIELDS.position,
        description=getattr(args, "description_column", None) or DEFAULT_FIELDS.description,
        amount=getattr(args, "amount_column", None) or DEFAULT_FIELDS.amount,
        date=getattr(args, "date_column", None) or DEFAULT_FIELDS.date,
    )


def parse_extra_columns(items: Iterable[str]) -> dict[str, str]:
    """
    Parse repeated ``column=value`` options.

    Raises:
        ConfigError: On an item without ``=`` or with an empty column name
    """
    columns = {}
    for item in items:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ConfigError(f"Invalid extra column {item!r}; expected column=value")
        columns[name] = value
    return columns

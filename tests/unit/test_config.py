"""
Unit tests for configuration and JSON input loading.
"""

import argparse
import json

import pytest

from banktx_sync.config import (
    ConfigError,
    DatabaseConfig,
    SyncConfig,
    fields_from_args,
    parse_extra_columns,
)
from banktx_sync.loaders import InputFileError, load_stored_rows, load_updated_transactions
from banktx_sync.sequence import FieldMap, normalized_fingerprint


def _args(**kwargs):
    return argparse.Namespace(**kwargs)


class TestDatabaseConfig:
    def test_from_args(self):
        config = DatabaseConfig.from_args(
            _args(db_host="db", db_port="6543", db_name="bank", db_user="app", db_password="pw")
        )

        assert config.connect_kwargs() == {
            "host": "db",
            "port": 6543,
            "database": "bank",
            "user": "app",
            "password": "pw",
            "connect_timeout": 10,
        }

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_HOST", "envhost")
        monkeypatch.setenv("POSTGRES_PASSWORD", "secret")

        config = DatabaseConfig.from_args(_args())

        assert config.host == "envhost"
        assert config.password == "secret"
        assert config.port == 5432

    def test_dsn_takes_precedence(self, monkeypatch):
        monkeypatch.setenv("BANKTX_DB_DSN", "dbname=bank user=app")

        config = DatabaseConfig.from_args(_args())

        assert config.connect_kwargs() == {"dsn": "dbname=bank user=app"}

    def test_missing_password(self):
        with pytest.raises(ConfigError, match="password"):
            DatabaseConfig.from_args(_args())

    def test_invalid_port(self):
        with pytest.raises(ConfigError, match="port"):
            DatabaseConfig.from_args(_args(db_password="pw", db_port="abc"))


class TestSyncConfig:
    def test_from_args(self):
        config = SyncConfig.from_args(_args(
            table="bank.banktx",
            id_column="tx_id",
            extra_column=["acc_id=8"],
            select_filter="acc_id = 8",
            protected_expression=None,
            max_records_per_day=500,
            fingerprint="normalized",
        ))

        assert config.table == "bank.banktx"
        assert config.fields.identity == "tx_id"
        assert config.fields.position == "seq"
        assert config.insert_extra_columns == {"acc_id": "8"}
        assert config.max_records_per_day == 500
        assert config.fingerprint_func is normalized_fingerprint

    def test_table_from_env(self, monkeypatch):
        monkeypatch.setenv("BANKTX_TABLE", "banktx")

        assert SyncConfig.from_args(_args()).table == "banktx"

    def test_missing_table(self):
        with pytest.raises(ConfigError, match="Table"):
            SyncConfig.from_args(_args())

    @pytest.mark.parametrize("kwargs", [
        {"table": "bank tx"},
        {"table": "banktx", "fields": FieldMap(position="seq;")},
        {"table": "banktx", "insert_extra_columns": {"acc id": 1}},
        {"table": "banktx", "fingerprint": "fuzzy"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            SyncConfig(**kwargs)

    def test_fields_from_args_defaults(self):
        assert fields_from_args(_args()) == FieldMap()


class TestParseExtraColumns:
    def test_parse(self):
        assert parse_extra_columns(["acc_id=8", "note=a=b", "empty="]) == {
            "acc_id": "8",
            "note": "a=b",
            "empty": "",
        }

    @pytest.mark.parametrize("item", ["acc_id", "=8"])
    def test_invalid(self, item):
        with pytest.raises(ConfigError):
            parse_extra_columns([item])


class TestLoaders:
    def test_load_updated_transactions(self, tmp_path):
        path = tmp_path / "bank.json"
        rows = [{"description": "Tx1", "amount": 15.23, "date": "2017-05-22"}]
        path.write_text(json.dumps(rows))

        assert load_updated_transactions(path) == rows

    def test_missing_date(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps([{"description": "Tx1", "amount": "1"}]))

        with pytest.raises(InputFileError, match="'date' is a required property"):
            load_updated_transactions(path)
        assert load_updated_transactions(path, require_date=False)

    def test_wrong_type_reports_location(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps([{"description": "Tx1", "amount": None, "date": "2017-05-22"}]))

        with pytest.raises(InputFileError, match="0/amount"):
            load_updated_transactions(path)

    def test_not_json(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text("{not json")

        with pytest.raises(InputFileError, match="Invalid JSON"):
            load_updated_transactions(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputFileError, match="not found"):
            load_stored_rows(tmp_path / "absent.json")

    def test_load_stored_rows(self, tmp_path, stored_day):
        path = tmp_path / "stored.json"
        path.write_text(json.dumps(stored_day))

        assert load_stored_rows(path) == stored_day

    def test_stored_rows_need_position(self, tmp_path):
        path = tmp_path / "stored.json"
        path.write_text(json.dumps([{"id": 1, "description": "Tx", "amount": 1}]))

        with pytest.raises(InputFileError, match="seq"):
            load_stored_rows(path)

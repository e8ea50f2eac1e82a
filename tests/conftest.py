"""
Pytest configuration and fixtures for banktx-sync tests.
Provides sample day sequences and test environment defaults.
"""

import os

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "property: mark test as property-based test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def set_test_env_vars(monkeypatch) -> None:
    """Keep tracing local and database settings predictable."""
    monkeypatch.delenv("OTLP_ENDPOINT", raising=False)
    monkeypatch.delenv("TRACE_CONSOLE", raising=False)
    for key in ("BANKTX_DB_DSN", "BANKTX_TABLE", "POSTGRES_PASSWORD", "POSTGRES_PORT"):
        if key in os.environ:
            monkeypatch.delenv(key)


@pytest.fixture
def stored_day() -> list[dict]:
    """Three stored transactions of 2017-05-22."""
    return [
        {"id": 1, "seq": 1, "description": "Tx1", "amount": "15.23"},
        {"id": 2, "seq": 2, "description": "Tx2", "amount": "-2.80"},
        {"id": 3, "seq": 3, "description": "Tx3", "amount": "27.75"},
    ]


@pytest.fixture
def bank_day() -> list[dict]:
    """The same day as the bank shows it after Tx2 cleared as Tx4."""
    return [
        {"description": "Tx4 Clearing", "amount": "67.05"},
        {"description": "Tx1", "amount": "15.23"},
        {"description": "Tx3", "amount": "27.75"},
    ]

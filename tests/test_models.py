"""Tests for the table definitions."""

import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from uptime_monitor.models import Log, Website


def _ddl(table, dialect):
    return " ".join(str(CreateTable(table).compile(dialect=dialect)).split())


@pytest.mark.unit
class TestSchema:
    """DDL emitted by create_schema."""

    def test_logs_created_at_default_on_postgresql(self):
        ddl = _ddl(Log.__table__, postgresql.dialect())

        assert "created_at TIMESTAMP WITH TIME ZONE DEFAULT date_trunc('minute', now()) NOT NULL" in ddl
        assert "UNIQUE (website_alias, created_at)" in ddl
        assert "FOREIGN KEY(website_alias) REFERENCES websites (alias)" in ddl
        assert "status SMALLINT" in ddl

    def test_logs_created_at_default_on_sqlite(self):
        ddl = _ddl(Log.__table__, sqlite.dialect())

        assert "date_trunc" not in ddl
        assert "CURRENT_TIMESTAMP" in ddl

    def test_websites_alias_is_unique(self):
        ddl = _ddl(Website.__table__, postgresql.dialect())

        assert "alias VARCHAR(75) NOT NULL" in ddl
        assert "UNIQUE (alias)" in ddl

"""
Tests that the baseline migration creates exactly the tables, columns and
indexes the models declare, and drops every table again on downgrade.
"""
import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa

from bulky.app.core.base import Base
from bulky.app.models import auth, catalog, content, kupon, pesanan, produk, ulasan, wilayah  # noqa: F401

MIGRATION_PATH = Path(__file__).resolve().parents[1] / "migrations" / "versions" / "0001_initial_schema.py"


class RecordingOp:
    """Stands in for ``alembic.op`` and remembers what the migration asked for."""

    def __init__(self):
        self.tables = {}
        self.nullable = {}
        self.indexes = {}
        self.dropped = []

    def create_table(self, name, *elements):
        columns = [e for e in elements if isinstance(e, sa.Column)]
        self.tables[name] = {c.name for c in columns}
        self.nullable[name] = {c.name: c.nullable for c in columns}

    def create_index(self, name, table, columns, unique=False):
        self.indexes[name] = (table, tuple(columns))

    def drop_table(self, name):
        self.dropped.append(name)


@pytest.fixture
def migration(monkeypatch):
    module_spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    recorder = RecordingOp()
    monkeypatch.setattr(module, "op", recorder)
    return module, recorder


def test_upgrade_matches_models(migration):
    module, recorder = migration
    module.upgrade()

    assert set(recorder.tables) == set(Base.metadata.tables)
    for name, table in Base.metadata.tables.items():
        assert recorder.tables[name] == {c.name for c in table.columns}, name
        for column in table.columns:
            assert recorder.nullable[name][column.name] == column.nullable, f"{name}.{column.name}"


def test_upgrade_creates_model_indexes(migration):
    module, recorder = migration
    module.upgrade()

    expected = {
        index.name: (table.name, tuple(c.name for c in index.columns))
        for table in Base.metadata.tables.values()
        for index in table.indexes
    }
    assert recorder.indexes == expected


def test_downgrade_drops_every_table(migration):
    module, recorder = migration
    module.downgrade()

    assert sorted(recorder.dropped) == sorted(Base.metadata.tables)
    # Dependents go before the tables they reference
    order = {name: i for i, name in enumerate(recorder.dropped)}
    for table in Base.metadata.tables.values():
        for fk in table.foreign_keys:
            parent = fk.column.table.name
            if parent != table.name:
                assert order[table.name] < order[parent], f"{table.name} -> {parent}"

"""
The initial Alembic revision builds the same schema as the ORM models.
"""

import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from alembic.operations import Operations

from iqol.database import Base
import iqol.models  # noqa: F401  registers the tables on Base.metadata

VERSIONS = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _load_revision(filename: str):
    spec = importlib.util.spec_from_file_location(filename.removesuffix(".py"), VERSIONS / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migrated(tmp_path):
    """A connection to a fresh SQLite database upgraded through revision 001."""
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            _load_revision("001_initial_schema.py").upgrade()
        yield conn
    engine.dispose()


def test_initial_revision_matches_models(migrated):
    context = MigrationContext.configure(migrated, opts={"compare_type": False})
    assert compare_metadata(context, Base.metadata) == []


def test_profiles_constraints(migrated):
    inspector = sa.inspect(migrated)
    indexes = {ix["name"]: ix for ix in inspector.get_indexes("profiles")}
    uniques = sorted(uc["column_names"] for uc in inspector.get_unique_constraints("profiles"))
    nullable = {c["name"]: c["nullable"] for c in inspector.get_columns("profiles")}

    assert not indexes["ix_profiles_email"]["unique"]
    assert uniques == [["email"], ["name"]]
    assert nullable["last_login_at"] is True
    assert nullable["role"] is False

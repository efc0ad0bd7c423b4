"""End-to-end tests for the Alembic migration scripts.

The initial revision is applied to a fresh SQLite database through Alembic's
operations API. Tests verify that:
1. Every table the entities map to is created, with the same columns
2. Lookup indexes exist, unique where the entities require it
3. Downgrade removes everything and the revision can be applied again
"""

import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlmodel import SQLModel

import lyriq.core.database.entities  # noqa: F401  registers the tables on SQLModel.metadata

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
VERSIONS_DIR = PROJECT_ROOT / "alembic" / "versions"


def _load_revision(filename: str):
    spec = importlib.util.spec_from_file_location(filename.removesuffix(".py"), VERSIONS_DIR / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def initial_revision():
    return _load_revision("20261018_000000_initial_schema.py")


@pytest.fixture
def engine(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migration.db'}")
    yield engine
    engine.dispose()


def _run(engine, step) -> None:
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            step()


class TestInitialRevision:
    def test_revision_metadata(self, initial_revision):
        assert initial_revision.revision == "20261018_000000"
        assert initial_revision.down_revision is None

    def test_creates_every_entity_table(self, engine, initial_revision):
        _run(engine, initial_revision.upgrade)

        inspector = sa.inspect(engine)
        assert set(inspector.get_table_names()) == set(SQLModel.metadata.tables)

    def test_columns_match_entities(self, engine, initial_revision):
        _run(engine, initial_revision.upgrade)

        inspector = sa.inspect(engine)
        for name, table in SQLModel.metadata.tables.items():
            migrated = {column["name"] for column in inspector.get_columns(name)}
            assert migrated == set(table.columns.keys()), name

    @pytest.mark.parametrize(
        "table, index, unique",
        [
            ("companies", "ix_companies_slug", True),
            ("calls", "ix_calls_twilio_call_sid", True),
            ("calls", "ix_calls_status", False),
            ("workflow_executions", "ix_workflow_executions_workflow_id", True),
            ("knowledge_base", "ix_knowledge_base_collection", False),
        ],
    )
    def test_indexes(self, engine, initial_revision, table, index, unique):
        _run(engine, initial_revision.upgrade)

        indexes = {i["name"]: i for i in sa.inspect(engine).get_indexes(table)}
        assert index in indexes
        assert bool(indexes[index]["unique"]) is unique

    def test_downgrade_then_upgrade_again(self, engine, initial_revision):
        _run(engine, initial_revision.upgrade)
        _run(engine, initial_revision.downgrade)

        assert sa.inspect(engine).get_table_names() == []

        _run(engine, initial_revision.upgrade)
        assert "companies" in sa.inspect(engine).get_table_names()

    def test_migrated_schema_accepts_records(self, engine, initial_revision):
        _run(engine, initial_revision.upgrade)

        with engine.begin() as conn:
            conn.execute(
                sa.text(
                    "INSERT INTO companies (name, slug, created_at, updated_at) "
                    "VALUES ('Acme', 'acme', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)"
                )
            )
            with pytest.raises(sa.exc.IntegrityError):
                conn.execute(
                    sa.text(
                        "INSERT INTO companies (name, slug, created_at, updated_at) "
                        "VALUES ('Other', 'acme', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)"
                    )
                )

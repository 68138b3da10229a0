from pathlib import Path

import pytest
from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.migration import MigrationContext
from sqlalchemy import create_engine, inspect

from aidreams.database.models import Base

MIGRATIONS_DIR = Path(__file__).parents[3] / "aidreams" / "database" / "migrations"


@pytest.fixture
def migrated_engine(tmp_path, monkeypatch):
    """Sync engine over a SQLite file upgraded to the head revision."""
    db_path = tmp_path / "migrated.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))

    command.upgrade(config, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


def test_migrations_create_key_pool_and_covers(migrated_engine):
    inspector = inspect(migrated_engine)

    assert {"community_api_keys", "covers"} <= set(inspector.get_table_names())
    index_names = {
        index["name"] for index in inspector.get_indexes("community_api_keys")
    }
    assert "ix_community_api_keys_provider_active" in index_names
    assert "ix_community_api_keys_usage_count" in index_names


def test_migrated_schema_matches_models(migrated_engine):
    with migrated_engine.connect() as connection:
        context = MigrationContext.configure(
            connection, opts={"compare_type": True}
        )
        assert compare_metadata(context, Base.metadata) == []

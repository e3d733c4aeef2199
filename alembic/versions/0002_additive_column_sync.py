"""Additive column sync for legacy applications tables

Revision ID: 0002_additive_column_sync
Revises: 0001_initial_schema
Create Date: 2026-10-19

"""

from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from alembic import op

from hireform.db.models import SchemaMigration
from hireform.db.schema import APPLICATIONS_TABLE, MIGRATIONS, add_column, column_names

# revision identifiers, used by Alembic.
revision = "0002_additive_column_sync"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    recorded = set(bind.execute(sa.select(SchemaMigration.__table__.c.version)).scalars())

    for migration in MIGRATIONS:
        present = column_names(bind, APPLICATIONS_TABLE)
        for spec in migration.columns:
            if spec.name not in present:
                add_column(bind, APPLICATIONS_TABLE, spec)
        if migration.version not in recorded:
            bind.execute(
                sa.insert(SchemaMigration.__table__).values(
                    version=migration.version,
                    description=migration.description,
                    applied_at=datetime.now(UTC),
                )
            )


def downgrade() -> None:
    # Columns are never dropped; only the bookkeeping rows are forgotten.
    bind = op.get_bind()
    versions = [migration.version for migration in MIGRATIONS]
    bind.execute(sa.delete(SchemaMigration.__table__).where(SchemaMigration.__table__.c.version.in_(versions)))

"""seed default catalog - starter categories and material templates

Revision ID: 002_seed_catalog
Revises: 001_initial
Create Date: 2026-03-02

Seeds only when material_templates is empty and SEED_DEFAULT_CATALOG is on,
so databases that already carry a catalog are left alone.
"""
from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002_seed_catalog"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_TEMPLATES = [
    ("Industrial Paint", "TPL-PAINT-001", "Paint"),
    ("Hydraulic Cement", "TPL-CEMENT-001", "Concrete"),
    ("Stainless Steel Bolt M10", "TPL-BOLT-M10", "Fasteners"),
    ("Wooden Door Frame", "TPL-DOOR-001", "Doors"),
    ("Electrical Wire 2.5mm", "TPL-WIRE-2.5", "Electrical"),
    ("PVC Pipe 50mm", "TPL-PIPE-50", "Plumbing"),
]

categories = sa.table(
    "material_categories",
    sa.column("id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("created_at", sa.DateTime),
)
templates = sa.table(
    "material_templates",
    sa.column("name", sa.String),
    sa.column("code", sa.String),
    sa.column("category_id", sa.Integer),
    sa.column("created_at", sa.DateTime),
    sa.column("updated_at", sa.DateTime),
)


def upgrade() -> None:
    from boqcore.config import settings

    if not settings.seed_default_catalog:
        return
    conn = op.get_bind()
    if conn.execute(sa.select(sa.func.count()).select_from(templates)).scalar():
        return

    now = datetime.now(timezone.utc)
    existing = {name for (name,) in conn.execute(sa.select(categories.c.name))}
    missing = sorted({cat for _, _, cat in DEFAULT_TEMPLATES} - existing)
    if missing:
        op.bulk_insert(categories, [{"name": name, "created_at": now} for name in missing])

    ids = dict(conn.execute(sa.select(categories.c.name, categories.c.id)).all())
    op.bulk_insert(
        templates,
        [
            {
                "name": name,
                "code": code,
                "category_id": ids[cat],
                "created_at": now,
                "updated_at": now,
            }
            for name, code, cat in DEFAULT_TEMPLATES
        ],
    )


def downgrade() -> None:
    codes = [code for _, code, _ in DEFAULT_TEMPLATES]
    op.execute(templates.delete().where(templates.c.code.in_(codes)))

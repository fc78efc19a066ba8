"""
startup.py — Schema migrations on boot (idempotent)

Runs `alembic upgrade head` against the packaged migration scripts in
boqcore/migrations. Revisions are ordered and versioned; Alembic's
alembic_version table records what has been applied, so calling this on
every boot only applies what is new.

Called by: main.py lifespan, tests/test_startup_migrations.py
Depends on: database.py (engine), migrations/
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Engine

from .database import engine

log = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    return cfg


def run_startup_migrations(bind: Engine | None = None) -> None:
    """Bring the schema (and default seed data) up to the latest revision."""
    bind = bind if bind is not None else engine
    cfg = alembic_config()
    with bind.begin() as conn:
        cfg.attributes["connection"] = conn
        command.upgrade(cfg, "head")
    log.info("Startup migrations complete")

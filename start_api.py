#!/usr/bin/env python3
"""
Run migrations (same process, same DATABASE_URL), then seed, then uvicorn.
Ensures tables exist before seed and app start.
"""
import os
import sys

from bookit.core.config import settings
from bookit.core.logging_config import configure_logging

configure_logging()

# 1) Wait for DB
from wait_for_db import wait_for_db
wait_for_db(settings.DATABASE_URL)

# 2) Run migrations using the same settings as the app
from alembic.config import Config
from alembic import command

alembic_cfg = Config(os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
command.upgrade(alembic_cfg, "head")

# 3) Seed demo data unless told not to (SEED_ON_START=0)
if os.getenv("SEED_ON_START", "1") != "0":
    from bookit.db.session import init_db, close_db
    from bookit.seed import run as run_seed
    init_db(settings.DATABASE_URL)
    run_seed()
    close_db()

# 4) Start uvicorn (replace current process)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "bookit.main:app", "--host", "0.0.0.0", "--port", os.getenv("PORT", "8000")],
)

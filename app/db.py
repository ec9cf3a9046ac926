from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from flask_migrate import Migrate
from alembic.config import Config
from alembic import command
import os
import sys
import logging
from constants import ALEMBIC_CONF, MIGRATIONS_DIR
from utils import now_utc

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()
migrate = Migrate()


# Alembic functions
def get_alembic_cfg():
    cfg = Config(ALEMBIC_CONF)
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    return cfg


def init_db(app):
    # Models must be registered on the metadata before create_all
    import models  # noqa: F401

    with app.app_context():
        @event.listens_for(db.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            import sqlite3
            if not isinstance(dbapi_connection, sqlite3.Connection):
                return

            cursor = dbapi_connection.cursor()
            # WAL lets several server processes read while one writes
            cursor.execute("PRAGMA journal_mode=WAL;")
            # Storage calls are bounded: give up on a locked database after 5 seconds
            cursor.execute("PRAGMA busy_timeout=5000;")
            cursor.close()

        # create or migrate database
        if "db" not in sys.argv:
            from sqlalchemy import inspect
            inspector = inspect(db.engine)
            if not inspector.has_table("shareholder"):
                logger.info("Initializing database tables...")
                db.create_all()
                if not app.testing and os.path.exists(ALEMBIC_CONF):
                    command.stamp(get_alembic_cfg(), "head")
                    logger.info("Database created and stamped to the latest migration version.")
            else:
                # Ensure new tables are created even if DB exists
                db.create_all()

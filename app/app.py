"""
Shareholder Portal - Verification and audit API
Application factory and logging setup
"""
import os
import sys
import logging

import flask.cli
flask.cli.show_server_banner = lambda *args: None

# Core Flask imports
from flask import Flask
import structlog

# Local imports
from constants import BUILD_VERSION, MIGRATIONS_DIR, PORTAL_DB
from settings import load_settings
from db import db, migrate, init_db
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs
from exceptions import register_exception_handlers
from metrics import init_metrics
from cooldown_cache import create_cooldown_cache
from sms import SmsTransport

# Routes
from routes.shareholder import shareholder_bp
from routes.system import system_bp

# Logging configuration
formatter = ColoredFormatter(
    '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

logging.basicConfig(
    level=logging.INFO,
    handlers=[handler]
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger('main')

# Apply filter to hide date from http access logs
logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())
logging.getLogger('alembic.runtime.migration').setLevel(logging.WARNING)


def create_app(settings=None, config=None, cooldown_cache=None, sms_transport=None):
    """
    Application factory

    Args:
        settings: Portal settings; read from config/settings.yaml when omitted
        config: Extra Flask config, applied last (tests pass an in-memory database)
        cooldown_cache: Resend cooldown cache; built from settings when omitted
        sms_transport: Outbound SMS transport; built from settings when omitted
    """
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = PORTAL_DB
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.json.ensure_ascii = False
    if config:
        app.config.update(config)

    settings = settings if settings is not None else load_settings()

    # Initialize components
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)

    app.extensions["portal_settings"] = settings
    app.extensions["cooldown_cache"] = cooldown_cache or create_cooldown_cache(settings)
    app.extensions["sms_transport"] = sms_transport or SmsTransport.from_settings(settings)

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(shareholder_bp)
    app.register_blueprint(system_bp)

    # Initialize metrics
    init_metrics(app)

    # Initialize database
    init_db(app)

    if settings["portal"].get("test_mode"):
        logger.warning("Test mode enabled: SMS dispatch is skipped and codes are returned to the client")
    logger.info(
        "Application initialized",
        cooldown_backend=app.extensions["cooldown_cache"].backend_name,
    )
    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 8465))
    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info(f'Starting server on port {port}...')
    app.run(debug=False, use_reloader=False, host="0.0.0.0", port=port)
    logger.info('Shutting down server...')

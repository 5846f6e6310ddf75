import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

from .config import Settings
from .models import db
from .models.connector_manager import build_connector_manager
from .services import EXTENSION_KEY, build_services
from .utils.debug_routes import register_debug_routes
from .utils.http import register_error_handlers

from .blueprints.catalog import catalog_bp
from .blueprints.metrics import metrics_bp
from .blueprints.notifications import notifications_bp
from .blueprints.orders import orders_bp
from .blueprints.payments import payments_bp
from .blueprints.verification import verification_bp

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, connector_manager=None) -> Flask:
    if settings is None:
        load_dotenv()
        settings = Settings.from_env()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["TESTING"] = settings.testing
    app.config.update(settings.sqlalchemy_config())

    # storefront is served from another origin; every /api/* route is public CORS
    CORS(
        app,
        resources={r"/api/*": {"origins": "*"}},
        send_wildcard=True,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    db.init_app(app)

    # create the sqlite directory before create_all
    with app.app_context():
        uri = app.config["SQLALCHEMY_DATABASE_URI"]
        if uri.startswith("sqlite:///"):
            db_dir = os.path.dirname(uri[len("sqlite:///"):])
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
        db.create_all()

    if connector_manager is None:
        connector_manager = build_connector_manager(settings)
    app.extensions[EXTENSION_KEY] = build_services(settings, connector_manager)

    register_error_handlers(app)

    # Health check
    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy", "service": "Khanya Storefront Backend"}), 200

    app.register_blueprint(verification_bp, url_prefix="/api")
    app.register_blueprint(payments_bp, url_prefix="/api")
    app.register_blueprint(orders_bp, url_prefix="/api")
    app.register_blueprint(notifications_bp, url_prefix="/api")
    app.register_blueprint(metrics_bp, url_prefix="/api")
    app.register_blueprint(catalog_bp, url_prefix="/api")

    register_debug_routes(app, settings, connector_manager)

    logger.info("Khanya backend ready")
    return app

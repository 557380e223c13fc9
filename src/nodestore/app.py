from datetime import date
from enum import Enum

import structlog
from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider

from nodestore.config import config
from nodestore.errors import BadRequestAlertError, PredicateBuildError, TypeResolutionError
from nodestore.log import configure_logging

logger = structlog.get_logger(__name__)


def _json_default(o):
    if hasattr(o, "to_document"):
        return o.to_document()
    if isinstance(o, date):
        return o.isoformat()
    if isinstance(o, Enum):
        return o.value
    if isinstance(o, (set, frozenset)):
        return sorted(o)
    return DefaultJSONProvider.default(o)


class JSONProvider(DefaultJSONProvider):
    """Serializes documents and dates the way they are stored."""

    default = staticmethod(_json_default)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PredicateBuildError)
    def predicate_build_error(e: PredicateBuildError):
        return jsonify({"error": str(e), "parameter": e.parameter}), 400

    @app.errorhandler(BadRequestAlertError)
    def bad_request_alert(e: BadRequestAlertError):
        app_name = app.config["APP_NAME"]
        headers = {
            f"X-{app_name}-error": f"error.{e.error_key}",
            f"X-{app_name}-params": e.entity_name,
        }
        body = {"error": e.message, "entityName": e.entity_name, "errorKey": e.error_key}
        return jsonify(body), 400, headers

    @app.errorhandler(TypeResolutionError)
    def type_resolution_error(e: TypeResolutionError):
        logger.error("endpoint misconfigured", error=str(e))
        return jsonify({"error": "Internal server error"}), 500


def create_app() -> Flask:
    """Application factory."""
    configure_logging(config.log_level, config.log_json)

    app = Flask(__name__)
    app.json = JSONProvider(app)
    app.config["APP_NAME"] = config.app_name

    register_error_handlers(app)

    # Register blueprints
    from nodestore.api.nodes import bp as nodes_bp

    app.register_blueprint(nodes_bp, url_prefix="/api")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    return app


# For flask run command
app = create_app()

"""Flask application factory for the SmartBlock agent."""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from smartblock.config.settings import AgentConfig
from smartblock.service import AgentService

from .routes import create_blueprint

# Largest JSON body accepted (sketch sources are small)
MAX_BODY_BYTES = 8 * 1024 * 1024


def create_app(config: AgentConfig, service: Optional[AgentService] = None) -> Flask:
    """Build the Flask app.

    Args:
        config: Agent configuration (port, CORS allow-list, ...)
        service: Service to expose (built from config if None)
    """
    service = service or AgentService(config)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES
    app.config["HOST"] = config.host
    app.config["PORT"] = config.port
    app.extensions["smartblock.service"] = service
    app.register_blueprint(create_blueprint(service))

    @app.after_request
    def apply_cors(response):
        origin = request.headers.get("Origin")
        if origin and config.is_origin_allowed(origin):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = request.headers.get(
                "Access-Control-Request-Headers", "Content-Type"
            )
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        code = getattr(e, "code", None)
        if isinstance(code, int) and 400 <= code < 500:
            return jsonify({"ok": False, "error": getattr(e, "description", str(e))}), code
        logging.exception(f"Unhandled error on {request.path}")
        return jsonify({"ok": False, "error": str(e)}), 500

    return app

"""HTTP endpoints of the SmartBlock agent.

Routes only parse JSON bodies and serialize results; the pipelines live in
AgentService. Every failure is answered as ``{"ok": false, "error": msg}``.
"""

import base64
import logging
from typing import Any, Dict

from flask import Blueprint, jsonify, request

from smartblock.build.cli_executor import ProcessError
from smartblock.errors import AgentError
from smartblock.service import AgentService


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _error(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


def create_blueprint(service: AgentService) -> Blueprint:
    bp = Blueprint("agent", __name__)

    @bp.errorhandler(AgentError)
    def handle_agent_error(e: AgentError):
        message = e.diagnostic if isinstance(e, ProcessError) else e.message
        logging.error(f"{request.path} error: {message}")
        return _error(message, e.status_code)

    @bp.get("/health")
    def health():
        return jsonify(service.health())

    @bp.get("/version")
    def version():
        return jsonify({"ok": True, "version": service.version()})

    @bp.post("/init")
    def init():
        service.initialize()
        return jsonify({"ok": True})

    @bp.post("/install-core")
    def install_core():
        result = service.install_core(_body().get("core"))
        return jsonify({"ok": True, "stdout": result.stdout})

    @bp.get("/boards")
    def boards():
        return jsonify({"ok": True, "data": service.list_boards()})

    @bp.post("/compile")
    def compile_sketch():
        body = _body()
        result = service.compile(body.get("ino"), body.get("fqbn"))
        return jsonify(
            {
                "ok": True,
                "format": result.format,
                "artifact": base64.b64encode(result.artifact.data).decode("ascii"),
                "stdout": result.stdout,
            }
        )

    @bp.post("/compile-upload")
    def compile_upload():
        body = _body()
        result = service.compile_and_upload(body.get("ino"), body.get("fqbn"), body.get("port"))
        return jsonify({"ok": True, "upload": result.upload_stdout})

    return bp

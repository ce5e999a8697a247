"""HTTP layer of the SmartBlock agent (Flask)."""

from .app_factory import create_app
from .routes import create_blueprint

__all__ = ["create_app", "create_blueprint"]

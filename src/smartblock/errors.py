"""Base errors for the SmartBlock agent.

Every failure raised by the agent core derives from AgentError so the HTTP
boundary can turn it into a structured ``{"ok": false, "error": ...}`` reply.
Concrete errors are defined next to the component that raises them.
"""


class AgentError(Exception):
    """Base class for all agent failures.

    Attributes:
        message: Human-readable description
        status_code: HTTP status the web layer should answer with
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(AgentError):
    """Raised when a caller sends an invalid request."""

    status_code = 400

# interview_prep/errors.py
"""
Error taxonomy for the completion proxy.

Each error knows the HTTP status and the client-facing message it maps to, so
every hosting adapter renders the same `{ "error": "..." }` envelope.
"""

from typing import Dict


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, str]:
        return {"error": self.message}


class MethodNotAllowed(ProxyError):
    status_code = 405

    def __init__(self, method: str = ""):
        super().__init__("Method not allowed")
        self.method = method


class ConfigurationError(ProxyError):
    status_code = 500

    def __init__(self, message: str = "API key not configured"):
        super().__init__(message)


class UpstreamUnreachable(ProxyError):
    """Transport-level failure talking to the upstream. Never retried."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(f"AI request failed: {detail}")
        self.detail = detail


class UpstreamError(ProxyError):
    """Upstream answered with a non-2xx status; the status is propagated as-is."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"API Error: {detail}", status_code=status_code)
        self.detail = detail

# interview_prep/proxy.py
"""
Completion proxy. Forwards an opaque chat-completion body to the upstream
generative-language API with the server-held key and normalizes the reply.

Returns a standardized result:
  success -> CompletionResult(content="<generated text>")   rendered as {"content": ...}
  failure -> raises a ProxyError subclass                    rendered as {"error": ...}

Configuration is passed in explicitly (see interview_prep.config.ProxyConfig).

Usage:
  from interview_prep.proxy import handle_completion, completion_response
  result = handle_completion("POST", body, ProxyConfig.from_env())
  status, payload = completion_response("POST", body, config)   # never raises
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import httpx

from interview_prep import monitoring
from interview_prep.config import ProxyConfig
from interview_prep.errors import (
    ProxyError,
    MethodNotAllowed,
    ConfigurationError,
    UpstreamUnreachable,
    UpstreamError,
)

NO_CONTENT_FALLBACK = "AI did not return any content."
UNKNOWN_API_ERROR = "Unknown API error"

# Ordered: first non-empty string wins.
# OpenAI-compatible envelope first, then the native generative-API shapes.
EXTRACTION_PATHS: Sequence[Tuple[str, Tuple[Union[str, int], ...]]] = (
    ("choices", ("choices", 0, "message", "content")),
    ("candidates_parts", ("candidates", 0, "content", "parts", 0, "text")),
    ("candidates_output_text", ("candidates", 0, "output_text")),
    ("text", ("text",)),
)


@dataclass
class CompletionResult:
    content: str
    source: str = "fallback"
    status_code: int = 200

    def to_payload(self) -> Dict[str, str]:
        return {"content": self.content}


# ---------------------------------------------------------------------------
# Envelope helpers
# ---------------------------------------------------------------------------
def _dig(obj: Any, path: Sequence[Union[str, int]]) -> Any:
    for step in path:
        if isinstance(step, int):
            if not isinstance(obj, list) or len(obj) <= step:
                return None
            obj = obj[step]
        else:
            if not isinstance(obj, dict):
                return None
            obj = obj.get(step)
        if obj is None:
            return None
    return obj


def extract_text_with_source(envelope: Any) -> Tuple[str, str]:
    for source, path in EXTRACTION_PATHS:
        value = _dig(envelope, path)
        if isinstance(value, str) and value:
            return value, source
    return NO_CONTENT_FALLBACK, "fallback"


def extract_text(envelope: Any) -> str:
    """Pull the generated text out of a success envelope, or the fixed fallback."""
    return extract_text_with_source(envelope)[0]


def extract_error_message(envelope: Any) -> str:
    """error.message, then error itself, then a fixed string."""
    if isinstance(envelope, dict):
        err = envelope.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if err:
            return err if isinstance(err, str) else json.dumps(err)
    return UNKNOWN_API_ERROR


# ---------------------------------------------------------------------------
# Upstream call
# ---------------------------------------------------------------------------
def _post_upstream(body: Any, config: ProxyConfig, client: Optional[httpx.Client]) -> httpx.Response:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {config.api_key}",
    }
    if client is not None:
        return client.post(config.upstream_url, json=body, headers=headers, timeout=config.timeout)
    with httpx.Client(timeout=config.timeout) as c:
        return c.post(config.upstream_url, json=body, headers=headers)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def handle_completion(method: str, body: Any, config: ProxyConfig,
                      client: Optional[httpx.Client] = None,
                      logger: Optional[logging.Logger] = None) -> CompletionResult:
    """
    method: HTTP verb of the inbound request; only POST is served
    body: chat-completion request, forwarded verbatim
    client: optional httpx.Client (tests pass one built on httpx.MockTransport)
    Raises ProxyError subclasses; never retries.
    """
    log = logger or monitoring.logger

    if (method or "").upper() != "POST":
        monitoring.inc_completion("method_not_allowed")
        raise MethodNotAllowed(method)

    log.info("Completion request received", extra={"key_loaded": config.has_key})
    if not config.has_key:
        log.error("API key not found in environment")
        monitoring.inc_completion("not_configured")
        raise ConfigurationError()

    start = time.time()
    try:
        response = _post_upstream(body, config, client)
        envelope = response.json()
    except (httpx.HTTPError, ValueError) as e:
        detail = str(e) or e.__class__.__name__
        log.error("Upstream request failed", extra={"error": detail})
        monitoring.observe_completion(start, "unreachable")
        raise UpstreamUnreachable(detail) from e

    log.debug("Raw upstream response", extra={
        "status": response.status_code,
        "preview": json.dumps(envelope)[:500],
    })

    if not response.is_success:
        message = extract_error_message(envelope)
        log.warning("Upstream returned an error", extra={"status": response.status_code, "error": message})
        monitoring.observe_completion(start, "upstream_error")
        raise UpstreamError(response.status_code, message)

    text, source = extract_text_with_source(envelope)
    monitoring.observe_completion(start, "success")
    monitoring.inc_extraction_source(source)
    log.info("Completion extracted", extra={"source": source, "length": len(text)})
    return CompletionResult(content=text, source=source)


def completion_response(method: str, body: Any, config: ProxyConfig,
                        client: Optional[httpx.Client] = None,
                        logger: Optional[logging.Logger] = None) -> Tuple[int, Dict[str, str]]:
    """Same contract as handle_completion, flattened to (status, JSON payload)."""
    try:
        result = handle_completion(method, body, config, client=client, logger=logger)
    except ProxyError as e:
        return e.status_code, e.to_payload()
    return result.status_code, result.to_payload()

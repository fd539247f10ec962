"""Request ID helper for endpoints.

Prefers the id the observability middleware put on request.state, then the
logging context, then the inbound header.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from leetboard.obs import logging as obs_logging

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
    if request is not None:
        rid = getattr(request.state, REQUEST_ID_ATTR, None) or request.headers.get("X-Request-Id")
        if rid:
            return rid
    return obs_logging.current_request_id() or default

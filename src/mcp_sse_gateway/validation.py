"""Inbound envelope validation."""

from __future__ import annotations

from typing import Any

from .errors import EnvelopeRejected
from .types import JSONRPC_VERSION, CallEnvelope


def validate_envelope(raw: Any) -> CallEnvelope:
    """Check a decoded request body against the JSON-RPC envelope shape.

    Args:
        raw: Decoded JSON body, or None if the body was absent or unparseable

    Returns:
        The validated envelope

    Raises:
        EnvelopeRejected: If the payload is absent, the ``jsonrpc`` tag is
            missing or wrong, or ``method`` is missing. The exception carries
            the caller's ``id`` when one was present.
    """
    if not isinstance(raw, dict):
        raise EnvelopeRejected(None)

    request_id = raw.get("id")
    method = raw.get("method")
    if raw.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str) or not method:
        raise EnvelopeRejected(request_id)

    return CallEnvelope(id=request_id, method=method, params=raw.get("params"))

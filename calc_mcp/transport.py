"""Newline-delimited JSON-RPC transport over text streams.

One JSON object per line in, one compact JSON object per line out. The
output stream carries protocol bytes only: every diagnostic goes through the
injected logger, which the entry point binds to stderr.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Iterable, TextIO

from calc_mcp.exceptions import INTERNAL_ERROR, InvalidRequestError
from calc_mcp.messages import Request, Response

logger = logging.getLogger(__name__)

DispatchFn = Callable[[str, Request], "Response | None"]

# First "id": <string|number|null> member in a line that failed to decode
_ID_PATTERN = re.compile(r'"id"\s*:\s*("(?:[^"\\]|\\.)*"|-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|null)')


def salvage_id(text: str) -> tuple[bool, Any]:
    """Best-effort id extraction from an undecodable line.

    Returns ``(found, id)``.
    """
    match = _ID_PATTERN.search(text)
    if match is None:
        return False, None
    try:
        return True, json.loads(match.group(1))
    except ValueError:
        return False, None


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def decode(text: str) -> Any:
    """Strict JSON decode: NaN and Infinity tokens are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def encode(response: Response) -> str:
    return json.dumps(response.to_dict(), default=str, separators=(",", ":"), allow_nan=False)


def _write(output_stream: TextIO, payload: str) -> None:
    output_stream.write(payload + "\n")
    output_stream.flush()


def handle_line(line: str, dispatch_fn: DispatchFn, diagnostics: logging.Logger | None = None) -> Response | None:
    """Turn one raw input line into the response to write, if any."""
    log = diagnostics or logger
    text = line.strip()
    if not text:
        return None

    # ValueError also covers oversized integers; RecursionError covers deep nesting
    try:
        msg = decode(text)
    except (ValueError, RecursionError) as exc:
        found, req_id = salvage_id(text)
        if not found:
            log.error("Dropping undecodable line without id: %s", exc)
            return None
        log.error("Undecodable request id=%r: %s", req_id, exc)
        return Response.error_for_id(req_id, INTERNAL_ERROR, f"Internal error: {exc}")

    if not isinstance(msg, dict):
        log.warning("Dropping non-object message of type %s", type(msg).__name__)
        return None

    try:
        request = Request.from_message(msg)
    except InvalidRequestError as exc:
        if "id" not in msg:
            log.warning("Dropping invalid request without id: %s", exc.message)
            return None
        log.warning("Invalid request id=%r: %s", msg["id"], exc.message)
        return Response.error_for_id(msg["id"], exc.code, exc.message)

    log.info("Received request: method=%s", request.method)
    try:
        return dispatch_fn(request.method, request)
    except Exception as exc:
        log.exception("Error handling request: method=%s", request.method)
        if request.is_notification or not request.has_id:
            return None
        return Response.failure(request, INTERNAL_ERROR, f"Internal error: {exc}")


def run(
    input_stream: Iterable[str],
    output_stream: TextIO,
    dispatch_fn: DispatchFn,
    *,
    diagnostics: logging.Logger | None = None,
) -> int:
    """Serve requests until the input stream ends.

    Returns 0 on end-of-stream, 1 if the transport itself fails.
    """
    log = diagnostics or logger
    log.info("MCP server started and listening for requests...")
    try:
        for line in input_stream:
            response = handle_line(line, dispatch_fn, log)
            if response is None:
                continue
            try:
                payload = encode(response)
            except ValueError as exc:
                # e.g. an id of 1e999 decodes to inf, which has no JSON form
                log.error("Dropping unencodable response id=%r: %s", response.id, exc)
                continue
            _write(output_stream, payload)
    except OSError as exc:
        log.error("Transport failure, shutting down: %s", exc, exc_info=True)
        return 1
    log.info("Input stream closed, shutting down")
    return 0

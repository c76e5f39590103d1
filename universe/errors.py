from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MESSAGE = "Invalid input."
Headers = List[Tuple[bytes, bytes]]


def error_body(message: str) -> bytes:
    return json.dumps({"error": message}).encode("utf-8")


def _json_headers(headers: Headers, body: bytes) -> Headers:
    kept = [
        (key, value)
        for key, value in headers
        if key.lower() not in {b"content-length", b"content-type"}
    ]
    kept.append((b"content-type", b"application/json"))
    kept.append((b"content-length", str(len(body)).encode("latin-1")))
    return kept


class ValidationNormalizeMiddleware:
    """Turn FastAPI's 422 validation responses into 400 ``{"error": message}``."""

    def __init__(self, app: Any, message: str = DEFAULT_MESSAGE) -> None:
        self.app = app
        self.message = message

    async def __call__(self, scope: Dict[str, Any], receive: Any, send: Any) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        status_code = 500
        headers: Headers = []
        chunks: List[bytes] = []

        async def send_wrapper(message: Dict[str, Any]) -> None:
            nonlocal status_code, headers
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = list(message.get("headers", []))
                return
            if message["type"] != "http.response.body":
                await send(message)
                return

            chunks.append(message.get("body", b"") or b"")
            if message.get("more_body"):
                return

            if status_code == 422:
                logger.warning(
                    "request_invalid",
                    path=scope.get("path"),
                    detail=b"".join(chunks).decode("utf-8", errors="replace"),
                )
                body = error_body(self.message)
                await send(
                    {
                        "type": "http.response.start",
                        "status": 400,
                        "headers": _json_headers(headers, body),
                    }
                )
                await send({"type": "http.response.body", "body": body})
                return

            await send(
                {
                    "type": "http.response.start",
                    "status": status_code,
                    "headers": headers,
                }
            )
            await send({"type": "http.response.body", "body": b"".join(chunks)})

        await self.app(scope, receive, send_wrapper)

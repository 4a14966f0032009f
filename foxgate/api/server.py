"""Threaded HTTP transport for the gateway."""

from __future__ import annotations

import json
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import urlparse

from loguru import logger

from foxgate import __version__
from foxgate.gateway import (
    EnqueueOutcome,
    ErrorKind,
    Gateway,
    GatewayResult,
    OnlineChange,
    StateView,
    task_to_dict,
)
from foxgate.utils.helpers import now_ms

DEFAULT_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "*"),
    ("Access-Control-Allow-Headers", "*"),
    ("Cache-Control", "private,max-age=0"),
)

_NOT_FOUND_PAGE = """<html lang="en">
    <head>
        <title>🦊 Oops..</title>
        <meta charset="UTF-8" />
    </head>
    <body>
        <h1>Nothing here but us foxes 🦊</h1>
        <h3>This is not the page you were looking for.</h3>
    </body>
</html>
"""

_STATUS_PAGE = """<html lang="en">
    <head>
        <title>🦊 Status</title>
        <meta charset="UTF-8" />
    </head>
    <body>
        <h1>🦊 Status</h1>
        <hr>
        <h2>Task Queue</h2>
        <h3>Queued Tasks: {queued}</h3>
        <h3>Total Tasks: {total}</h3>
        <h3>Total Processed: {processed}</h3>
        <h2>Device</h2>
        <h3>Online: {online}</h3>
        <h3>Session Active: {session}</h3>
    </body>
</html>
"""


def json_response(data: dict[str, Any]) -> bytes:
    """Serialize JSON response payload."""
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def normalize_endpoint(endpoint: str) -> str:
    return "/" + str(endpoint or "").strip().strip("/")


def _error_to_status(error: ErrorKind | None) -> HTTPStatus:
    if error in (ErrorKind.AUTH, ErrorKind.SESSION_CONFLICT):
        return HTTPStatus.UNAUTHORIZED
    # Validation failures keep the legacy 500 status device firmware expects.
    return HTTPStatus.INTERNAL_SERVER_ERROR


def _password(payload: dict[str, Any]) -> str | None:
    value = payload.get("password")
    return value if isinstance(value, str) else None


class _GatewayRequestHandler(BaseHTTPRequestHandler):
    """Routes wire requests into gateway operations."""

    gateway: Gateway | None = None
    enqueue_path: str = "/enqueue"
    max_request_body_bytes: int = 1024 * 1024

    server_version = f"foxgate/{__version__}"

    def do_GET(self) -> None:  # noqa: N802
        path = urlparse(self.path).path
        if path == "/status":
            self._get_status()
            return
        self._send_not_found()

    def do_POST(self) -> None:  # noqa: N802
        path = urlparse(self.path).path
        routes = {
            "/authenticate": self._post_authenticate,
            "/getstate": self._post_getstate,
            self.enqueue_path: self._post_enqueue,
            "/fetch": self._post_fetch,
            "/setstate": self._post_setstate,
            "/setonline": self._post_setonline,
            "/newsession": self._post_newsession,
        }
        handler = routes.get(path)
        if handler is None:
            self._send_not_found()
            return
        if self.gateway is None:
            self._send_error(HTTPStatus.SERVICE_UNAVAILABLE, "gateway unavailable")
            return
        logger.debug(f"Received {path.lstrip('/')} request")
        payload = self._read_json_body()
        if payload is None:
            return
        try:
            handler(payload)
        except Exception:
            logger.exception(f"Unhandled error while serving {path}")
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal error")

    def do_OPTIONS(self) -> None:  # noqa: N802
        self.send_response(HTTPStatus.NO_CONTENT)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def end_headers(self) -> None:
        for name, value in DEFAULT_HEADERS:
            self.send_header(name, value)
        super().end_headers()

    def log_message(self, fmt: str, *args: Any) -> None:
        logger.debug("http " + fmt % args)

    def _read_json_body(self) -> dict[str, Any] | None:
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = 0
        max_body = max(1024, int(self.max_request_body_bytes))
        if length > max_body:
            self._send_error(
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
                f"request body too large (max {max_body} bytes)",
            )
            return None
        body = self.rfile.read(length) if length > 0 else b""
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Invalid request body")
            return None
        if not isinstance(payload, dict):
            self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Invalid request body type")
            return None
        return payload

    # Web endpoints

    def _get_status(self) -> None:
        logger.debug("Received status request")
        if self.gateway is None:
            self._send_error(HTTPStatus.SERVICE_UNAVAILABLE, "gateway unavailable")
            return
        stats = self.gateway.queue_stats()
        page = _STATUS_PAGE.format(
            queued=stats.queued,
            total=stats.total_enqueued,
            processed=stats.total_processed,
            online="yes" if self.gateway.state.is_online else "no",
            session="yes" if self.gateway.sessions.is_active else "no",
        )
        self._send_html(HTTPStatus.OK, page)

    # Client endpoints

    def _post_authenticate(self, payload: dict[str, Any]) -> None:
        valid = self.gateway.authenticate_client(_password(payload))
        self._send_json(HTTPStatus.OK, {"status": valid})

    def _post_getstate(self, payload: dict[str, Any]) -> None:
        result = self.gateway.get_state(_password(payload))
        if not self._ensure_success(result):
            return
        view: StateView = result.value
        body = view.state.to_dict()
        body["is_online"] = view.is_online
        body["status"] = True
        self._send_json(HTTPStatus.OK, body)

    def _post_enqueue(self, payload: dict[str, Any]) -> None:
        result = self.gateway.enqueue_tasks(_password(payload), payload.get("tasks"))
        if not self._ensure_success(result):
            return
        outcome: EnqueueOutcome = result.value
        self._send_json(
            HTTPStatus.OK,
            {"status": outcome.complete, "queued": outcome.accepted, "total": outcome.total},
        )

    # Device endpoints

    def _post_fetch(self, payload: dict[str, Any]) -> None:
        result = self.gateway.fetch_tasks(_password(payload))
        if not self._ensure_success(result):
            return
        self._send_json(
            HTTPStatus.OK,
            {"status": True, "tasks": [task_to_dict(task) for task in result.value]},
        )

    def _post_setstate(self, payload: dict[str, Any]) -> None:
        result = self.gateway.set_state(_password(payload), payload.get("state"))
        if not self._ensure_success(result):
            return
        self._send_json(HTTPStatus.OK, {"status": True})

    def _post_setonline(self, payload: dict[str, Any]) -> None:
        result = self.gateway.set_online(_password(payload), payload.get("is_online"))
        if not self._ensure_success(result):
            return
        change: OnlineChange = result.value
        self._send_json(HTTPStatus.OK, {"status": change.changed, "previous": change.previous})

    def _post_newsession(self, payload: dict[str, Any]) -> None:
        result = self.gateway.new_session(
            _password(payload),
            explicit_password=payload.get("new_password"),
            length=payload.get("length"),
        )
        if not self._ensure_success(result):
            return
        self._send_json(HTTPStatus.OK, {"status": True, "password": result.value})

    # Response helpers

    def _ensure_success(self, result: GatewayResult) -> bool:
        if result.success:
            return True
        self._send_error(_error_to_status(result.error), result.message)
        return False

    def _send_not_found(self) -> None:
        logger.warning(f"Received invalid request {self.command} {self.path}")
        self._send_html(HTTPStatus.NOT_FOUND, _NOT_FOUND_PAGE)

    def _send_error(self, code: HTTPStatus, message: str) -> None:
        self._send_json(code, {"status": False, "error": message})

    def _send_json(self, code: HTTPStatus, payload: dict[str, Any]) -> None:
        payload.setdefault("timestamp", now_ms())
        self._send_body(code, json_response(payload), "application/json; charset=utf-8")

    def _send_html(self, code: HTTPStatus, page: str) -> None:
        self._send_body(code, page.encode("utf-8"), "text/html; charset=utf-8")

    def _send_body(self, code: HTTPStatus, body: bytes, content_type: str) -> None:
        self.send_response(code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class GatewayHTTPServer:
    """Threaded HTTP endpoint bound to one gateway instance."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        gateway: Gateway,
        endpoint: str = "enqueue",
        max_request_body_bytes: int = 1024 * 1024,
    ) -> None:
        self.host = host
        self.port = port
        self.gateway = gateway
        self.endpoint = normalize_endpoint(endpoint)
        self.max_request_body_bytes = max(1024, int(max_request_body_bytes))
        self._thread: threading.Thread | None = None
        self._server: ThreadingHTTPServer | None = None

    @property
    def bound_port(self) -> int:
        if self._server is None:
            return self.port
        return int(self._server.server_address[1])

    def start(self) -> None:
        handler_cls = type("BoundGatewayRequestHandler", (_GatewayRequestHandler,), {})
        handler_cls.gateway = self.gateway
        handler_cls.enqueue_path = self.endpoint
        handler_cls.max_request_body_bytes = self.max_request_body_bytes
        logger.info("Starting HTTP server")
        self._server = ThreadingHTTPServer((self.host, self.port), handler_cls)
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info(f"Listening on {self.host}:{self.bound_port}")

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2)
        self._thread = None

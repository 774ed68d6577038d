from __future__ import annotations

import http.server
import json
import threading
import urllib.parse
from dataclasses import dataclass, field
from email.message import Message
from typing import Any, Generator

import pytest

from test.mocks import company_payload, job_payload, user_payload

_SESSION_COOKIE = "token=abc123"


@dataclass
class BackendState:
    """What the fake portal backend received, for assertions."""

    requests: list[tuple[str, str]] = field(default_factory=list)
    bodies: dict[str, bytes] = field(default_factory=dict)
    headers: dict[str, Message] = field(default_factory=dict)


class _PortalHandler(http.server.BaseHTTPRequestHandler):
    state: BackendState

    def log_message(self, *_args: object) -> None:
        pass

    def do_GET(self) -> None:
        self._dispatch("GET")

    def do_POST(self) -> None:
        self._dispatch("POST")

    def do_PUT(self) -> None:
        self._dispatch("PUT")

    def _dispatch(self, method: str) -> None:
        parsed = urllib.parse.urlparse(self.path)
        path = parsed.path.removeprefix("/api/v1")
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        self.state.requests.append((method, path))
        self.state.bodies[f"{method} {path}"] = body
        self.state.headers[f"{method} {path}"] = self.headers

        if path == "/broken":
            self._send_raw(502, b"<html>Bad Gateway</html>", "text/html")
            return

        if method == "POST" and path == "/user/login":
            data = json.loads(body or b"{}")
            if data.get("password") != "secret":
                self._send_json(400, {"success": False, "message": "Incorrect email or password."})
                return
            user = user_payload(role=data.get("role", "candidate"), email=data.get("email", "a@b.com"))
            self._send_json(
                200,
                {"success": True, "message": f"Welcome back {user['fullname']}", "user": user},
                cookie=f"{_SESSION_COOKIE}; Path=/; HttpOnly",
            )
            return

        if method == "GET" and path == "/job/get":
            keyword = urllib.parse.parse_qs(parsed.query).get("keyword", [""])[0].lower()
            jobs = [job_payload(), job_payload(job_id="j2", title="Frontend Developer")]
            jobs = [job for job in jobs if keyword in job["title"].lower()]
            self._send_json(200, {"success": True, "jobs": jobs})
            return

        if not self._authenticated():
            self._send_json(401, {"success": False, "message": "User not authenticated"})
            return

        if method == "GET" and path == "/user/logout":
            self._send_json(
                200,
                {"success": True, "message": "Logged out successfully."},
                cookie="token=; Path=/; Max-Age=0",
            )
        elif method == "GET" and path == "/company/get":
            self._send_json(200, {"success": True, "companies": [company_payload()]})
        elif method == "GET" and path == "/company/get/c1":
            self._send_json(200, {"success": True, "company": company_payload()})
        elif method == "PUT" and path == "/company/update/c1":
            if b'name="location"\r\n\r\nAtlantis' in body:
                self._send_json(400, {"success": False, "message": "Location invalid"})
            else:
                self._send_json(200, {"success": True, "message": "Company information updated."})
        else:
            self._send_json(404, {"success": False, "message": "Not found"})

    def _authenticated(self) -> bool:
        return _SESSION_COOKIE in (self.headers.get("Cookie") or "")

    def _send_json(self, status: int, payload: dict[str, Any], cookie: str | None = None) -> None:
        extra = {"Set-Cookie": cookie} if cookie else {}
        self._send_raw(status, json.dumps(payload).encode("utf-8"), "application/json", extra)

    def _send_raw(
        self,
        status: int,
        body: bytes,
        content_type: str,
        extra: dict[str, str] | None = None,
    ) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        for name, value in (extra or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)


@pytest.fixture()
def backend() -> Generator[tuple[str, BackendState], None, None]:
    """Start a local HTTP server that behaves like the portal REST API."""
    state = BackendState()
    handler = type("PortalHandler", (_PortalHandler,), {"state": state})
    server = http.server.HTTPServer(("127.0.0.1", 0), handler)
    port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{port}/api/v1", state
    server.shutdown()
    server.server_close()

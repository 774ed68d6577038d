from __future__ import annotations

import asyncio
import http.client
import http.cookiejar
import json
import os
import urllib.error
import urllib.parse
import urllib.request
import uuid
from typing import Any, Mapping, Sequence

from domain.errors import TransportFailure
from domain.models import ApiResponse, UploadedFile
from domain.ports import FormPart


class UrllibApiClient:
    """
    ``ApiClientPort`` over plain urllib with a cookie jar.

    The session cookie set by the login endpoint is kept in the jar and sent
    on every later call. With ``cookie_jar_path`` the jar is a Mozilla
    cookies.txt file that is loaded on start and saved after every call so
    that a login survives a restart of the CLI.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        cookie_jar_path: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        if cookie_jar_path:
            self._jar: http.cookiejar.CookieJar = http.cookiejar.MozillaCookieJar(cookie_jar_path)
            if os.path.isfile(cookie_jar_path):
                self._jar.load(ignore_discard=True, ignore_expires=True)
        else:
            self._jar = http.cookiejar.CookieJar()
        self._opener = urllib.request.build_opener(urllib.request.HTTPCookieProcessor(self._jar))

    @property
    def cookie_jar(self) -> http.cookiejar.CookieJar:
        return self._jar

    async def send(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        form_parts: Sequence[FormPart] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        request = self.build_request(
            method,
            path,
            json_body=json_body,
            form_parts=form_parts,
            query=query,
        )
        return await asyncio.to_thread(self._sync_send, request)

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        form_parts: Sequence[FormPart] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> urllib.request.Request:
        if json_body is not None and form_parts is not None:
            raise ValueError("json_body and form_parts are mutually exclusive")

        url = f"{self._base_url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"

        data: bytes | None = None
        headers = {"Accept": "application/json"}
        if json_body is not None:
            data = json.dumps(dict(json_body)).encode("utf-8")
            headers["Content-Type"] = "application/json"
        elif form_parts is not None:
            boundary = f"----jobportal{uuid.uuid4().hex}"
            data = encode_multipart(form_parts, boundary)
            headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"

        return urllib.request.Request(url, data=data, headers=headers, method=method.upper())

    def _sync_send(self, request: urllib.request.Request) -> ApiResponse:
        try:
            with self._opener.open(request, timeout=self._timeout) as resp:  # nosec B310
                status = resp.status
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            # Error statuses still carry the JSON envelope with a message.
            status = exc.code
            raw = _read_error_body(request, exc)
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise TransportFailure(f"{request.get_method()} {request.full_url} failed: {exc}") from exc
        finally:
            self._save_cookies()

        return ApiResponse(status=status, body=_decode_envelope(raw, status))

    def _save_cookies(self) -> None:
        if isinstance(self._jar, http.cookiejar.MozillaCookieJar):
            self._jar.save(ignore_discard=True, ignore_expires=True)


def encode_multipart(parts: Sequence[FormPart], boundary: str) -> bytes:
    lines: list[bytes] = []
    for name, value in parts:
        lines.append(f"--{boundary}\r\n".encode("utf-8"))
        if isinstance(value, UploadedFile):
            lines.append(
                f'Content-Disposition: form-data; name="{name}"; '
                f'filename="{value.filename}"\r\n'
                f"Content-Type: {value.content_type}\r\n\r\n".encode("utf-8")
            )
            lines.append(value.content)
            lines.append(b"\r\n")
        else:
            lines.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode("utf-8"))
            lines.append(f"{value}\r\n".encode("utf-8"))
    lines.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(lines)


def _read_error_body(request: urllib.request.Request, exc: urllib.error.HTTPError) -> bytes:
    try:
        return exc.read()
    except (http.client.HTTPException, OSError) as read_exc:
        raise TransportFailure(
            f"{request.get_method()} {request.full_url} failed: {read_exc}"
        ) from read_exc


def _decode_envelope(raw: bytes, status: int) -> Mapping[str, Any]:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportFailure(f"Response with status {status} is not JSON") from exc
    if not isinstance(payload, dict):
        raise TransportFailure(f"Response with status {status} is not a JSON object")
    return payload

from __future__ import annotations

import asyncio
import http.client
import http.cookiejar
import io
import json
import socket
import urllib.error
from email.message import Message
from pathlib import Path
from unittest.mock import patch

import pytest

from domain.errors import TransportFailure
from domain.models import UploadedFile
from domain.ports import ApiClientPort
from infra.http import UrllibApiClient, encode_multipart


class _FakeResponse:
    def __init__(self, body: bytes, status: int = 200) -> None:
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        return None


def _json(body: dict, status: int = 200) -> _FakeResponse:
    return _FakeResponse(json.dumps(body).encode("utf-8"), status)


def _http_error(body: bytes, code: int) -> urllib.error.HTTPError:
    return urllib.error.HTTPError("http://api.test", code, "error", Message(), io.BytesIO(body))


@pytest.fixture()
def client() -> UrllibApiClient:
    return UrllibApiClient("http://api.test/api/v1/", timeout_seconds=7)


def test_conforms_to_api_client_port(client: UrllibApiClient) -> None:
    assert isinstance(client, ApiClientPort)


def test_json_request_is_built_against_base_url(client: UrllibApiClient) -> None:
    request = client.build_request("post", "/user/login", json_body={"email": "a@b.com"})
    assert request.full_url == "http://api.test/api/v1/user/login"
    assert request.get_method() == "POST"
    assert request.get_header("Content-type") == "application/json"
    assert json.loads(request.data) == {"email": "a@b.com"}


def test_query_is_url_encoded(client: UrllibApiClient) -> None:
    request = client.build_request("GET", "/job/get", query={"keyword": "react dev"})
    assert request.full_url == "http://api.test/api/v1/job/get?keyword=react+dev"
    assert request.data is None


def test_multipart_request_carries_boundary(client: UrllibApiClient) -> None:
    photo = UploadedFile(filename="me.png", content_type="image/png", content=b"\x89PNG")
    request = client.build_request("PUT", "/company/update/c1", form_parts=[("name", "Acme"), ("file", photo)])
    content_type = request.get_header("Content-type")
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1]
    assert request.data == encode_multipart([("name", "Acme"), ("file", photo)], boundary)


def test_json_and_multipart_are_exclusive(client: UrllibApiClient) -> None:
    with pytest.raises(ValueError):
        client.build_request("POST", "/x", json_body={}, form_parts=[])


def test_encode_multipart_layout() -> None:
    resume = UploadedFile(filename="cv.pdf", content_type="application/pdf", content=b"%PDF")
    body = encode_multipart([("bio", "hi"), ("file", resume)], "BOUND")
    assert body == (
        b"--BOUND\r\n"
        b'Content-Disposition: form-data; name="bio"\r\n\r\n'
        b"hi\r\n"
        b"--BOUND\r\n"
        b'Content-Disposition: form-data; name="file"; filename="cv.pdf"\r\n'
        b"Content-Type: application/pdf\r\n\r\n"
        b"%PDF\r\n"
        b"--BOUND--\r\n"
    )


def test_send_decodes_success_envelope(client: UrllibApiClient) -> None:
    with patch.object(client._opener, "open", return_value=_json({"success": True, "message": "ok"})) as mock_open:
        response = asyncio.run(client.send("GET", "/company/get"))
    assert response.status == 200
    assert response.success
    assert response.message == "ok"
    assert mock_open.call_args.kwargs["timeout"] == 7


def test_error_status_still_returns_envelope(client: UrllibApiClient) -> None:
    error = _http_error(b'{"success": false, "message": "Incorrect email or password."}', 400)
    with patch.object(client._opener, "open", side_effect=error):
        response = asyncio.run(client.send("POST", "/user/login", json_body={}))
    assert response.status == 400
    assert not response.success
    assert response.message == "Incorrect email or password."


@pytest.mark.parametrize(
    "failure",
    [
        urllib.error.URLError("connection refused"),
        socket.timeout("timed out"),
        ConnectionResetError("reset"),
    ],
)
def test_network_failures_raise_transport_failure(client: UrllibApiClient, failure: Exception) -> None:
    with patch.object(client._opener, "open", side_effect=failure):
        with pytest.raises(TransportFailure):
            asyncio.run(client.send("GET", "/job/get"))


@pytest.mark.parametrize("body", [b"<html>502</html>", b"[1, 2]"])
def test_non_object_body_raises_transport_failure(client: UrllibApiClient, body: bytes) -> None:
    with patch.object(client._opener, "open", return_value=_FakeResponse(body)):
        with pytest.raises(TransportFailure):
            asyncio.run(client.send("GET", "/job/get"))


def test_html_error_page_raises_transport_failure(client: UrllibApiClient) -> None:
    with patch.object(client._opener, "open", side_effect=_http_error(b"Bad Gateway", 502)):
        with pytest.raises(TransportFailure):
            asyncio.run(client.send("GET", "/job/get"))


def test_file_backed_cookie_jar_is_saved(tmp_path: Path) -> None:
    jar_path = tmp_path / "cookies.txt"
    client = UrllibApiClient("http://api.test", cookie_jar_path=str(jar_path))
    assert isinstance(client.cookie_jar, http.cookiejar.MozillaCookieJar)
    with patch.object(client._opener, "open", return_value=_json({"success": True})):
        asyncio.run(client.send("GET", "/user/logout"))
    assert jar_path.is_file()

    reloaded = UrllibApiClient("http://api.test", cookie_jar_path=str(jar_path))
    assert list(reloaded.cookie_jar) == []


class _TruncatedResponse(_FakeResponse):
    def read(self) -> bytes:
        raise http.client.IncompleteRead(b'{"success": tr', 40)


def test_truncated_body_raises_transport_failure(client: UrllibApiClient) -> None:
    with patch.object(client._opener, "open", return_value=_TruncatedResponse(b"")):
        with pytest.raises(TransportFailure):
            asyncio.run(client.send("GET", "/job/get"))


def test_truncated_error_body_raises_transport_failure(client: UrllibApiClient) -> None:
    error = urllib.error.HTTPError("http://api.test", 500, "error", Message(), _TruncatedResponse(b""))
    with patch.object(client._opener, "open", side_effect=error):
        with pytest.raises(TransportFailure):
            asyncio.run(client.send("GET", "/job/get"))

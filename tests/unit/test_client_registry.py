# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import json
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from restbridge.config import HttpSettings
from restbridge.errors import InvalidArgumentError, MalformedArgumentError, MissingArgumentError
from restbridge.http.builder import build_file_attachment, build_request
from restbridge.http.models import BodyKind, StringBody
from restbridge.http.registry import ClientRegistry
from restbridge.http.serializer import JsonSerializer

VALID_HOST = "http://myhost.com:9060"


class RecordingTransport(httpx.MockTransport):
    def __init__(self, responder=None):
        self.requests: list[httpx.Request] = []
        self._responder = responder or (lambda request: httpx.Response(200, text="ok"))
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def registry(transport):
    with ClientRegistry(settings=HttpSettings(user_agent="test-agent/1.0", chunk_size=4), transport=transport) as reg:
        yield reg


def test_get_client_succeeds_for_valid_host(registry):
    handle = registry.get_client(VALID_HOST)
    assert handle.host_key == VALID_HOST
    assert handle.buffered_read is True
    assert handle.buffered_write is True
    assert VALID_HOST in registry


def test_get_client_reuses_cached_client(registry):
    first = registry.get_client(VALID_HOST)
    second = registry.get_client(VALID_HOST + "/some/path")
    third = registry.get_client("HTTP://MYHOST.COM:9060")

    assert first.client is second.client is third.client
    assert len(registry) == 1
    assert registry.hosts() == [VALID_HOST]


def test_get_client_buffering_is_per_call(registry):
    buffered = registry.get_client(VALID_HOST)
    streaming = registry.get_client(VALID_HOST, buffered_read=False, buffered_write=False)

    assert streaming.client is buffered.client
    assert (streaming.buffered_read, streaming.buffered_write) == (False, False)
    assert (buffered.buffered_read, buffered.buffered_write) == (True, True)


def test_get_client_separates_hosts(registry):
    a = registry.get_client("http://a.example")
    b = registry.get_client("http://b.example")
    assert a.client is not b.client
    assert registry.hosts() == ["http://a.example", "http://b.example"]


@pytest.mark.parametrize("host", [None, "", "   "])
def test_get_client_rejects_missing_host(registry, host):
    with pytest.raises(MissingArgumentError) as excinfo:
        registry.get_client(host)
    assert excinfo.value.param_name == "host"


@pytest.mark.parametrize("host", ["??not a uri??", "??????? Where Are My Invalid Values ???????", "/relative"])
def test_get_client_rejects_malformed_host(registry, host):
    with pytest.raises(MalformedArgumentError) as excinfo:
        registry.get_client(host)
    assert excinfo.value.param_name == "host"
    assert host not in registry


def test_get_client_concurrent_first_use_creates_one_client(registry):
    with ThreadPoolExecutor(max_workers=8) as pool:
        handles = list(pool.map(lambda _: registry.get_client(VALID_HOST), range(32)))
    assert len({id(handle.client) for handle in handles}) == 1
    assert len(registry) == 1


def test_close_closes_clients_and_blocks_reuse(transport):
    registry = ClientRegistry(transport=transport)
    handle = registry.get_client(VALID_HOST)

    registry.close()

    assert registry.closed is True
    assert handle.client.is_closed
    assert len(registry) == 0
    with pytest.raises(RuntimeError):
        registry.get_client(VALID_HOST)


def test_serializer_is_fixed_at_construction(transport):
    serializer = JsonSerializer(sort_keys=True)
    registry = ClientRegistry(serializer=serializer, transport=transport)
    assert registry.get_client(VALID_HOST).serializer is serializer
    assert isinstance(ClientRegistry(transport=transport).serializer, JsonSerializer)


def test_execute_get_without_body(registry, transport):
    request = build_request("get", VALID_HOST + "/api/x?y=1", {"X-Trace": "abc"})

    response = registry.get_client(request.host_key).execute(request)

    assert response.status_code == 200
    assert response.text == "ok"
    sent = transport.requests[0]
    assert sent.method == "GET"
    assert str(sent.url) == VALID_HOST + "/api/x?y=1"
    assert sent.headers["X-Trace"] == "abc"
    assert sent.headers["User-Agent"] == "test-agent/1.0"
    assert sent.content == b""


def test_execute_string_body_sets_content_type(registry, transport):
    request = build_request("POST", VALID_HOST + "/api").with_body(
        StringBody(kind=BodyKind.XML, content="<a>1</a>")
    )

    registry.get_client(VALID_HOST).execute(request)

    sent = transport.requests[0]
    assert sent.headers["Content-Type"] == "text/xml"
    assert sent.content == b"<a>1</a>"


def test_execute_json_value_uses_serializer(registry, transport):
    request = build_request("PUT", VALID_HOST + "/api").with_body(
        StringBody(kind=BodyKind.JSON, content={"name": "widget", "count": 2})
    )

    registry.get_client(VALID_HOST).execute(request)

    sent = transport.requests[0]
    assert sent.headers["Content-Type"] == "application/json"
    assert json.loads(sent.content) == {"name": "widget", "count": 2}


def test_execute_keeps_caller_content_type(registry, transport):
    request = build_request("POST", VALID_HOST + "/api", {"content-type": "application/soap+xml"}).with_body(
        StringBody(kind=BodyKind.XML, content="<e/>")
    )

    registry.get_client(VALID_HOST).execute(request)

    assert transport.requests[0].headers["Content-Type"] == "application/soap+xml"


@pytest.mark.parametrize("buffered_write", [True, False])
def test_execute_file_attachment_as_multipart(registry, transport, buffered_write):
    stream = io.BytesIO(b"skipPAYLOAD-BYTES")
    stream.seek(4)
    attachment = build_file_attachment("f.zip", stream, "application/zip")
    request = build_request("POST", VALID_HOST + "/upload").with_body(attachment)

    registry.get_client(VALID_HOST, buffered_write=buffered_write).execute(request)

    sent = transport.requests[0]
    assert sent.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert b'name="application/zip"; filename="f.zip"' in sent.content
    assert b"Content-Type: application/zip" in sent.content
    assert b"PAYLOAD-BYTES" in sent.content
    assert b"skipPAYLOAD" not in sent.content


def test_execute_streams_into_response_writer(transport):
    transport._responder = lambda request: httpx.Response(200, content=b"0123456789")
    registry = ClientRegistry(settings=HttpSettings(chunk_size=4), transport=transport)
    received: list[bytes] = []

    request = build_request("GET", VALID_HOST + "/blob")
    response = registry.get_client(VALID_HOST, buffered_read=False).execute(
        request, response_writer=lambda chunks: received.extend(chunks)
    )

    assert b"".join(received) == b"0123456789"
    assert all(len(chunk) <= 4 for chunk in received)
    assert response.is_closed
    registry.close()


def test_execute_advanced_writer_sees_response(registry, transport):
    transport._responder = lambda request: httpx.Response(201, headers={"X-Id": "7"}, content=b"done")
    seen = {}

    def writer(chunks, response):
        seen["status"] = response.status_code
        seen["id"] = response.headers["X-Id"]
        seen["body"] = b"".join(chunks)

    registry.get_client(VALID_HOST).execute(build_request("GET", VALID_HOST), advanced_response_writer=writer)

    assert seen == {"status": 201, "id": "7", "body": b"done"}


def test_execute_rejects_two_writers(registry):
    handle = registry.get_client(VALID_HOST)
    with pytest.raises(InvalidArgumentError) as excinfo:
        handle.execute(
            build_request("GET", VALID_HOST),
            response_writer=lambda chunks: None,
            advanced_response_writer=lambda chunks, response: None,
        )
    assert excinfo.value.param_name == "response_writer"


def test_execute_rejects_request_for_other_host(registry):
    handle = registry.get_client("http://other.example")
    with pytest.raises(InvalidArgumentError) as excinfo:
        handle.execute(build_request("GET", VALID_HOST + "/api"))
    assert excinfo.value.param_name == "request"


def test_execute_unbuffered_read_returns_open_response(registry, transport):
    transport._responder = lambda request: httpx.Response(200, content=iter([b"la", b"zy"]))

    response = registry.get_client(VALID_HOST, buffered_read=False).execute(build_request("GET", VALID_HOST))

    assert not response.is_stream_consumed
    assert response.read() == b"lazy"
    response.close()


def test_execute_returns_error_statuses(registry, transport):
    transport._responder = lambda request: httpx.Response(500, text="boom")

    response = registry.get_client(VALID_HOST).execute(build_request("DELETE", VALID_HOST + "/x"))

    assert response.status_code == 500
    assert response.text == "boom"


def test_execute_propagates_transport_errors(registry, transport):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport._responder = refuse
    with pytest.raises(httpx.ConnectError):
        registry.get_client(VALID_HOST).execute(build_request("GET", VALID_HOST))


def test_handle_deserialize(registry):
    handle = registry.get_client(VALID_HOST)
    response = httpx.Response(200, json={"id": 3, "tags": ["a"]})

    assert handle.deserialize(response) == {"id": 3, "tags": ["a"]}
    assert handle.deserialize(response, into=lambda data: data["id"]) == 3


def test_execute_rejects_non_string_content_for_text_kinds(registry, transport):
    request = build_request("POST", VALID_HOST + "/api").with_body(
        StringBody(kind=BodyKind.PLAIN_TEXT, content={"not": "text"})
    )

    with pytest.raises(InvalidArgumentError) as excinfo:
        registry.get_client(VALID_HOST).execute(request)

    assert excinfo.value.param_name == "body"
    assert transport.requests == []

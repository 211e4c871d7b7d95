import pytest
from starlette.testclient import TestClient

from conftest import WIKI
from public_info_mcp_server.http_server import CORS_HEADERS, create_app
from public_info_mcp_server.main import create_dispatcher


@pytest.fixture
def client(config, fetcher):
    app = create_app(config, dispatcher=create_dispatcher(config, fetcher))
    return TestClient(app)


def _assert_cors(response):
    for header, value in CORS_HEADERS.items():
        assert response.headers[header] == value


@pytest.mark.parametrize("path", ["/mcp", "/", "/anything/else"])
def test_preflight_returns_cors_headers_and_no_body(client, path):
    response = client.options(path)

    assert response.status_code == 204
    assert response.content == b""
    _assert_cors(response)


def test_unknown_path_is_404(client):
    response = client.post("/api", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

    assert response.status_code == 404
    assert response.json() == {
        "error": {"code": -32000, "message": "Invalid endpoint. Use /mcp for MCP protocol requests."}
    }
    _assert_cors(response)


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_non_post_is_405(client, method):
    response = client.request(method.upper(), "/mcp")

    assert response.status_code == 405
    assert response.json()["error"]["code"] == -32000
    _assert_cors(response)


@pytest.mark.parametrize("method", ["PROPFIND", "TRACE", "PURGE"])
def test_unusual_methods_get_the_same_gatekeeping(client, method):
    response = client.request(method, "/mcp")

    assert response.status_code == 405
    assert response.json() == {
        "error": {"code": -32000, "message": "Method not allowed. Use POST for MCP requests."}
    }
    _assert_cors(response)

    response = client.request(method, "/elsewhere")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == -32000
    _assert_cors(response)


def test_missing_json_content_type_is_rejected_before_parsing(client):
    response = client.post("/mcp", content=b"not even json", headers={"Content-Type": "text/plain"})

    assert response.status_code == 400
    assert response.json() == {
        "error": {"code": -32700, "message": "Invalid Content-Type. Expected application/json."}
    }
    _assert_cors(response)


def test_malformed_json_is_parse_error(client):
    response = client.post("/mcp", content=b"{oops", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    body = response.json()
    assert body["jsonrpc"] == "2.0"
    assert body["error"]["code"] == -32700
    assert "id" not in body


@pytest.mark.parametrize("path", ["/mcp", "/"])
def test_tools_list_round_trip(client, path):
    response = client.post(path, json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    _assert_cors(response)
    body = response.json()
    assert body["id"] == 1
    names = [tool["name"] for tool in body["result"]["tools"]]
    assert names and len(names) == len(set(names))


def test_content_type_with_charset_is_accepted(client):
    response = client.post(
        "/mcp",
        content=b'{"jsonrpc": "2.0", "id": "a", "method": "initialize"}',
        headers={"Content-Type": "application/json; charset=utf-8"},
    )

    assert response.status_code == 200
    assert response.json()["id"] == "a"


def test_initialized_notification_returns_empty_204(client):
    response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert response.status_code == 204
    assert response.content == b""
    _assert_cors(response)


def test_unknown_tool_is_protocol_error_with_id(client):
    response = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "nonexistent"}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 2
    assert "result" not in body
    assert body["error"]["message"] == "Unknown tool: nonexistent"


def test_tool_call_success_and_not_found(client, fetcher):
    fetcher.ok(f"{WIKI}/home", "<h1>Home</h1><p>Welcome</p>")

    found = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "fetchwikipage", "arguments": {"path": "home"}}},
    ).json()
    missing = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {"name": "fetchwikipage", "arguments": {"path": "gone"}}},
    ).json()

    assert found["result"] == {"content": [{"type": "text", "text": "Home\nWelcome"}]}
    assert missing["result"]["isError"] is True
    assert "not found" in missing["result"]["content"][0]["text"]

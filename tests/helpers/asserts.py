from typing import Optional, Dict, Any
from fastapi.testclient import TestClient

def api_call(client: TestClient, method: str, path: str, headers: Optional[Dict[str, str]] = None, json: Optional[Any] = None, expected_min: int = 200, expected_max: int = 300):
    response = client.request(method, path, headers=headers, json=json)
    ok = expected_min <= response.status_code < expected_max
    try:
        body = response.json()
    except ValueError:
        body = response.text
    assert ok, f"{method} {path} => {response.status_code}, body={body}, json={json}"
    return response

def data_of(response) -> Any:
    return response.json()["data"]

def assert_error(response, status_code: int, message_contains: Optional[str] = None):
    """Check the standard error envelope produced by the exception handlers."""
    assert response.status_code == status_code, f"expected {status_code}, got {response.status_code}: {response.text}"
    error = response.json()["error"]
    assert error["code"]
    if message_contains is not None:
        assert message_contains in error["message"], error["message"]
    return error

"""Pytest configuration and fixtures."""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest


def _mock_client_factory(
    transport: httpx.MockTransport,
    original_cls: type,
) -> Callable[..., httpx.AsyncClient]:
    def _factory(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
        kwargs["transport"] = transport
        return original_cls(*args, **kwargs)

    return _factory


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch) -> Callable[..., List[httpx.Request]]:
    """
    Route every httpx.AsyncClient through a MockTransport.

    Returns an installer taking a request handler; the installer returns the
    list that records each request seen by the handler.
    """

    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> List[httpx.Request]:
        seen: List[httpx.Request] = []

        def _recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(_recording_handler)
        monkeypatch.setattr(
            httpx,
            "AsyncClient",
            _mock_client_factory(transport, httpx.AsyncClient),
        )
        return seen

    return _install


@pytest.fixture
def event_file(tmp_path) -> Callable[[Dict[str, Any]], str]:
    """Write an Actions event payload and return its path."""

    def _write(payload: Dict[str, Any]) -> str:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload))
        return str(path)

    return _write


@pytest.fixture
def action_env() -> Dict[str, str]:
    """Inputs and runner variables for a push-triggered run."""
    return {
        "INPUT_TOKEN": "t",
        "INPUT_IMAGE": "app:1.0",
        "INPUT_BASE-URL": "https://example.com/",
        "GITHUB_TOKEN": "gh-token",
        "GITHUB_REPOSITORY": "octo/app",
        "GITHUB_SHA": "abc123",
    }


"""Tests for the FastAPI surface."""

from __future__ import annotations

from typing import Any, cast

from fastapi.testclient import TestClient

from xchain_relay.server import create_app
from xchain_relay.service import RelayService
from xchain_relay.types import OrchestrationResult, Step


class DummyService:
    def __init__(self, result: OrchestrationResult) -> None:
        self._result = result
        self.payloads: list[Any] = []

    def handle(self, payload: Any) -> OrchestrationResult:
        self.payloads.append(payload)
        return self._result


def _client(result: OrchestrationResult) -> tuple[TestClient, DummyService]:
    service = DummyService(result)
    return TestClient(create_app(cast(RelayService, service))), service


def test_success_returns_200() -> None:
    client, service = _client(OrchestrationResult.succeeded("0xdeadbeef"))

    response = client.post(
        "/transferCrossChain",
        json={"receiver": "0xabc", "destination": "7000", "tokenId": "42"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "transferTx": "0xdeadbeef"}
    assert service.payloads == [{"receiver": "0xabc", "destination": "7000", "tokenId": "42"}]


def test_failure_returns_500_with_step() -> None:
    client, _ = _client(OrchestrationResult.failed(Step.MINT, "insufficient funds"))

    response = client.post("/transferCrossChain", json={"receiver": "0xabc", "destination": "7000"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "step": "mint", "error": "insufficient funds"}


def test_malformed_json_is_forwarded_as_missing_body() -> None:
    client, service = _client(OrchestrationResult.failed(Step.HANDLER, "bad body"))

    response = client.post(
        "/transferCrossChain",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert service.payloads == [None]


def test_cors_preflight_allows_any_origin() -> None:
    client, _ = _client(OrchestrationResult.succeeded("0x01"))

    response = client.options(
        "/transferCrossChain",
        headers={
            "Origin": "https://dapp.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"

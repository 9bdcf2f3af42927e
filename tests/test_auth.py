"""Tests for API token authentication."""

from dataclasses import replace
from uuid import uuid4

from fastapi.testclient import TestClient

from nutrition_insights.api.app import create_app
from nutrition_insights.containers import AppContainer


def test_health_is_public(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_context_requires_token(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get(f"/users/{uuid4()}/context")

    assert response.status_code == 401


def test_context_rejects_wrong_token(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get(
        f"/users/{uuid4()}/context", headers={"X-Api-Token": "wrong"}
    )

    assert response.status_code == 401


def test_rejection_advertises_token_header(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get(f"/users/{uuid4()}/context")

    assert response.headers["www-authenticate"] == "X-Api-Token"


def test_empty_configured_token_locks_api(container: AppContainer) -> None:
    locked = replace(
        container, settings=container.settings.model_copy(update={"api_token": ""})
    )
    client = TestClient(create_app(locked))

    response = client.get(f"/users/{uuid4()}/context", headers={"X-Api-Token": ""})

    assert response.status_code == 401

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from changelog_renderer.main import app

RELEASE = {
    "name": "v1.0.0",
    "date": "2024-01-02",
    "commits": [
        {
            "categories": [":bug: Bug Fix"],
            "githubIssue": {
                "number": 5,
                "title": "fix #5",
                "user": {"login": "al", "html_url": "u"},
            },
        }
    ],
}


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("CHANGELOG_CONFIG", raising=False)
    monkeypatch.delenv("CHANGELOG_BASE_ISSUE_URL", raising=False)
    monkeypatch.delenv("CHANGELOG_UNRELEASED_NAME", raising=False)
    with TestClient(app) as c:
        yield c


def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_render_invalid_input(client: TestClient):
    response = client.post("/render", json={"bad": "data"})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "validation_error"
    assert any(err["loc"][-1] == "releases" for err in body["detail"])


def test_render_invalid_release(client: TestClient):
    response = client.post("/render", json={"releases": [{"date": "2024-01-01"}]})
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_render_with_default_options(client: TestClient):
    response = client.post("/render", json={"releases": [RELEASE]})
    assert response.status_code == 200
    assert response.json()["markdown"] == (
        "## v1.0.0 (2024-01-02)\n\n#### :bug: Bug Fix\n* Closes [#5](5) ([@al](u))\n\n"
    )


def test_render_with_request_options(client: TestClient):
    response = client.post(
        "/render",
        json={
            "releases": [RELEASE],
            "options": {"categories": ["Fixed"], "baseIssueUrl": "https://t/"},
        },
    )
    assert response.status_code == 200
    assert response.json()["markdown"] == ""


def test_render_empty_release_list(client: TestClient):
    response = client.post("/render", json={"releases": []})
    assert response.status_code == 200
    assert response.json() == {"markdown": ""}

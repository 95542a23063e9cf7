"""Integration tests for the content HTTP routes."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from addonstore.api.main import create_app
from addonstore.app_shell.context import StoreContext
from addonstore.domain.entities import AddonDescriptor, User


@pytest.fixture
def client(memory_ctx: StoreContext) -> TestClient:
    return TestClient(create_app(memory_ctx))


@pytest.fixture
def alice(memory_ctx: StoreContext) -> User:
    return memory_ctx.users.add(User(name="alice"))  # type: ignore[union-attr]


def _create(client: TestClient, blog: AddonDescriptor, **body: object) -> dict:
    response = client.post(f"/addons/{blog.id}/content", json={"type": "post", **body})
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "addons": 1}


def test_create_and_get(client: TestClient, blog: AddonDescriptor) -> None:
    created = _create(client, blog, content={"body": "hi"})

    assert created["type"] == "post"
    assert created["addon_id"] == str(blog.id)
    assert created["history"] == []

    fetched = client.get(f"/content/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_invalid_type_boolean_mode(client: TestClient, blog: AddonDescriptor) -> None:
    response = client.post(f"/addons/{blog.id}/content", json={"type": "comment"})

    assert response.status_code == 400
    assert response.json() is False


def test_invalid_type_structured_mode(client: TestClient, blog: AddonDescriptor) -> None:
    response = client.post(
        f"/addons/{blog.id}/content?return_error=true", json={"type": "comment"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "InvalidType"
    assert body["code"] == 1
    assert body["origin"] == "content.create"


def test_unknown_addon(client: TestClient) -> None:
    response = client.post(
        f"/addons/{uuid4()}/content?return_error=true", json={"type": "post"}
    )
    assert response.status_code == 404
    assert response.json()["kind"] == "UnknownAddon"


def test_malformed_addon_id(client: TestClient) -> None:
    response = client.post("/addons/blog/content?return_error=true", json={"type": "post"})
    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidIdentifier"


def test_unknown_owner(client: TestClient, blog: AddonDescriptor) -> None:
    response = client.post(
        f"/addons/{blog.id}/content?return_error=true",
        json={"type": "post", "owner": str(uuid4())},
    )
    assert response.status_code == 404
    assert response.json()["kind"] == "UserNotFound"


def test_update_transfer_delete(
    client: TestClient, blog: AddonDescriptor, alice: User, memory_ctx: StoreContext
) -> None:
    bob = memory_ctx.users.add(User(name="bob"))  # type: ignore[union-attr]
    created = _create(client, blog, content="v1", owner=str(alice.id))
    rid = created["id"]

    updated = client.patch(f"/content/{rid}", json={"content": "v2", "reason": "fix"})
    assert updated.status_code == 200
    assert updated.json()["history"][0]["content"] == "v1"
    assert updated.json()["history"][0]["reason"] == "fix"

    owned = client.get(f"/users/{alice.id}/content")
    assert [r["id"] for r in owned.json()] == [rid]

    moved = client.put(f"/content/{rid}/owner", json={"owner": str(bob.id)})
    assert moved.status_code == 200
    assert moved.json()["owner"] == str(bob.id)
    assert client.get(f"/users/{alice.id}/content").json() == []

    deleted = client.delete(f"/content/{rid}")
    assert deleted.status_code == 200
    assert deleted.json() is True
    assert client.get(f"/users/{bob.id}/content").json() == []

    missing = client.get(f"/content/{rid}?return_error=true")
    assert missing.status_code == 404
    assert missing.json()["kind"] == "ContentNotFound"


def test_invalid_record_id(client: TestClient) -> None:
    response = client.get("/content/not-an-id")
    assert response.status_code == 400
    assert response.json() is False


def test_update_without_content_is_rejected(client: TestClient, blog: AddonDescriptor) -> None:
    created = _create(client, blog, content="v1")

    response = client.patch(f"/content/{created['id']}", json={"reason": "oops"})

    assert response.status_code == 422
    fetched = client.get(f"/content/{created['id']}").json()
    assert fetched["content"] == "v1"
    assert fetched["history"] == []

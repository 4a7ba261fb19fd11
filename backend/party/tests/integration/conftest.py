import pytest
from starlette.testclient import TestClient

from party.server.app import create_app
from party.server.settings import PartyServerSettings


@pytest.fixture
def settings(tmp_path):
    return PartyServerSettings(
        store_backend="file",
        data_path=tmp_path / "db.json",
        public_base_url="https://party.test",
        max_body_bytes=4096,
    )


@pytest.fixture
def client(settings, metadata):
    app = create_app(settings=settings, metadata=metadata)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def host(client):
    response = client.post("/api/parties", json={"partyName": "Friday", "displayName": "Ava"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def guest(client, host):
    response = client.post(f"/api/parties/{host['party']['id']}/join", json={"displayName": "Ben"})
    assert response.status_code == 201
    return response.json()

"""HTTP-level tests for the party API."""

import pytest
from starlette.testclient import TestClient

from party.metadata import TrackMetadata
from party.server.app import build_routes, create_app
from party.server.settings import PartyServerSettings

LINK_X = "https://www.youtube.com/watch?v=xxxxxxxxxxx"
LINK_Y = "https://youtu.be/yyyyyyyyyyy"


def _auth(session: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {session['authToken']}"}


def _base(session: dict) -> str:
    return f"/api/parties/{session['party']['id']}"


def _submit(client, session, url=LINK_X) -> dict:
    response = client.post(f"{_base(session)}/videos", json={"url": url}, headers=_auth(session))
    assert response.status_code == 201, response.text
    return response.json()["submission"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.headers["x-content-type-options"] == "nosniff"


class TestPartyEndpoints:
    def test_create_party(self, host):
        assert host["user"]["role"] == "admin"
        assert host["user"]["name"] == "Ava"
        assert host["authToken"].startswith("tok_")
        assert host["party"]["joinUrl"] == f"https://party.test/party.html?partyId={host['party']['id']}"
        assert len(host["party"]["accessCode"]) == 6

    def test_create_party_requires_names(self, client):
        response = client.post("/api/parties", json={"partyName": "", "displayName": "Ava"})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_request"

    def test_join_url_derived_from_forwarded_headers(self, metadata):
        app = create_app(settings=PartyServerSettings(store_backend="memory"), metadata=metadata)
        with TestClient(app) as client:
            response = client.post(
                "/api/parties",
                json={"partyName": "Friday", "displayName": "Ava"},
                headers={"x-forwarded-proto": "https", "host": "music.local"},
            )

        party_id = response.json()["party"]["id"]
        assert response.json()["party"]["joinUrl"] == f"https://music.local/party.html?partyId={party_id}"

    def test_snapshot_anonymous(self, client, host):
        response = client.get(_base(host))

        body = response.json()
        assert response.status_code == 200
        assert body["party"]["name"] == "Friday"
        assert "accessCode" not in body["party"]
        assert "user" not in body
        assert body["nowPlaying"] is None
        assert body["pollIntervalMs"] == 3000

    def test_snapshot_invalid_token_is_anonymous(self, client, host):
        response = client.get(_base(host), headers={"Authorization": "Bearer tok_bogus"})

        assert response.status_code == 200
        assert "user" not in response.json()

    def test_snapshot_admin_sees_access_code(self, client, host):
        body = client.get(_base(host), headers=_auth(host)).json()

        assert body["party"]["accessCode"] == host["party"]["accessCode"]
        assert body["user"]["role"] == "admin"
        assert body["remainingUploads"] == 3

    def test_snapshot_guest_hides_access_code(self, client, guest):
        body = client.get(_base(guest), headers=_auth(guest)).json()

        assert "accessCode" not in body["party"]
        assert body["user"]["name"] == "Ben"

    def test_unknown_party_is_404(self, client):
        response = client.get("/api/parties/pty_missing")

        assert response.status_code == 404
        assert response.json() == {"error": "Party not found.", "code": "not_found"}

    def test_login(self, client, guest):
        response = client.post(f"{_base(guest)}/login", json={"authToken": guest["authToken"]})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == guest["user"]["id"]

    def test_login_unknown_token(self, client, host):
        response = client.post(f"{_base(host)}/login", json={"authToken": "tok_nope"})

        assert response.status_code == 404

    def test_end_requires_admin(self, client, guest):
        response = client.post(f"{_base(guest)}/end", headers=_auth(guest))

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_end_then_join_is_gone(self, client, host):
        response = client.post(f"{_base(host)}/end", headers=_auth(host))
        assert response.status_code == 200
        assert response.json()["party"]["endedAt"] is not None

        response = client.post(f"{_base(host)}/join", json={"displayName": "Late"})
        assert response.status_code == 410
        assert response.json()["code"] == "party_ended"


class TestSubmissionEndpoints:
    def test_submit_requires_bearer(self, client, host):
        response = client.post(f"{_base(host)}/videos", json={"url": LINK_X})

        assert response.status_code == 401
        assert response.json()["code"] == "authentication_required"

    def test_submit_with_unknown_token(self, client, host):
        response = client.post(f"{_base(host)}/videos", json={"url": LINK_X}, headers={"Authorization": "Bearer x"})

        assert response.status_code == 401

    def test_submit_bad_link(self, client, guest):
        response = client.post(f"{_base(guest)}/videos", json={"url": "https://vimeo.com/1"}, headers=_auth(guest))

        assert response.status_code == 400
        assert "YouTube link" in response.json()["error"]

    def test_submit_returns_enriched_view(self, client, guest):
        submission = _submit(client, guest)

        assert submission["videoId"] == "xxxxxxxxxxx"
        assert submission["title"] == "Song"
        assert submission["submittedBy"] == "Ben"
        assert submission["score"] == 0
        assert submission["viewerVote"] == 0

    def test_quota_is_429(self, client, guest):
        for _ in range(3):
            _submit(client, guest)

        response = client.post(f"{_base(guest)}/videos", json={"url": LINK_X}, headers=_auth(guest))

        assert response.status_code == 429
        assert response.json()["code"] == "quota_exceeded"

    def test_vote_flow(self, client, host, guest):
        _submit(client, host)
        target = _submit(client, host, LINK_Y)
        url = f"{_base(guest)}/videos/{target['id']}/vote"

        response = client.post(url, json={"value": 1}, headers=_auth(guest))
        assert response.json()["submission"]["viewerVote"] == 1
        assert response.json()["submission"]["upvotes"] == 1

        response = client.post(url, json={"value": 0}, headers=_auth(guest))
        assert response.json()["submission"]["viewerVote"] == 0
        assert response.json()["submission"]["score"] == 0

    def test_vote_on_now_playing_conflicts(self, client, host, guest):
        current = _submit(client, host)

        response = client.post(
            f"{_base(guest)}/videos/{current['id']}/vote",
            json={"value": 1},
            headers=_auth(guest),
        )

        assert response.status_code == 409

    def test_vote_value_validated(self, client, host, guest):
        _submit(client, host)
        target = _submit(client, host, LINK_Y)

        response = client.post(
            f"{_base(guest)}/videos/{target['id']}/vote",
            json={"value": 5},
            headers=_auth(guest),
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("action", ["promote", "mark-played", "reset-priority"])
    def test_admin_actions_forbidden_for_guest(self, client, host, guest, action):
        submission = _submit(client, host)

        response = client.post(f"{_base(guest)}/videos/{submission['id']}/{action}", headers=_auth(guest))

        assert response.status_code == 403

    def test_unknown_track_is_404(self, client, host):
        response = client.post(f"{_base(host)}/videos/vid_missing/promote", headers=_auth(host))

        assert response.status_code == 404
        assert response.json()["error"] == "Track not found."

    def test_remove_own_track(self, client, guest):
        submission = _submit(client, guest)

        response = client.delete(f"{_base(guest)}/videos/{submission['id']}", headers=_auth(guest))

        assert response.json() == {"success": True}
        assert client.get(_base(guest)).json()["nowPlaying"] is None

    def test_remove_others_track_forbidden(self, client, host, guest):
        submission = _submit(client, host)

        response = client.delete(f"{_base(guest)}/videos/{submission['id']}", headers=_auth(guest))

        assert response.status_code == 403

    def test_trailing_slash_accepted(self, client, guest):
        response = client.post(f"{_base(guest)}/videos/", json={"url": LINK_X}, headers=_auth(guest))

        assert response.status_code == 201


class TestPlayerEndpoints:
    def test_wrong_access_code(self, client, host):
        response = client.post(f"{_base(host)}/player/state", json={"accessCode": "nope"})

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid access code."

    def test_bearer_token_is_not_an_access_code(self, client, host):
        response = client.post(f"{_base(host)}/player/state", json={}, headers=_auth(host))

        assert response.status_code == 403

    def test_command_round_trip(self, client, host):
        code = host["party"]["accessCode"]
        response = client.post(f"{_base(host)}/player/control", json={"action": "pause"}, headers=_auth(host))
        assert response.status_code == 201
        command = response.json()["command"]
        assert command["action"] == "pause"

        first = client.post(f"{_base(host)}/player/state", json={"accessCode": code}).json()
        second = client.post(f"{_base(host)}/player/state", json={"accessCode": code}).json()
        acked = client.post(f"{_base(host)}/player/state", json={"accessCode": code, "acks": [command["id"]]}).json()

        assert [c["id"] for c in first["commands"]] == [command["id"]]
        assert [c["id"] for c in second["commands"]] == [command["id"]]
        assert acked["commands"] == []

    def test_guest_cannot_control_player(self, client, guest):
        response = client.post(f"{_base(guest)}/player/control", json={"action": "play"}, headers=_auth(guest))

        assert response.status_code == 403

    def test_invalid_action(self, client, host):
        response = client.post(f"{_base(host)}/player/control", json={"action": "skip"}, headers=_auth(host))

        assert response.status_code == 400

    def test_advance_previous_reset(self, client, host):
        code = host["party"]["accessCode"]
        x = _submit(client, host)
        y = _submit(client, host, LINK_Y)

        stale = client.post(f"{_base(host)}/player/advance", json={"accessCode": code, "submissionId": y["id"]})
        assert stale.status_code == 409

        response = client.post(f"{_base(host)}/player/advance", json={"accessCode": code, "submissionId": x["id"]})
        assert response.json() == {"success": True}
        state = client.post(f"{_base(host)}/player/state", json={"accessCode": code}).json()
        assert state["nowPlaying"]["id"] == y["id"]
        assert state["canGoPrevious"] is True
        assert [s["id"] for s in state["history"]] == [x["id"]]

        response = client.post(f"{_base(host)}/player/previous", json={"accessCode": code})
        assert response.json()["submission"]["id"] == x["id"]
        state = client.post(f"{_base(host)}/player/state", json={"accessCode": code}).json()
        assert state["nowPlaying"]["id"] == x["id"]
        assert state["canGoPrevious"] is False

        response = client.post(f"{_base(host)}/player/reset", json={"accessCode": code})
        assert response.json() == {"success": True}

    def test_previous_without_history_is_404(self, client, host):
        response = client.post(f"{_base(host)}/player/previous", json={"accessCode": host["party"]["accessCode"]})

        assert response.status_code == 404


class TestErrors:
    def test_unknown_route_is_json_404(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_wrong_method_is_405(self, client, host):
        response = client.get(f"{_base(host)}/join")

        assert response.status_code == 405

    def test_oversized_body(self, client):
        response = client.post("/api/parties", json={"partyName": "x" * 5000, "displayName": "Ava"})

        assert response.status_code == 400
        assert response.json()["error"] == "Payload too large"

    def test_every_route_has_auth_policy(self):
        assert all(hasattr(route.endpoint, "__auth_policy__") for route in build_routes())


class TestPersistence:
    def test_state_survives_app_restart(self, settings, metadata, client, host):
        _submit(client, host)

        with TestClient(create_app(settings=settings, metadata=metadata)) as restarted:
            body = restarted.get(_base(host)).json()

        assert body["nowPlaying"]["videoId"] == "xxxxxxxxxxx"


class TestEndToEnd:
    def test_party_night(self, client, metadata):
        metadata.result = TrackMetadata(title="Opening Song", channel="Band")
        ava = client.post("/api/parties", json={"partyName": "Friday", "displayName": "Ava"}).json()
        party = _base(ava)
        code = ava["party"]["accessCode"]
        ben = client.post(f"{party}/join", json={"displayName": "Ben"}).json()

        x = _submit(client, ben)
        assert client.get(party, headers=_auth(ben)).json()["remainingUploads"] == 2

        response = client.post(f"{party}/videos/{x['id']}/promote", headers=_auth(ava))
        assert response.status_code == 200
        snapshot = client.get(party).json()
        assert snapshot["nowPlaying"]["id"] == x["id"]
        assert snapshot["nowPlaying"]["title"] == "Opening Song"

        state = client.post(f"{party}/player/state", json={"accessCode": code}).json()
        assert state["nowPlaying"]["id"] == x["id"]

        client.post(f"{party}/player/advance", json={"accessCode": code, "submissionId": x["id"]})
        snapshot = client.get(party).json()
        assert [s["id"] for s in snapshot["history"]] == [x["id"]]
        assert snapshot["nowPlaying"] is None

        assert client.post(f"{party}/end", headers=_auth(ava)).status_code == 200
        assert client.post(f"{party}/join", json={"displayName": "Cy"}).status_code == 410

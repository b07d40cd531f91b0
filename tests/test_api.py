"""HTTP tests for the per-record-type CRUD routes."""

import pytest
from fastapi.testclient import TestClient

from recordkeeper.api.app import create_app

ZELDA = {
    "name": "the Legend of Zelda",
    "description": "Play as link and save the princess",
    "genre": "open world",
}


def create_game(client, headers, **overrides):
    response = client.post("/api/games/post", params={**ZELDA, **overrides}, headers=headers)
    assert response.status_code == 200
    return response.json()


class TestGameScenario:
    def test_create_list_delete_get(self, client, admin_headers, user_headers):
        created = create_game(client, admin_headers)
        key = created["id"]
        assert key > 0
        assert {k: created[k] for k in ZELDA} == ZELDA

        listed = client.get("/api/games/all", headers=user_headers)
        assert listed.status_code == 200
        assert created in listed.json()

        deleted = client.delete("/api/games", params={"id": key}, headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": f"Game with id {key} deleted"}

        missing = client.get("/api/games", params={"id": key}, headers=user_headers)
        assert missing.status_code == 404
        assert missing.json() == {
            "type": "EntityNotFoundException",
            "message": f"Game with id {key} not found",
        }


class TestResponses:
    def test_fields_in_declared_order(self, client, admin_headers):
        created = create_game(client, admin_headers)
        assert list(created) == ["id", "name", "description", "genre"]

    def test_get_by_key(self, client, admin_headers, user_headers):
        created = create_game(client, admin_headers)
        response = client.get("/api/games", params={"id": created["id"]}, headers=user_headers)
        assert response.status_code == 200
        assert response.json() == created

    def test_list_empty(self, client, user_headers):
        response = client.get("/api/groceries/all", headers=user_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_song_year_is_an_integer(self, client, admin_headers):
        response = client.post(
            "/api/songs/post",
            params={"artist": "Radiohead", "album": "OK Computer", "year": "1997"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["year"] == 1997


class TestUpdate:
    def test_update_missing_song(self, client, admin_headers, user_headers):
        response = client.put(
            "/api/songs",
            params={"id": 67},
            json={"artist": "X", "album": "Y", "year": 2020},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json() == {
            "type": "EntityNotFoundException",
            "message": "Song with id 67 not found",
        }
        assert client.get("/api/songs/all", headers=user_headers).json() == []

    def test_full_replace(self, client, admin_headers, user_headers):
        key = create_game(client, admin_headers)["id"]
        replacement = {"name": "Zelda II", "description": "Side scroller", "genre": "action"}

        response = client.put(
            "/api/games", params={"id": key}, json={**replacement, "id": 999}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {"id": key, **replacement}
        fetched = client.get("/api/games", params={"id": key}, headers=user_headers)
        assert fetched.json() == {"id": key, **replacement}

    def test_absent_field_rejected(self, client, admin_headers):
        key = create_game(client, admin_headers)["id"]
        response = client.put(
            "/api/games", params={"id": key}, json={"name": "Zelda II"}, headers=admin_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "ValidationFailure"
        assert sorted(e["field"] for e in body["errors"]) == ["description", "genre"]

    def test_malformed_json_body(self, client, admin_headers):
        key = create_game(client, admin_headers)["id"]
        response = client.put(
            "/api/games",
            params={"id": key},
            content=b"{not json",
            headers={**admin_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Payload must be an object"


class TestHotels:
    HOTEL = {"name": "The Leta", "address": "1 Main St", "description": "Boutique"}

    def test_natural_key(self, client, admin_headers, user_headers):
        created = client.post("/api/hotels/post", params=self.HOTEL, headers=admin_headers)
        assert created.status_code == 200
        assert created.json() == self.HOTEL

        fetched = client.get("/api/hotels", params={"id": "The Leta"}, headers=user_headers)
        assert fetched.json() == self.HOTEL

    def test_create_is_an_upsert(self, client, admin_headers, user_headers):
        client.post("/api/hotels/post", params=self.HOTEL, headers=admin_headers)
        client.post(
            "/api/hotels/post", params={**self.HOTEL, "address": "9 New Rd"}, headers=admin_headers
        )

        hotels = client.get("/api/hotels/all", headers=user_headers).json()
        assert hotels == [{**self.HOTEL, "address": "9 New Rd"}]

    def test_not_found_uses_same_phrase(self, client, user_headers):
        response = client.get("/api/hotels", params={"id": "Nowhere Inn"}, headers=user_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Hotel with id Nowhere Inn not found"

    def test_delete(self, client, admin_headers):
        client.post("/api/hotels/post", params=self.HOTEL, headers=admin_headers)
        response = client.delete("/api/hotels", params={"id": "The Leta"}, headers=admin_headers)
        assert response.json() == {"message": "Hotel with id The Leta deleted"}


class TestAuthorization:
    @pytest.mark.parametrize("path", ["games", "groceries", "songs", "hotels"])
    def test_unauthenticated_denied_everything(self, client, path):
        assert client.get(f"/api/{path}/all").status_code == 403
        assert client.get(f"/api/{path}", params={"id": 1}).status_code == 403
        assert client.post(f"/api/{path}/post").status_code == 403
        assert client.put(f"/api/{path}", params={"id": 1}, json={}).status_code == 403
        assert client.delete(f"/api/{path}", params={"id": 1}).status_code == 403

    @pytest.mark.parametrize("path", ["games", "groceries", "songs", "hotels"])
    def test_user_denied_mutations(self, client, user_headers, path):
        assert client.post(f"/api/{path}/post", headers=user_headers).status_code == 403
        assert (
            client.put(f"/api/{path}", params={"id": 1}, json={}, headers=user_headers).status_code
            == 403
        )
        assert client.delete(f"/api/{path}", params={"id": 1}, headers=user_headers).status_code == 403

    def test_user_denied_valid_create(self, client, user_headers, admin_headers):
        response = client.post("/api/games/post", params=ZELDA, headers=user_headers)
        assert response.status_code == 403
        assert response.json()["type"] == "AccessDeniedException"
        assert client.get("/api/games/all", headers=admin_headers).json() == []

    def test_invalid_token_is_anonymous(self, client):
        response = client.get("/api/games/all", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 403
        assert response.json()["message"] == "Authentication required"

    def test_token_signed_with_other_key(self, client):
        from recordkeeper.auth.jwt_service import JWTService

        token = JWTService("some-other-secret-key-of-decent-length").generate_access_token(
            "1", ["USER", "ADMIN"]
        )
        response = client.get(
            "/api/games/all", headers={"Authorization": f"Bearer {token.access_token}"}
        )
        assert response.status_code == 403


class TestValidation:
    def test_create_missing_fields(self, client, admin_headers):
        response = client.post("/api/games/post", params={"name": "Tetris"}, headers=admin_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "ValidationFailure"
        assert sorted(e["field"] for e in body["errors"]) == ["description", "genre"]

    def test_malformed_key(self, client, user_headers):
        response = client.get("/api/games", params={"id": "abc"}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "id"

    def test_missing_key(self, client, user_headers):
        response = client.get("/api/games", headers=user_headers)
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "id", "message": "Field required"}]

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_key_beyond_64_bits(self, client, admin_headers, method):
        kwargs = {"json": {"name": "N", "genre": "G", "description": "D"}} if method == "put" else {}
        response = client.request(
            method.upper(),
            "/api/games",
            params={"id": "99999999999999999999"},
            headers=admin_headers,
            **kwargs,
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "id"

    def test_year_beyond_64_bits(self, client, admin_headers, user_headers):
        response = client.post(
            "/api/songs/post",
            params={"artist": "A", "album": "B", "year": "99999999999999999999"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "year"
        assert client.get("/api/songs/all", headers=user_headers).json() == []

    def test_blank_hotel_name(self, client, admin_headers, user_headers):
        response = client.post(
            "/api/hotels/post",
            params={"name": "", "address": "1 Main St", "description": "Quiet"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "name"
        assert client.get("/api/hotels/all", headers=user_headers).json() == []


class TestRecordTypes:
    def test_lists_exposed_record_types(self, client, user_headers):
        response = client.get("/api/recordTypes", headers=user_headers)
        assert response.status_code == 200
        names = [rt["recordType"] for rt in response.json()]
        assert sorted(names) == ["Game", "Grocery", "Hotel", "Song"]

    def test_describes_keys(self, client, user_headers):
        by_name = {rt["recordType"]: rt for rt in client.get("/api/recordTypes", headers=user_headers).json()}
        assert by_name["Hotel"]["key"] == {"field": "name", "strategy": "natural"}
        assert by_name["Song"]["path"] == "songs"

    def test_requires_authentication(self, client):
        assert client.get("/api/recordTypes").status_code == 403


class FailingStore:
    """Connected store whose reads blow up like a lost database connection."""

    conn = object()

    def initialize_record_type(self, record_type):
        pass

    def find_all(self, record_type):
        raise RuntimeError("disk I/O error")

    def close(self):
        pass


class TestStoreFailures:
    def test_store_failure_is_internal_error(self, settings, password_service, user_headers, caplog):
        app = create_app(settings, store=FailingStore(), password_service=password_service)
        with TestClient(app, raise_server_exceptions=False) as client:
            with caplog.at_level("ERROR", logger="recordkeeper.api.app"):
                response = client.get("/api/games/all", headers=user_headers)

        assert response.status_code == 500
        assert response.json() == {"type": "InternalError", "message": "Internal server error"}
        assert "disk I/O error" in caplog.text

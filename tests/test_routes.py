"""Tests for API routes."""

from uuid import uuid4

from fastapi.testclient import TestClient
from sqlmodel import Session

from courtside import main
from courtside.core.config import settings
from courtside.models import Game, Profile


def as_user(user_id: str) -> dict:
    return {"X-User-Id": user_id}


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["games"] == "/games"


class TestAuthRoutes:
    """Tests for session status."""

    def test_anonymous(self, client: TestClient):
        response = client.get("/auth/session")
        assert response.status_code == 200
        assert response.json()["signed_in"] is False

    def test_signed_in_creates_profile(self, client: TestClient, session: Session):
        """First sign-in creates a profile with a default name."""
        response = client.get("/auth/session", headers=as_user("alice"))
        data = response.json()
        assert data["signed_in"] is True
        assert data["user_id"] == "alice"
        assert data["display_name"] == "New Player"

        assert session.get(Profile, "alice") is not None

    def test_existing_profile_name(self, client: TestClient, profiles):
        response = client.get("/auth/session", headers=as_user("bob"))
        assert response.json()["display_name"] == "Bob"


class TestGameListing:
    """Tests for listing and viewing games."""

    def test_list_empty(self, client: TestClient):
        response = client.get("/games")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_derives_status(self, client: TestClient, seed_game):
        """A game with four players is listed as confirmed regardless of storage."""
        seed_game(["alice", "bob", "carol", "dave"])
        response = client.get("/games")
        data = response.json()
        assert len(data) == 1
        assert data[0]["reconciled"]["status"] == "confirmed"
        assert data[0]["reconciled"]["participant_count"] == 4

    def test_list_hides_empty_games(self, client: TestClient, seed_game):
        seed_game([], host_id="alice")
        assert client.get("/games").json() == []

    def test_detail_placeholder_names(self, client: TestClient, seed_game, profiles):
        game = seed_game(["alice", "carol"])
        response = client.get(f"/games/{game.id}")
        assert response.status_code == 200
        names = [p["display_name"] for p in response.json()["participants"]]
        assert names == ["Alice", "Unknown"]

    def test_detail_not_found(self, client: TestClient):
        """Test 404 for non-existent game."""
        response = client.get(f"/games/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["kind"] == "game_not_found"

    def test_detail_of_empty_game(self, client: TestClient, seed_game):
        game = seed_game([], host_id="alice")
        assert client.get(f"/games/{game.id}").status_code == 404

    def test_signed_in_detail_repairs_status(
        self, client: TestClient, seed_game, session: Session
    ):
        game = seed_game(["alice", "bob", "carol", "dave"])
        client.get(f"/games/{game.id}", headers=as_user("alice"))

        session.expire_all()
        assert session.get(Game, game.id).status == "confirmed"


class TestCreateGame:
    def test_create(self, client: TestClient):
        response = client.post(
            "/games",
            json={
                "game_date": "2026-05-02",
                "primary_time": "18:00",
                "location": "Court 3",
                "candidate_times": ["19:00"],
            },
            headers=as_user("alice"),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["candidate_times"] == ["19:00"]
        assert data["reconciled"]["status"] == "tentative_voting"
        assert data["reconciled"]["owner_id"] == "alice"

    def test_create_requires_sign_in(self, client: TestClient):
        response = client.post(
            "/games", json={"game_date": "2026-05-02", "primary_time": "18:00"}
        )
        assert response.status_code == 401


class TestJoinAndVote:
    def test_join_confirms_at_quorum(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob", "carol"])
        response = client.post(
            f"/games/{game.id}/join", json={"voted_time": "18:00"}, headers=as_user("dave")
        )
        assert response.status_code == 200
        assert response.json()["reconciled"]["status"] == "confirmed"

    def test_join_without_body(self, client: TestClient, seed_game):
        game = seed_game(["alice"])
        response = client.post(f"/games/{game.id}/join", headers=as_user("bob"))
        assert response.status_code == 200
        assert response.json()["reconciled"]["participant_count"] == 2

    def test_join_with_unknown_time(self, client: TestClient, seed_game):
        game = seed_game(["alice"], candidate_times=["19:00"])
        response = client.post(
            f"/games/{game.id}/join", json={"voted_time": "23:00"}, headers=as_user("bob")
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_vote"

    def test_join_unknown_game(self, client: TestClient):
        response = client.post(f"/games/{uuid4()}/join", headers=as_user("bob"))
        assert response.status_code == 404

    def test_vote(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob"], candidate_times=["19:00"])
        response = client.post(
            f"/games/{game.id}/vote", json={"voted_time": "19:00"}, headers=as_user("bob")
        )
        assert response.status_code == 200
        assert response.json()["reconciled"]["vote_counts"] == {"18:00": 1, "19:00": 1}

    def test_vote_requires_time(self, client: TestClient, seed_game):
        game = seed_game(["alice"], candidate_times=["19:00"])
        response = client.post(f"/games/{game.id}/vote", json={}, headers=as_user("alice"))
        assert response.status_code == 400

    def test_note(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob"])
        response = client.post(
            f"/games/{game.id}/note", json={"note": "bringing balls"}, headers=as_user("bob")
        )
        assert response.status_code == 200
        notes = {p["user_id"]: p["status_note"] for p in response.json()["participants"]}
        assert notes["bob"] == "bringing balls"

    def test_note_by_non_member(self, client: TestClient, seed_game):
        game = seed_game(["alice"])
        response = client.post(
            f"/games/{game.id}/note", json={"note": "hi"}, headers=as_user("bob")
        )
        assert response.status_code == 403


class TestEditGame:
    def test_host_edit(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob"])
        response = client.patch(
            f"/games/{game.id}", json={"location": "Court 9"}, headers=as_user("alice")
        )
        assert response.status_code == 200
        assert response.json()["location"] == "Court 9"

    def test_non_host_edit(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob"])
        response = client.patch(
            f"/games/{game.id}", json={"location": "Court 9"}, headers=as_user("bob")
        )
        assert response.status_code == 403
        assert response.json()["kind"] == "not_game_owner"


class TestLeaveAndCancel:
    def test_leave_transfers_host(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob", "carol"])
        response = client.post(f"/games/{game.id}/leave", headers=as_user("alice"))
        assert response.status_code == 200
        data = response.json()
        assert data["removed"] is False
        assert data["game"]["reconciled"]["owner_id"] == "bob"

    def test_last_player_leaving_removes_game(self, client: TestClient, seed_game):
        game = seed_game(["alice"])
        response = client.post(f"/games/{game.id}/leave", headers=as_user("alice"))
        assert response.json() == {"removed": True, "game": None}
        assert client.get("/games").json() == []

    def test_cancel_by_host(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob"])
        response = client.post(f"/games/{game.id}/cancel", headers=as_user("alice"))
        assert response.status_code == 200
        assert response.json()["removed"] is True
        assert client.get(f"/games/{game.id}").status_code == 404

    def test_cancel_by_non_host(self, client: TestClient, seed_game):
        game = seed_game(["alice", "bob"])
        response = client.post(f"/games/{game.id}/cancel", headers=as_user("bob"))
        assert response.status_code == 403


class TestProfileRoutes:
    def test_get_my_profile(self, client: TestClient, profiles):
        response = client.get("/profiles/me", headers=as_user("alice"))
        assert response.status_code == 200
        assert response.json()["avatar_url"] == "https://example.com/a.png"

    def test_update_profile(self, client: TestClient):
        response = client.put(
            "/profiles/me", json={"display_name": "Zed", "phone": "555-0199"}, headers=as_user("zed")
        )
        assert response.status_code == 200
        assert response.json()["display_name"] == "Zed"
        assert response.json()["phone"] == "555-0199"

    def test_blank_name_ignored(self, client: TestClient, profiles):
        response = client.put("/profiles/me", json={"display_name": "  "}, headers=as_user("bob"))
        assert response.json()["display_name"] == "Bob"

    def test_requires_sign_in(self, client: TestClient):
        assert client.get("/profiles/me").status_code == 401


class TestSweepRoutes:
    def test_sweep_now(self, client: TestClient, seed_game, session: Session):
        game = seed_game(["alice", "bob", "carol", "dave"], host_id="zed")
        response = client.post("/sweep/now")
        assert response.status_code == 200
        assert response.json()["persisted"] == 1

        session.expire_all()
        repaired = session.get(Game, game.id)
        assert repaired.status == "confirmed"
        assert repaired.host_id == "alice"

    def test_sweep_status(self, client: TestClient):
        data = client.get("/sweep/status").json()
        assert data["running"] is False
        assert "interval_minutes" in data


class TestServe:
    def test_run_uses_configured_host_and_port(self, monkeypatch):
        """The run command binds uvicorn to the host and port from settings."""
        calls = []
        monkeypatch.setattr(settings, "host", "127.0.0.1")
        monkeypatch.setattr(settings, "port", 9123)
        monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        main.run()

        assert calls == [
            ("courtside.main:app", {"host": "127.0.0.1", "port": 9123, "reload": settings.debug})
        ]

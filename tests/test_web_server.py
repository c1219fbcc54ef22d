"""
HTTP tests for the game API.

Runs the real aiohttp application (real mystery catalog and files) with a
FakeCollaborator in place of the language model.
"""

from unittest.mock import Mock

import pytest

import web_server
from web_server import create_app

PLAYER = {"X-Player-ID": "detective-42"}


@pytest.fixture
async def client(aiohttp_client, fake_model):
    app = await create_app(model=fake_model, tick_interval=3600)
    return await aiohttp_client(app)


async def start_game(client, mystery_id="blackwood", headers=PLAYER):
    resp = await client.post("/api/v1/game/start", json={"mystery_id": mystery_id}, headers=headers)
    assert resp.status == 200
    return await resp.json()


class TestMysteries:
    async def test_list_mysteries(self, client):
        resp = await client.get("/api/v1/mysteries")
        assert resp.status == 200

        data = await resp.json()
        ids = [mystery["id"] for mystery in data["mysteries"]]
        assert ids == ["diner_secrets", "blackwood", "corporate_betrayal", "cruise_ship"]
        assert set(data["mysteries"][0]) == {"id", "title", "description", "difficulty"}


class TestStartGame:
    async def test_start_game(self, client):
        data = await start_game(client)

        assert data["session_id"]
        assert data["title"] == "The Blackwood Manor Murder"
        assert data["intro"]
        assert data["killer"] == "Eleanor Blackwood"
        assert data["weapon"] == "a silver letter opener"
        assert data["location"] == "the library"
        names = [character["name"] for character in data["characters"]]
        assert "Thomas Reed" in names
        assert set(data["characters"][0]) == {"name", "personality", "sprite"}
        assert [character["sprite"] for character in data["characters"]] == [
            "eleanor.png", "thomas.png", "margaret.png", "victor.png",
        ]

    async def test_characters_without_sprites(self, client):
        data = await start_game(client, "diner_secrets")
        assert all(set(character) == {"name", "personality"} for character in data["characters"])

    async def test_unknown_mystery(self, client):
        resp = await client.post("/api/v1/game/start", json={"mystery_id": "atlantis"})
        assert resp.status == 404
        assert (await resp.json())["error"] == "mystery_not_found"

    async def test_malformed_body(self, client):
        resp = await client.post("/api/v1/game/start", data="not json", headers={"Content-Type": "application/json"})
        assert resp.status == 400
        assert (await resp.json())["error"] == "invalid_request"

    async def test_missing_field(self, client):
        resp = await client.post("/api/v1/game/start", json={})
        assert resp.status == 400


class TestAsk:
    async def test_ask_character(self, client):
        game = await start_game(client)

        resp = await client.post(
            f"/api/v1/game/{game['session_id']}/ask",
            json={"character_name": "Thomas Reed", "question": "What did you hear?", "current_stress": 20},
            headers=PLAYER,
        )

        assert resp.status == 200
        data = await resp.json()
        assert data["character"] == "Thomas Reed"
        assert data["question"] == "What did you hear?"
        assert data["response"] == "I was in the garden all evening."
        assert data["emotion"] == "nervous"
        assert 0 <= data["stress_level"] <= 100
        assert data["stress_state"] in {"calm", "composed", "nervous", "agitated", "stressed", "panicking"}
        assert "stress_change" in data

    @pytest.mark.parametrize("stress", [150, -3, "50", None])
    async def test_invalid_stress(self, client, stress):
        game = await start_game(client)
        resp = await client.post(
            f"/api/v1/game/{game['session_id']}/ask",
            json={"character_name": "Thomas Reed", "question": "Hi?", "current_stress": stress},
            headers=PLAYER,
        )
        assert resp.status == 400

    async def test_blank_question(self, client):
        game = await start_game(client)
        resp = await client.post(
            f"/api/v1/game/{game['session_id']}/ask",
            json={"character_name": "Thomas Reed", "question": "  ", "current_stress": 0},
            headers=PLAYER,
        )
        assert resp.status == 400

    async def test_unknown_character(self, client):
        game = await start_game(client)
        resp = await client.post(
            f"/api/v1/game/{game['session_id']}/ask",
            json={"character_name": "Colonel Mustard", "question": "Hi?", "current_stress": 0},
            headers=PLAYER,
        )
        assert resp.status == 404
        assert (await resp.json())["error"] == "character_not_found"

    async def test_unknown_session(self, client):
        resp = await client.post(
            "/api/v1/game/nope/ask",
            json={"character_name": "Thomas Reed", "question": "Hi?", "current_stress": 0},
        )
        assert resp.status == 404
        assert (await resp.json())["error"] == "session_not_found"

    async def test_other_player_is_denied(self, client):
        game = await start_game(client)
        resp = await client.post(
            f"/api/v1/game/{game['session_id']}/ask",
            json={"character_name": "Thomas Reed", "question": "Hi?", "current_stress": 0},
            headers={"X-Player-ID": "someone-else"},
        )
        assert resp.status == 403
        assert (await resp.json())["error"] == "access_denied"

    async def test_model_outage_is_retryable(self, client, fake_model):
        game = await start_game(client)
        url = f"/api/v1/game/{game['session_id']}/ask"
        body = {"character_name": "Thomas Reed", "question": "Hi?", "current_stress": 0}

        fake_model.fail_with = ConnectionError("connection refused")
        resp = await client.post(url, json=body, headers=PLAYER)
        assert resp.status == 503
        assert (await resp.json())["error"] == "collaborator_unavailable"

        fake_model.fail_with = None
        resp = await client.post(url, json=body, headers=PLAYER)
        assert resp.status == 200


class TestAccuse:
    async def test_accuse_then_game_is_over(self, client):
        game = await start_game(client)
        url = f"/api/v1/game/{game['session_id']}/accuse"

        resp = await client.post(url, json={"suspect": "Eleanor Blackwood"}, headers=PLAYER)
        assert resp.status == 200
        verdict = await resp.json()
        assert verdict["correct"] is True
        assert verdict["killer"] == "Eleanor Blackwood"
        assert verdict["weapon"] == "a silver letter opener"
        assert verdict["location"] == "the library"
        assert verdict["questions"] == 0
        assert "Congratulations" in verdict["message"]

        resp = await client.post(url, json={"suspect": "Eleanor Blackwood"}, headers=PLAYER)
        assert resp.status == 409
        assert (await resp.json())["error"] == "game_over"

        resp = await client.get(f"/api/v1/game/{game['session_id']}/timer", headers=PLAYER)
        assert (await resp.json())["game_over"] is True


class TestTimer:
    async def test_timer_and_toggle(self, client):
        game = await start_game(client)
        base = f"/api/v1/game/{game['session_id']}/timer"

        resp = await client.get(base, headers=PLAYER)
        assert resp.status == 200
        status = await resp.json()
        assert status["timer_enabled"] is True
        assert status["game_over"] is False
        assert 0 < status["remaining_time"] <= 3600

        resp = await client.post(f"{base}/toggle", headers=PLAYER)
        assert resp.status == 200
        assert await resp.json() == {"timer_enabled": False}


class TestOperational:
    async def test_health(self, client):
        await start_game(client)
        resp = await client.get("/health")
        assert resp.status == 200
        assert await resp.json() == {"status": "ok", "sessions": 1}

    async def test_metrics(self, client):
        await client.get("/api/v1/mysteries")
        resp = await client.get("/metrics")
        assert resp.status == 200
        text = await resp.text()
        assert "investigation_requests_total" in text


class TestMain:
    def test_disconnect_cancels_handlers(self, monkeypatch):
        run_app = Mock()
        monkeypatch.setattr(web_server.web, "run_app", run_app)
        monkeypatch.setattr(web_server, "create_app", Mock(return_value="app"))
        monkeypatch.setattr(web_server, "setup_logging", Mock())

        web_server.main()

        assert run_app.call_args.args == ("app",)
        assert run_app.call_args.kwargs["handler_cancellation"] is True

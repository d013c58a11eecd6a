"""Tests for API endpoints."""

from decimal import Decimal
from random import Random

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

import api.session as session_module
from api.main import app
from api.routes import game as game_routes
from core.cards import Card, Shoe
from core.game import RoundEngine


@pytest_asyncio.fixture
async def client():
    """Create test client backed by an in-memory session store."""
    session_module.set_session_store(session_module.InMemorySessionStore())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    session_module.set_session_store(None)


async def _new_session(client) -> dict[str, str]:
    response = await client.post("/api/game/new")
    return {"X-Session-ID": response.json()["session_id"]}


def _install_stacked_game(headers: dict[str, str], *cards: str) -> RoundEngine:
    shoe = Shoe(rng=Random(3))
    shoe.stack(Card.from_string(c) for c in cards)
    engine = RoundEngine(shoe=shoe)
    game_routes._games[headers["X-Session-ID"]] = engine
    return engine


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_new_game(client):
    response = await client.post("/api/game/new")
    assert response.status_code == 200
    assert "session_id" in response.json()


@pytest.mark.asyncio
async def test_unsigned_session_rejected(client):
    headers = {"X-Session-ID": "made-up-session"}

    assert (await client.get("/api/game/state", headers=headers)).status_code == 401
    response = await client.post("/api/game/start", json={"bet": 100}, headers=headers)
    assert response.status_code == 401
    assert "made-up-session" not in game_routes._games


@pytest.mark.asyncio
async def test_new_game_replaces_unsigned_session(client):
    response = await client.post("/api/game/new", headers={"X-Session-ID": "made-up-session"})

    session_id = response.json()["session_id"]
    assert session_id != "made-up-session"
    assert session_module.extract_session_id(session_id) is not None


@pytest.mark.asyncio
async def test_new_game_keeps_signed_session(client):
    headers = await _new_session(client)

    response = await client.post("/api/game/new", headers=headers)

    assert response.json()["session_id"] == headers["X-Session-ID"]


@pytest.mark.asyncio
async def test_initial_state(client):
    headers = await _new_session(client)

    response = await client.get("/api/game/state", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["game_status"] == "waiting"
    assert Decimal(str(data["bankroll"])) == 500
    assert data["message"] == "Want to play a round?"
    assert data["player_hand"] == []
    assert data["current_split_hand"] == -1
    assert data["is_split"] is False


@pytest.mark.asyncio
async def test_start_round(client):
    headers = await _new_session(client)

    response = await client.post("/api/game/start", json={"bet": 100}, headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["game_status"] == "playing"
    assert Decimal(str(data["bankroll"])) == 400
    assert len(data["player_hand"]) == 2
    assert len(data["dealer_hand"]) == 1


@pytest.mark.asyncio
async def test_bet_below_minimum_rejected(client):
    headers = await _new_session(client)
    response = await client.post("/api/game/start", json={"bet": 0}, headers=headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_bet_above_bankroll_rejected(client):
    headers = await _new_session(client)

    response = await client.post("/api/game/start", json={"bet": 1000}, headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Not enough money to place bet!"


@pytest.mark.asyncio
async def test_stand_finishes_round(client):
    headers = await _new_session(client)
    _install_stacked_game(headers, "KS", "QH", "9C", "10D")
    await client.post("/api/game/start", json={"bet": 100}, headers=headers)

    response = await client.post("/api/game/action", json={"action": "stand"}, headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["game_status"] == "finished"
    assert data["message"] == "You win!"
    assert data["dealer_total"] == 19
    assert Decimal(str(data["bankroll"])) == 600


@pytest.mark.asyncio
async def test_split_action(client):
    headers = await _new_session(client)
    _install_stacked_game(headers, "8S", "8H", "10C", "3D", "2C")
    start = await client.post("/api/game/start", json={"bet": 100}, headers=headers)
    assert start.json()["can_split"] is True

    response = await client.post("/api/game/action", json={"action": "split"}, headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["player_hand"] == []
    assert [h["total"] for h in data["split_hands"]] == [11, 10]
    assert data["is_split"] is True
    assert data["current_split_hand"] == 0
    assert Decimal(str(data["bankroll"])) == 300


@pytest.mark.asyncio
async def test_insurance_action(client):
    headers = await _new_session(client)
    _install_stacked_game(headers, "10S", "9H", "AC")
    await client.post("/api/game/start", json={"bet": 100}, headers=headers)

    response = await client.post(
        "/api/game/action", json={"action": "insurance"}, headers=headers
    )

    data = response.json()
    assert data["has_insurance"] is True
    assert Decimal(str(data["insurance_bet"])) == 50
    assert Decimal(str(data["bankroll"])) == 350


@pytest.mark.asyncio
async def test_ineligible_split_rejected(client):
    headers = await _new_session(client)
    _install_stacked_game(headers, "KS", "QH", "9C")
    await client.post("/api/game/start", json={"bet": 100}, headers=headers)

    response = await client.post("/api/game/action", json={"action": "split"}, headers=headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_action_before_start_rejected(client):
    headers = await _new_session(client)
    response = await client.post("/api/game/action", json={"action": "hit"}, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_action_rejected(client):
    headers = await _new_session(client)
    response = await client.post("/api/game/action", json={"action": "double"}, headers=headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reset(client):
    headers = await _new_session(client)
    await client.post("/api/game/start", json={"bet": 100}, headers=headers)

    response = await client.post("/api/game/reset", headers=headers)

    data = response.json()
    assert data["game_status"] == "waiting"
    assert Decimal(str(data["bankroll"])) == 500
    assert data["dealer_hand"] == []


@pytest.mark.asyncio
async def test_round_reloaded_from_store(client):
    """A game evicted from the cache is restored from the session store."""
    headers = await _new_session(client)
    await client.post("/api/game/start", json={"bet": 100}, headers=headers)
    before = (await client.get("/api/game/state", headers=headers)).json()

    del game_routes._games[headers["X-Session-ID"]]
    after = (await client.get("/api/game/state", headers=headers)).json()

    assert after == before

import threading

import pytest
from fastapi.testclient import TestClient

import web.app
from chesscore.board import Color
from chesscore.constants import MAX_DEPTH
from chesscore.notation import state_from_fen
from web.app import GameSession, MoveRequest, app

client = TestClient(app)

FOOLS_MATE_TO_PLAY = "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq g3 0 2"
FOOLS_MATE_DONE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


@pytest.fixture
def game_id():
    response = client.post("/api/games")
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def ai_game_id():
    """A game against the AI, which plays Black."""
    response = client.post("/api/games", json={"mode": "ai", "ai_color": "black"})
    assert response.status_code == 201
    return response.json()["id"]


def _play(game_id, from_, to, promotion=None):
    body = {"from": from_, "to": to}
    if promotion:
        body["promotion"] = promotion
    return client.post(f"/api/games/{game_id}/moves", json=body)


# ---------------------------------------------------------------------------
# Stateless engine route
# ---------------------------------------------------------------------------


def test_api_move_finds_mate():
    response = client.post("/api/move", json={"fen": FOOLS_MATE_TO_PLAY, "depth": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["move"] == "d8h4"
    assert data["fen"] == FOOLS_MATE_DONE
    assert data["depth"] == 2
    assert data["nodes"] > 0


def test_api_move_clamps_low_depth():
    response = client.post("/api/move", json={"fen": FOOLS_MATE_TO_PLAY, "depth": 0})
    assert response.status_code == 200
    assert response.json()["depth"] == 1


def test_depth_is_clamped_to_maximum():
    assert MoveRequest(fen=FOOLS_MATE_TO_PLAY, depth=99).depth == MAX_DEPTH


def test_api_move_rejects_bad_fen():
    response = client.post("/api/move", json={"fen": "nonsense"})
    assert response.status_code == 400


def test_api_move_rejects_finished_game():
    response = client.post("/api/move", json={"fen": FOOLS_MATE_DONE, "depth": 1})
    assert response.status_code == 400
    assert "checkmate" in response.json()["detail"]


def test_api_move_rejects_impossible_position():
    response = client.post("/api/move", json={"fen": "4k3/8/8/8/8/8/4Q3/4K3 w - - 0 1"})
    assert response.status_code == 400


# ---------------------------------------------------------------------------
# In-memory games
# ---------------------------------------------------------------------------


def test_new_game_view(game_id):
    data = client.get(f"/api/games/{game_id}").json()
    assert data["fen"].startswith("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq")
    assert data["side_to_move"] == "white"
    assert data["mode"] == "pvp"
    assert data["ai_color"] is None
    assert len(data["board"]) == 32
    assert data["history"] == []
    assert data["captured"] == {"white": [], "black": []}
    assert data["in_check"] is False
    assert data["result"] is None


def test_unknown_game():
    assert client.get("/api/games/missing").status_code == 404
    assert client.post("/api/games/missing/undo").status_code == 404


def test_legal_moves_for_highlighting(game_id):
    response = client.get(f"/api/games/{game_id}/moves/e2")
    assert response.status_code == 200
    data = response.json()
    assert data["square"] == "e2"
    assert sorted(m["to"] for m in data["moves"]) == ["e3", "e4"]

    assert client.get(f"/api/games/{game_id}/moves/e5").json()["moves"] == []
    assert client.get(f"/api/games/{game_id}/moves/z9").status_code == 400


def test_play_capture_and_undo(game_id):
    for from_, to in [("e2", "e4"), ("d7", "d5")]:
        assert _play(game_id, from_, to).status_code == 200

    response = _play(game_id, "e4", "d5")
    data = response.json()
    assert data["is_capture"] is True
    assert data["notation"] == "exd5"
    assert data["game"]["captured"]["black"] == ["pawn"]

    undone = client.post(f"/api/games/{game_id}/undo").json()
    assert undone["undone"] is True
    assert undone["plies"] == 1
    assert undone["game"]["history"] == ["e4", "d5"]
    assert undone["game"]["captured"]["black"] == []


def test_undo_on_fresh_game(game_id):
    data = client.post(f"/api/games/{game_id}/undo").json()
    assert data["undone"] is False
    assert data["plies"] == 0


def test_illegal_move_is_rejected(game_id):
    response = _play(game_id, "e2", "e5")
    assert response.status_code == 400
    assert client.get(f"/api/games/{game_id}").json()["history"] == []


def test_promotion_round_trip():
    web.app._GAMES["promotion"] = GameSession(state_from_fen("8/P6k/8/8/8/8/8/K7 w - - 0 1"))

    pending = _play("promotion", "a7", "a8").json()
    assert pending["is_promotion_pending"] is True
    assert pending["notation"] is None
    assert pending["game"]["history"] == []

    done = _play("promotion", "a7", "a8", "knight").json()
    assert done["is_promotion_pending"] is False
    assert done["notation"] == "a8=N"
    assert {"position": "a8", "piece": {"type": "knight", "color": "white"}} in done["game"]["board"]


def test_checkmate_ends_the_game(game_id):
    for from_, to in [("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4")]:
        response = _play(game_id, from_, to)
    data = response.json()["game"]
    assert data["in_check"] is True
    assert data["result"] == {"kind": "checkmate", "winner": "black"}

    assert _play(game_id, "a2", "a3").status_code == 400
    assert client.post(f"/api/games/{game_id}/ai-move").status_code == 400




def test_ai_move_refused_once_the_game_is_over():
    web.app._GAMES["mated"] = GameSession(
        state_from_fen(FOOLS_MATE_DONE), mode="ai", ai_color=Color.WHITE
    )
    response = client.post("/api/games/mated/ai-move", json={"depth": 1})
    assert response.status_code == 400
    assert response.json()["detail"] == "Game is already over"


def test_delete_game(game_id):
    assert client.delete(f"/api/games/{game_id}").status_code == 204
    assert client.get(f"/api/games/{game_id}").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


# ---------------------------------------------------------------------------
# Games against the AI
# ---------------------------------------------------------------------------


def test_ai_move(ai_game_id):
    _play(ai_game_id, "e2", "e4")
    response = client.post(f"/api/games/{ai_game_id}/ai-move", json={"depth": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["depth"] == 1
    assert data["game"]["side_to_move"] == "white"
    assert data["game"]["history"][-1] == data["notation"]


def test_ai_move_without_body(ai_game_id):
    _play(ai_game_id, "d2", "d4")
    response = client.post(f"/api/games/{ai_game_id}/ai-move")
    assert response.status_code == 200
    assert len(response.json()["game"]["history"]) == 2


def test_ai_playing_white_opens_the_game():
    response = client.post("/api/games", json={"mode": "ai", "ai_color": "white", "depth": 1})
    assert response.status_code == 201
    data = response.json()
    assert data["mode"] == "ai"
    assert data["ai_color"] == "white"
    assert len(data["history"]) == 1
    assert data["side_to_move"] == "black"


def test_ai_move_only_on_the_ais_turn(ai_game_id):
    response = client.post(f"/api/games/{ai_game_id}/ai-move", json={"depth": 1})
    assert response.status_code == 400
    assert response.json()["detail"] == "It is not the AI's turn"


def test_pvp_game_has_no_ai(game_id):
    response = client.post(f"/api/games/{game_id}/ai-move", json={"depth": 1})
    assert response.status_code == 400
    assert response.json()["detail"] == "Game has no AI player"


def test_player_cannot_move_for_the_ai(ai_game_id):
    _play(ai_game_id, "e2", "e4")
    response = _play(ai_game_id, "e7", "e5")
    assert response.status_code == 400
    assert client.get(f"/api/games/{ai_game_id}").json()["history"] == ["e4"]


def test_undo_against_the_ai_takes_back_the_reply_too(ai_game_id):
    _play(ai_game_id, "e2", "e4")
    client.post(f"/api/games/{ai_game_id}/ai-move", json={"depth": 1})

    data = client.post(f"/api/games/{ai_game_id}/undo").json()
    assert data["plies"] == 2
    assert data["game"]["history"] == []
    assert data["game"]["side_to_move"] == "white"


def test_undo_before_the_ai_replies_takes_back_one_move(ai_game_id):
    _play(ai_game_id, "e2", "e4")
    data = client.post(f"/api/games/{ai_game_id}/undo").json()
    assert data["plies"] == 1
    assert data["game"]["history"] == []


def test_other_games_are_served_during_a_search(ai_game_id, game_id, monkeypatch):
    _play(ai_game_id, "e2", "e4")
    started = threading.Event()
    release = threading.Event()
    real_search = web.app.search

    def held_search(*args, **kwargs):
        started.set()
        release.wait(timeout=10)
        return real_search(*args, **kwargs)

    monkeypatch.setattr(web.app, "search", held_search)
    responses = {}

    def request_ai_move():
        responses["ai"] = client.post(f"/api/games/{ai_game_id}/ai-move", json={"depth": 1})

    def request_other_game():
        responses["other"] = client.get(f"/api/games/{game_id}")

    searcher = threading.Thread(target=request_ai_move)
    searcher.start()
    try:
        assert started.wait(timeout=10)
        reader = threading.Thread(target=request_other_game)
        reader.start()
        reader.join(timeout=5)
        assert not reader.is_alive()
        assert responses["other"].status_code == 200
    finally:
        release.set()
        searcher.join(timeout=10)
    assert responses["ai"].status_code == 200

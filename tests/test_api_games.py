from fastapi.testclient import TestClient

from app.main import app, gcs_history_store


client = TestClient(app)

PLAYERS = ["Alice", "Bob", "Carol"]


def create_game(holes: int = 3) -> dict:
    response = client.post("/api/v1/games", json={"players": PLAYERS, "holes": holes})
    assert response.status_code == 200
    return response.json()


def enter_hole(game_id: str, hole_number: int, results: dict):
    return client.put(f"/api/v1/games/{game_id}/holes/{hole_number}", json={"results": results})


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_score_endpoint_success():
    payload = {
        "players": PLAYERS,
        "holes": [
            {"Alice": "Birdie", "Bob": "Par", "Carol": "Bogey"},
            {
                "Alice": {"kind": "label", "label": "Eagle"},
                "Bob": {"kind": "label", "label": "Eagle"},
                "Carol": {"kind": "custom", "value": 3},
            },
        ],
    }
    response = client.post("/api/v1/score", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["result"]["total_scores"] == {"Alice": -3, "Bob": -2, "Carol": 4}
    assert body["result"]["wolf_scores"] == {"Alice": 7, "Bob": 5, "Carol": 0}
    assert body["result"]["medals"] == {"Alice": "1st", "Bob": "2nd", "Carol": "3rd"}


def test_score_endpoint_treats_malformed_custom_as_unentered():
    payload = {"players": PLAYERS, "holes": [{"Alice": "Custom:x", "Bob": "Par", "Carol": "Bogey"}]}
    response = client.post("/api/v1/score", json=payload)
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["total_scores"] == {"Alice": 0, "Bob": 0, "Carol": 1}
    assert result["hole_points"] == [None]
    assert result["complete_holes"] == []


def test_score_endpoint_rejects_empty_players():
    response = client.post("/api/v1/score", json={"players": [], "holes": [{}]})
    assert response.status_code == 422
    assert "At least one player" in response.text


def test_score_endpoint_rejects_unknown_player():
    payload = {"players": PLAYERS, "holes": [{"Dave": "Par"}]}
    response = client.post("/api/v1/score", json=payload)
    assert response.status_code == 422
    assert "unknown players: Dave" in response.text


def test_create_game_rejects_duplicate_players():
    response = client.post("/api/v1/games", json={"players": ["Alice", "Alice", "Bob"]})
    assert response.status_code == 422
    assert "Duplicate player name" in response.text


def test_create_game_defaults():
    response = client.post("/api/v1/games", json={"players": PLAYERS})
    assert response.status_code == 200
    body = response.json()
    assert body["holes"] == 9
    assert body["current_hole"] == 1
    assert body["in_progress"] is True
    assert body["scores"][0]["Alice"] == {"kind": "unentered"}
    assert body["result"]["adjusted_wolf_scores"] == {"Alice": 0, "Bob": 0, "Carol": 0}


def test_game_round_lifecycle():
    game_id = create_game()["game_id"]

    response = enter_hole(game_id, 1, {"Alice": "Birdie", "Bob": "Par", "Carol": "Bogey"})
    assert response.status_code == 200
    response = enter_hole(game_id, 2, {"Alice": "Bogey", "Bob": "Bogey", "Carol": "Birdie"})
    assert response.status_code == 200
    body = response.json()
    assert body["current_hole"] == 2
    assert body["result"]["wolf_scores"] == {"Alice": 5, "Bob": 3, "Carol": 4}
    assert body["result"]["adjusted_wolf_scores"] == {"Alice": 2, "Bob": 0, "Carol": 1}
    assert body["result"]["complete_holes"] == [1, 2]

    current = client.get("/api/v1/games/current")
    assert current.status_code == 200

    finished = client.post(f"/api/v1/games/{game_id}/finish")
    assert finished.status_code == 200
    assert finished.json()["in_progress"] is False

    response = enter_hole(game_id, 3, {"Alice": "Par"})
    assert response.status_code == 409

    history = client.get("/api/v1/games", params={"in_progress": False})
    assert history.status_code == 200
    summary = next(g for g in history.json()["games"] if g["game_id"] == game_id)
    assert summary["total_scores"] == {"Alice": 0, "Bob": 1, "Carol": 0}


def test_update_hole_partial_entry_keeps_other_players():
    game_id = create_game()["game_id"]
    enter_hole(game_id, 1, {"Alice": "Birdie"})
    response = enter_hole(game_id, 1, {"Bob": "Custom:4"})
    body = response.json()
    assert body["scores"][0]["Alice"] == {"kind": "label", "label": "Birdie"}
    assert body["scores"][0]["Bob"] == {"kind": "custom", "value": 4}
    assert body["result"]["total_scores"] == {"Alice": -1, "Bob": 4, "Carol": 0}
    assert body["result"]["hole_points"][0] is None


def test_move_to_hole_without_entering_results():
    game_id = create_game()["game_id"]
    enter_hole(game_id, 1, {"Alice": "Birdie", "Bob": "Par", "Carol": "Bogey"})

    response = client.put(f"/api/v1/games/{game_id}/current-hole", json={"current_hole": 3})
    assert response.status_code == 200
    assert response.json()["current_hole"] == 3
    assert client.get(f"/api/v1/games/{game_id}").json()["current_hole"] == 3

    response = client.put(f"/api/v1/games/{game_id}/current-hole", json={"current_hole": 4})
    assert response.status_code == 422

    client.post(f"/api/v1/games/{game_id}/finish")
    response = client.put(f"/api/v1/games/{game_id}/current-hole", json={"current_hole": 2})
    assert response.status_code == 409


def test_update_hole_accepts_bare_integers():
    game_id = create_game()["game_id"]
    response = enter_hole(game_id, 1, {"Alice": -1, "Bob": 0, "Carol": 3})
    assert response.status_code == 200
    body = response.json()
    assert body["scores"][0]["Carol"] == {"kind": "custom", "value": 3}
    assert body["result"]["total_scores"] == {"Alice": -1, "Bob": 0, "Carol": 3}
    assert body["result"]["wolf_scores"] == {"Alice": 4, "Bob": 2, "Carol": 0}


def test_update_hole_rejects_out_of_range_hole():
    game_id = create_game()["game_id"]
    response = enter_hole(game_id, 4, {"Alice": "Par"})
    assert response.status_code == 422
    assert "between 1 and 3" in response.text


def test_get_unknown_game_returns_404():
    response = client.get("/api/v1/games/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


def test_delete_game():
    game_id = create_game()["game_id"]
    assert client.delete(f"/api/v1/games/{game_id}").status_code == 200
    assert client.get(f"/api/v1/games/{game_id}").status_code == 404
    assert client.delete(f"/api/v1/games/{game_id}").status_code == 404


def test_archive_requires_finished_game():
    game_id = create_game()["game_id"]
    response = client.post(f"/api/v1/games/{game_id}/archive")
    assert response.status_code == 409


def test_archive_game_success(monkeypatch):
    def fake_save(game):
        assert game.in_progress is False
        assert game.result.wolf_scores == {"Alice": 4, "Bob": 2, "Carol": 0}
        return {"bucket": "test-bucket", "object_name": f"wolf-history/{game.game_id}.json"}

    monkeypatch.setattr(gcs_history_store, "save", fake_save)
    game_id = create_game()["game_id"]
    enter_hole(game_id, 1, {"Alice": "Birdie", "Bob": "Par", "Carol": "Bogey"})
    client.post(f"/api/v1/games/{game_id}/finish")

    response = client.post(f"/api/v1/games/{game_id}/archive")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["storage"]["bucket"] == "test-bucket"


def test_archive_without_bucket_returns_503(monkeypatch):
    monkeypatch.setattr(gcs_history_store, "bucket_name", None)
    game_id = create_game()["game_id"]
    client.post(f"/api/v1/games/{game_id}/finish")
    response = client.post(f"/api/v1/games/{game_id}/archive")
    assert response.status_code == 503

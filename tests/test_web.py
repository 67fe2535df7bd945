"""
Tests for the FastAPI application.

Each test builds a fresh app over a temporary data directory.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from tictactoe_ai.evaluation.weights import DEFAULT_WEIGHT_VECTOR, FEATURE_NAMES
from tictactoe_ai.game.serialization import board_from_string, serialize_board
from tictactoe_ai.web import app as web_app
from tictactoe_ai.web.app import create_app


def cells(text):
    return serialize_board(board_from_string(text))


DATASET_ROWS = [
    "3,2,2,0,1,2,1",
    "3,3,1,0,1,1,1",
    "4,3,2,0,1,3,1",
    "3,2,1,0,0,2,1",
    "4,4,2,1,1,2,1",
    "2,3,0,2,0,1,-1",
    "3,3,0,1,0,1,-1",
    "3,4,0,2,0,0,-1",
    "2,3,0,1,1,0,-1",
    "4,4,1,2,0,1,-1",
]


@pytest.fixture
def dataset_path(tmp_path):
    path = tmp_path / "games.csv"
    path.write_text("\n".join([",".join(FEATURE_NAMES + ['label'])] + DATASET_ROWS))
    return path


@pytest.fixture
def client(tmp_path, dataset_path):
    return TestClient(create_app(data_dir=tmp_path / "data", dataset_path=dataset_path))


@pytest.fixture
def bare_client(tmp_path):
    """App with no dataset file configured."""
    return TestClient(create_app(data_dir=tmp_path / "data"))


class TestSearchEndpoint:
    """Tests for POST /api/search."""

    def test_blocks_threat(self, client):
        response = client.post("/api/search", json={
            "board": cells('XX..O....'), "ai_mark": "O", "difficulty": "hard"
        })
        assert response.status_code == 200
        data = response.json()
        assert data["best_move"] == 2
        assert data["moves"][0]["move"] == 2
        assert len(data["moves"]) == 6
        values = [m["value"] for m in data["moves"]]
        assert values == sorted(values, reverse=True)

    @pytest.mark.parametrize("evaluation_type", ["classical", "ml", "ml-basic", "ml-advanced"])
    def test_every_evaluator_takes_win(self, client, evaluation_type):
        response = client.post("/api/search", json={
            "board": cells('XX.OO....'), "ai_mark": "x",
            "evaluation_type": evaluation_type, "difficulty": "hard"
        })
        assert response.status_code == 200
        assert response.json()["best_move"] == 2

    def test_delay(self, client):
        response = client.post("/api/search", json={
            "board": cells('X........'), "delay": 0.01, "difficulty": "easy"
        })
        assert response.status_code == 200

    @pytest.mark.parametrize("payload", [
        {"board": [None] * 8},
        {"board": ["Q"] + [None] * 8},
        {"board": [None] * 9, "ai_mark": "Z"},
        {"board": cells('XXXOO....')},
        {"board": [None] * 9, "evaluation_type": "neural"},
    ])
    def test_bad_requests(self, client, payload):
        assert client.post("/api/search", json=payload).status_code == 400

    def test_delay_out_of_range(self, client):
        response = client.post("/api/search", json={"board": [None] * 9, "delay": 10})
        assert response.status_code == 422


class TestMoveEndpoint:
    """Tests for POST /api/moves."""

    def test_applies_move(self, client):
        response = client.post("/api/moves", json={"board": [None] * 9, "move": 4})
        assert response.status_code == 200
        data = response.json()
        assert data["board"][4] == "X"
        assert data["next_player"] == "O"
        assert data["outcome"]["status"] == "in_progress"

    def test_winning_move(self, client):
        response = client.post("/api/moves", json={"board": cells('XX.OO....'), "move": 2})
        data = response.json()
        assert data["outcome"] == {"status": "win", "winner": "X", "line": [0, 1, 2]}
        assert data["next_player"] is None

    def test_explicit_mark(self, client):
        response = client.post("/api/moves", json={"board": [None] * 9, "move": 0, "mark": "o"})
        assert response.json()["board"][0] == "O"

    def test_occupied_cell(self, client):
        response = client.post("/api/moves", json={"board": cells('X........'), "move": 0})
        assert response.status_code == 400

    def test_game_over(self, client):
        response = client.post("/api/moves", json={"board": cells('XXXOO....'), "move": 8})
        assert response.status_code == 400

    def test_move_out_of_range(self, client):
        response = client.post("/api/moves", json={"board": [None] * 9, "move": 9})
        assert response.status_code == 422


class TestModelEndpoints:
    """Tests for reading and replacing the active model."""

    def test_default_model(self, client):
        data = client.get("/api/model").json()
        assert data["weights"] == DEFAULT_WEIGHT_VECTOR
        assert data["featureNames"] == FEATURE_NAMES
        assert data["version"] == "1.0"

    def test_put_and_reset(self, client):
        new_weights = [0.5, -0.5, 3.0, -4.0, 1.0, 0.25]
        response = client.put("/api/model", json={"weights": new_weights, "bias": 0.1})
        assert response.status_code == 200
        assert client.get("/api/model").json()["weights"] == new_weights

        reset = client.post("/api/model/reset").json()
        assert reset["weights"] == DEFAULT_WEIGHT_VECTOR
        assert client.get("/api/model").json()["bias"] == 0.0

    def test_put_wrong_length(self, client):
        response = client.put("/api/model", json={"weights": [1, 2, 3]})
        assert response.status_code == 400
        assert client.get("/api/model").json()["weights"] == DEFAULT_WEIGHT_VECTOR


class TestTrainEndpoint:
    """Tests for POST /api/train."""

    def test_trains_on_dataset(self, client):
        response = client.post("/api/train", json={
            "epochs": 200, "learning_rate": 0.01, "random_state": 0, "cv_folds": 2
        })
        assert response.status_code == 200
        data = response.json()
        assert data["samples"] == 10
        assert 0 <= data["train_accuracy"] <= 100
        assert data["test_accuracy"] is not None
        assert len(data["cross_validation"]["accuracies"]) == 2
        assert len(data["importance"]) == 6
        assert len(data["model"]["weights"]) == 6
        assert data["activated"] is False
        # Not activated, so the default model stays
        assert client.get("/api/model").json()["weights"] == DEFAULT_WEIGHT_VECTOR

    def test_activate(self, client):
        data = client.post("/api/train", json={
            "epochs": 50, "random_state": 0, "activate": True
        }).json()
        assert data["activated"] is True
        assert client.get("/api/model").json()["weights"] == data["model"]["weights"]

    def test_no_data(self, bare_client):
        response = bare_client.post("/api/train", json={"epochs": 10})
        assert response.status_code == 400

    def test_dataset_disabled_and_empty_history(self, client):
        response = client.post("/api/train", json={"use_dataset": False})
        assert response.status_code == 400

    def test_divergence(self, client):
        response = client.post("/api/train", json={
            "learning_rate": 100.0, "epochs": 300, "random_state": 0
        })
        assert response.status_code == 400
        assert "diverged" in response.json()["detail"]

    def test_too_many_folds(self, client):
        response = client.post("/api/train", json={"epochs": 10, "cv_folds": 50})
        assert response.status_code == 400

    def test_dataset_read_off_event_loop(self, client, monkeypatch):
        real_load = web_app.load_dataset
        threads = []

        def recording_load(path):
            try:
                asyncio.get_running_loop()
                threads.append('loop')
            except RuntimeError:
                threads.append('worker')
            return real_load(path)

        monkeypatch.setattr(web_app, "load_dataset", recording_load)
        response = client.post("/api/train", json={"epochs": 10, "random_state": 0})
        assert response.status_code == 200
        assert threads == ['worker']

    def test_trains_on_history(self, bare_client):
        bare_client.post("/api/history", json={"board": cells('XXXOO....'), "winner": "X", "moves": 5})
        bare_client.post("/api/history", json={"board": cells('OOOXX.X..'), "winner": "O", "moves": 6})
        response = bare_client.post("/api/train", json={
            "epochs": 20, "test_ratio": 0.0, "random_state": 0
        })
        assert response.status_code == 200
        data = response.json()
        assert data["samples"] == 2
        assert data["test_accuracy"] is None


class TestHistoryEndpoints:
    """Tests for recording and clearing game history."""

    def test_record_and_stats(self, client, tmp_path):
        response = client.post("/api/history", json={
            "board": cells('XXXOO....'), "winner": "x", "moves": 5
        })
        assert response.status_code == 200
        assert response.json()["total_games"] == 1
        assert (tmp_path / "data" / "history.json").exists()

        stats = client.get("/api/history/stats").json()
        assert stats == {"total_games": 1, "x_wins": 1, "o_wins": 0,
                         "win_rate": {"x": 100.0, "o": 0.0}}

    @pytest.mark.parametrize("winner", [None, "draw"])
    def test_draws_not_stored(self, client, winner):
        response = client.post("/api/history", json={
            "board": cells('XOXXOOOXX'), "winner": winner, "moves": 9
        })
        assert response.status_code == 200
        assert response.json()["total_games"] == 0

    def test_unknown_winner(self, client):
        response = client.post("/api/history", json={
            "board": cells('XXXOO....'), "winner": "Z", "moves": 5
        })
        assert response.status_code == 400

    @pytest.mark.parametrize("payload", [
        {"board": cells('XXXOO....'), "winner": "O", "moves": 5},
        {"board": cells('XXXOO....'), "winner": None, "moves": 5},
        {"board": cells('XOXXOOOXX'), "winner": "X", "moves": 9},
        {"board": [None] * 9, "winner": "X", "moves": 0},
        {"board": cells('XX.OO....'), "winner": "X", "moves": 4},
        {"board": cells('XXX......'), "winner": "X", "moves": 3},
        {"board": cells('XXXOO....'), "winner": "X", "moves": 9},
    ])
    def test_rejects_inconsistent_games(self, client, tmp_path, payload):
        response = client.post("/api/history", json=payload)
        assert response.status_code == 400
        assert client.get("/api/history/stats").json()["total_games"] == 0
        assert not (tmp_path / "data" / "history.json").exists()

    def test_moves_optional(self, client):
        response = client.post("/api/history", json={"board": cells('OOOXX.X..'), "winner": "O"})
        assert response.status_code == 200
        assert response.json()["o_wins"] == 1

    def test_history_survives_restart(self, tmp_path):
        first = TestClient(create_app(data_dir=tmp_path))
        first.post("/api/history", json={"board": cells('XXXOO....'), "winner": "X", "moves": 5})
        second = TestClient(create_app(data_dir=tmp_path))
        assert second.get("/api/history/stats").json()["total_games"] == 1

    def test_clear(self, client):
        client.post("/api/history", json={"board": cells('XXXOO....'), "winner": "X", "moves": 5})
        response = client.delete("/api/history")
        assert response.json()["total_games"] == 0
        assert client.get("/api/history/stats").json()["win_rate"] is None


class TestOpenApiSchema:
    """Tests for the generated API description."""

    def test_documents_error_body(self, client):
        schema = client.get("/openapi.json").json()
        assert schema["components"]["schemas"]["ErrorResponse"]["required"] == ["detail"]
        for path, method in [("/api/search", "post"), ("/api/moves", "post"),
                             ("/api/model", "put"), ("/api/train", "post"),
                             ("/api/history", "post")]:
            error = schema["paths"][path][method]["responses"]["400"]
            assert error["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")

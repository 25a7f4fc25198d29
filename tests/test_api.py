"""
Tests for the HTTP API.

Covers species lookup, stateless fragment generation and the puzzle session
lifecycle driven through pick / drag / rotate / release calls.
"""

import math

import pytest
from fastapi.testclient import TestClient

from leaf_fracture.api.main import app
from leaf_fracture.api.puzzles import sessions

SQUARE = [[-100, -100], [100, -100], [100, 100], [-100, 100]]

# Sent as raw bodies so NaN and Infinity reach the server unencoded
JSON_HEADERS = {"Content-Type": "application/json"}


class TestBasicEndpoints:
    """Test the informational and stateless endpoints."""

    def setup_method(self):
        """Set up test client."""
        self.client = TestClient(app)

    def test_root(self):
        response = self.client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "species": 6}

    def test_species(self):
        response = self.client.get("/species")
        assert response.status_code == 200
        species = response.json()
        assert len(species) == 6
        assert species[0]["id"] == "maple"

    def test_species_outline(self):
        response = self.client.get("/species/oak/outline")
        assert response.status_code == 200
        data = response.json()
        assert len(data["outline"]) == 100
        assert all(len(vein) >= 2 for vein in data["veins"])

    def test_unknown_species_outline(self):
        response = self.client.get("/species/baobab/outline")
        assert response.status_code == 404


class TestFragmentGeneration:
    """Test the /fragments endpoint."""

    def setup_method(self):
        """Set up test client."""
        self.client = TestClient(app)

    def test_same_seed_same_fragments(self):
        request = {"species_id": "birch", "difficulty": "hard", "seed": 77}
        first = self.client.post("/fragments", json=request).json()
        second = self.client.post("/fragments", json=request).json()

        assert first["seed"] == 77
        assert first["requested"] == 13
        assert 0 < len(first["fragments"]) <= 13
        assert first == second

    def test_explicit_outline(self):
        response = self.client.post("/fragments", json={"outline": SQUARE, "piece_count": 4, "seed": 3})
        assert response.status_code == 200
        data = response.json()
        assert data["requested"] == 4
        assert sum(f["area"] for f in data["fragments"]) == pytest.approx(40000, rel=0.1)

    def test_seed_reported_when_omitted(self):
        response = self.client.post("/fragments", json={"species_id": "lime"})
        assert response.status_code == 200
        assert 0 <= response.json()["seed"] < 2 ** 32

    def test_outline_source_required(self):
        response = self.client.post("/fragments", json={"seed": 1})
        assert response.status_code == 400

    def test_unknown_species(self):
        response = self.client.post("/fragments", json={"species_id": "baobab"})
        assert response.status_code == 404

    def test_too_many_pieces(self):
        response = self.client.post("/fragments", json={"species_id": "oak", "piece_count": 50})
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [
        {"species_id": "oak", "piece_count": 0},
        {"outline": [[0, 0], [1, 1]]},
        {"species_id": "oak", "seed": -1},
    ])
    def test_validation_errors(self, body):
        response = self.client.post("/fragments", json=body)
        assert response.status_code == 422

    @pytest.mark.parametrize("path,body", [
        ("/fragments", '{"outline": [[0, 0], [NaN, 0], [100, 100]], "seed": 1}'),
        ("/fragments", '{"outline": [[0, 0], [Infinity, 0], [100, 100]]}'),
        ("/puzzles", '{"species_id": "oak", "surface_width": Infinity}'),
    ])
    def test_non_finite_numbers_rejected(self, path, body):
        response = self.client.post(path, content=body, headers=JSON_HEADERS)
        assert response.status_code == 422


class TestPuzzleSessions:
    """Test the puzzle session lifecycle."""

    def setup_method(self):
        """Set up test client and a fresh puzzle."""
        self.client = TestClient(app)
        response = self.client.post("/puzzles", json={
            "outline": SQUARE,
            "difficulty": "easy",
            "seed": 5,
            "surface_width": 800,
            "surface_height": 600,
        })
        assert response.status_code == 200
        self.state = response.json()
        self.puzzle_id = self.state["puzzle_id"]

    def teardown_method(self):
        sessions.pop(self.puzzle_id, None)

    def _pick_any(self):
        for fragment in self.state["fragments"]:
            x, y = fragment["current_position"]
            state = self.client.post(f"/puzzles/{self.puzzle_id}/pick", json={"x": x, "y": y}).json()
            if state["held_fragment_id"] is not None:
                return state, (x, y)
        pytest.fail("No fragment could be picked")

    def _fragment(self, state, fragment_id):
        return next(f for f in state["fragments"] if f["id"] == fragment_id)

    def test_create(self):
        assert self.state["seed"] == 5
        assert 0 < self.state["total"] <= 5
        assert self.state["placed_count"] == 0
        assert not self.state["is_complete"]
        assert self.state["anchor"] == pytest.approx([400, 300])

    def test_get(self):
        response = self.client.get(f"/puzzles/{self.puzzle_id}")
        assert response.status_code == 200
        assert response.json() == self.state

    def test_unknown_puzzle(self):
        assert self.client.get("/puzzles/missing").status_code == 404
        assert self.client.post("/puzzles/missing/release").status_code == 404

    def test_pick_on_empty_space(self):
        response = self.client.post(f"/puzzles/{self.puzzle_id}/pick", json={"x": -500, "y": -500})
        assert response.status_code == 200
        assert response.json()["held_fragment_id"] is None

    def test_pick_brings_to_front(self):
        state, _ = self._pick_any()
        # Draw order is bottom first, so the held fragment is drawn last
        assert state["fragments"][-1]["id"] == state["held_fragment_id"]

    def test_update_fragment(self):
        fragment_id = self.state["fragments"][0]["id"]
        response = self.client.put(f"/puzzles/{self.puzzle_id}/fragments/{fragment_id}",
                                   json={"x": 12, "y": 34, "rotation": 1.0})
        assert response.status_code == 200
        fragment = self._fragment(response.json(), fragment_id)
        assert fragment["current_position"] == [12, 34]
        assert fragment["rotation"] == 1.0

    def test_update_needs_both_coordinates(self):
        fragment_id = self.state["fragments"][0]["id"]
        response = self.client.put(f"/puzzles/{self.puzzle_id}/fragments/{fragment_id}",
                                   json={"x": 12})
        assert response.status_code == 400

    def test_update_unknown_fragment(self):
        response = self.client.put(f"/puzzles/{self.puzzle_id}/fragments/999",
                                   json={"rotation": 1.0})
        assert response.status_code == 404

    def test_update_placed_fragment_conflicts(self):
        session = sessions[self.puzzle_id]
        fragment_id = self.state["fragments"][0]["id"]
        session.store.mark_placed(fragment_id, session.anchor, session.scale)

        response = self.client.put(f"/puzzles/{self.puzzle_id}/fragments/{fragment_id}",
                                   json={"x": 1, "y": 1})
        assert response.status_code == 409

    def test_rotate_topmost(self):
        topmost = self.state["fragments"][-1]
        response = self.client.post(f"/puzzles/{self.puzzle_id}/rotate", json={"steps": -1})
        fragment = self._fragment(response.json(), topmost["id"])
        assert fragment["rotation"] == pytest.approx(topmost["rotation"] - math.pi / 2)

    def test_release_without_hold(self):
        response = self.client.post(f"/puzzles/{self.puzzle_id}/release")
        assert response.status_code == 200
        assert response.json()["snapped"] is False

    def test_pick_drag_rotate_release_snaps(self):
        state, grab = self._pick_any()
        fragment_id = state["held_fragment_id"]
        fragment = self._fragment(state, fragment_id)
        offset = (grab[0] - fragment["current_position"][0], grab[1] - fragment["current_position"][1])

        turns = (4 - round(fragment["rotation"] / (math.pi / 2))) % 4
        self.client.post(f"/puzzles/{self.puzzle_id}/rotate", json={"steps": turns})

        scale = state["scale"]
        target = (state["anchor"][0] + fragment["centroid"][0] * scale,
                  state["anchor"][1] + fragment["centroid"][1] * scale)
        self.client.post(f"/puzzles/{self.puzzle_id}/drag",
                         json={"x": target[0] + offset[0] + 2, "y": target[1] + offset[1] - 1})

        result = self.client.post(f"/puzzles/{self.puzzle_id}/release").json()
        assert result["snapped"] is True

        placed = self._fragment(result["state"], fragment_id)
        assert placed["is_placed"]
        assert placed["rotation"] == 0.0
        assert placed["current_position"] == pytest.approx(list(target))
        assert result["state"]["placed_count"] == 1
        assert result["state"]["held_fragment_id"] is None
        # Placed fragments are drawn beneath the rest
        assert result["state"]["fragments"][0]["id"] == fragment_id

    def test_restart(self):
        self._pick_any()
        response = self.client.post(f"/puzzles/{self.puzzle_id}/restart", json={"seed": 6})
        assert response.status_code == 200
        state = response.json()
        assert state["seed"] == 6
        assert state["held_fragment_id"] is None
        assert state["placed_count"] == 0

    def test_delete(self):
        response = self.client.delete(f"/puzzles/{self.puzzle_id}")
        assert response.status_code == 200
        assert self.client.get(f"/puzzles/{self.puzzle_id}").status_code == 404

    def test_create_requires_outline_source(self):
        response = self.client.post("/puzzles", json={"difficulty": "easy"})
        assert response.status_code == 400

    @pytest.mark.parametrize("method,path,body", [
        ("put", "fragments/{fragment_id}", '{"rotation": Infinity}'),
        ("put", "fragments/{fragment_id}", '{"x": NaN, "y": 0}'),
        ("post", "pick", '{"x": 50, "y": -Infinity}'),
        ("post", "drag", '{"x": NaN, "y": 50}'),
    ])
    def test_non_finite_numbers_rejected(self, method, path, body):
        fragment_id = self.state["fragments"][0]["id"]
        url = f"/puzzles/{self.puzzle_id}/" + path.format(fragment_id=fragment_id)
        response = self.client.request(method.upper(), url, content=body, headers=JSON_HEADERS)
        assert response.status_code == 422

        # The session is untouched and still answers pointer calls
        assert self.client.get(f"/puzzles/{self.puzzle_id}").json() == self.state
        response = self.client.post(f"/puzzles/{self.puzzle_id}/pick", json={"x": 50, "y": 50})
        assert response.status_code == 200

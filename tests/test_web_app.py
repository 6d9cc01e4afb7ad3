"""Tests for the Flask game record and scorer endpoints."""
import os
import tempfile
import unittest

from kampfgericht.config import Config
from kampfgericht.services import JsonGameStore
from kampfgericht.ui import create_app

from helpers import ALICE, BEN, GAME_ID, FakeTime, make_record, oid


def make_config(data_dir, token=None):
    class TestConfig(Config):
        TESTING = True
        DATA_DIR = data_dir
        GAME_API_URL = None
        HALF_TIME_DURATION_SECONDS = 60
        TICK_INTERVAL_SECONDS = 0.1
        AUTOSAVE_DELAY_SECONDS = 0.5
        SCORER_API_TOKEN = token

    return TestConfig


class WebAppTestCase(unittest.TestCase):
    token = None

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        data_dir = os.path.join(self.temp_dir.name, "games")
        self.store = JsonGameStore(data_dir)
        self.store.save_game(make_record())
        self.time = FakeTime(start=5000.0)
        self.app = create_app(make_config(data_dir, self.token), time_fn=self.time)
        self.client = self.app.test_client()

    def tearDown(self) -> None:
        self.app.extensions["kampfgericht"].close_all()
        self.temp_dir.cleanup()

    def scorer(self, path: str) -> str:
        return f"/api/scorer/{GAME_ID}{path}"

    @staticmethod
    def titles(response):
        return [n["title"] for n in response.get_json()["notifications"]]


class GameRecordEndpointTests(WebAppTestCase):
    def test_get_game(self) -> None:
        response = self.client.get(f"/api/games/{GAME_ID}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["game"]["teamA"]["name"], "Falcons")

        response = self.client.get(f"/api/games/{oid(42)}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"error": "Game not found"})

    def test_patch_game(self) -> None:
        response = self.client.patch(f"/api/games/{GAME_ID}", json={"status": "live", "scoreA": 4})
        self.assertEqual(response.status_code, 200)
        game = response.get_json()["game"]
        self.assertEqual((game["status"], game["scoreA"]), ("live", 4))
        self.assertEqual(self.store.fetch_game(GAME_ID).score_a, 4)

    def test_patch_rejects_invalid_payload(self) -> None:
        response = self.client.patch(f"/api/games/{GAME_ID}", json={"status": "over"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], ["status must be one of pending, live, finished"])

        response = self.client.patch(f"/api/games/{oid(42)}", json={"scoreA": 1})
        self.assertEqual(response.status_code, 404)

    def test_patch_rejects_non_finite_numbers(self) -> None:
        response = self.client.patch(
            f"/api/games/{GAME_ID}", data='{"scoreA": NaN, "scoreB": Infinity}',
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], ["scoreA must be an integer", "scoreB must be an integer"])
        self.assertEqual(self.store.fetch_game(GAME_ID).score_a, 0)


class ScorerEndpointTests(WebAppTestCase):
    def test_open_session_validation(self) -> None:
        response = self.client.post("/api/scorer/not-an-id/session")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["redirect"], "/admin")

        response = self.client.post(f"/api/scorer/{oid(42)}/session")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.get_json()["success"])

        response = self.client.get(self.scorer("/state"))
        self.assertEqual(response.status_code, 404)

    def test_full_game(self) -> None:
        response = self.client.post(self.scorer("/session"))
        self.assertEqual(response.status_code, 200)
        session = response.get_json()["session"]
        self.assertEqual(session["status"], "pending")
        self.assertEqual(session["clock"]["display"], "01:00")

        response = self.client.post(self.scorer("/timer/start"))
        self.assertTrue(response.get_json()["started"])
        self.assertEqual(self.store.fetch_game(GAME_ID).status.value, "live")

        response = self.client.post(self.scorer("/points"), json={"playerId": ALICE, "points": 3})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["session"]["team_a"]["totalScore"], 3)
        self.assertEqual(self.titles(response), ["3 points for Alice (Falcons)"])

        self.time.advance(65)
        response = self.client.get(self.scorer("/state"))
        clock = response.get_json()["session"]["clock"]
        self.assertEqual(clock["time_elapsed"], 60)
        self.assertFalse(clock["is_running"])
        self.assertEqual(clock["display_half"], 1)
        self.assertIn("First half ended", self.titles(response))

        response = self.client.post(self.scorer("/points"), json={"playerId": BEN, "points": 2})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()["reason"], "scoring_gated")

        self.client.post(self.scorer("/timer/start"))
        self.client.post(self.scorer("/points"), json={"playerId": BEN, "points": 2})

        self.time.advance(70)
        response = self.client.get(self.scorer("/state"))
        session = response.get_json()["session"]
        self.assertEqual(session["clock"]["time_elapsed"], 120)
        self.assertEqual(session["status"], "finished")
        self.assertIn("Game ended", self.titles(response))
        self.assertEqual(self.store.fetch_game(GAME_ID).player_stats, [])

        self.time.advance(1)
        response = self.client.get(self.scorer("/state"))
        self.assertIn("Game saved", self.titles(response))

        game = self.client.get(f"/api/games/{GAME_ID}").get_json()["game"]
        self.assertEqual((game["status"], game["scoreA"], game["scoreB"]), ("finished", 5, 0))
        self.assertEqual(game["playerStats"][0], {
            "playerId": ALICE, "points1": 0, "points2": 0, "points3": 1, "total": 3,
        })

    def test_points_payload_validation(self) -> None:
        self.client.post(self.scorer("/session"))
        for payload in ({}, {"playerId": ALICE, "points": 4}, {"playerId": ALICE, "points": True}):
            response = self.client.post(self.scorer("/points"), json=payload)
            self.assertEqual(response.status_code, 400)

        response = self.client.post(self.scorer("/points"), json={"playerId": oid(55), "points": 1})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()["reason"], "player_not_found")

    def test_undo_save_and_close(self) -> None:
        self.client.post(self.scorer("/session"))
        self.client.post(self.scorer("/points"), json={"playerId": ALICE, "points": 2})
        self.client.post(self.scorer("/points"), json={"playerId": ALICE, "points": 1})

        response = self.client.post(self.scorer("/undo"))
        body = response.get_json()
        self.assertEqual(body["undone"]["points"], 1)
        self.assertEqual(body["session"]["team_a"]["totalScore"], 2)

        response = self.client.post(self.scorer("/save"))
        self.assertTrue(response.get_json()["saved"])
        self.assertEqual(self.store.fetch_game(GAME_ID).score_a, 2)

        response = self.client.delete(self.scorer("/session"))
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.app.extensions["kampfgericht"].get(GAME_ID))
        self.assertEqual(self.client.delete(self.scorer("/session")).status_code, 404)

    def test_reset_timer(self) -> None:
        self.client.post(self.scorer("/session"))
        self.client.post(self.scorer("/timer/start"))
        self.time.advance(10)
        self.client.post(self.scorer("/timer/pause"))
        response = self.client.post(self.scorer("/timer/reset"))
        self.assertEqual(response.get_json()["session"]["clock"]["time_elapsed"], 0)


class ScorerAuthorizationTests(WebAppTestCase):
    token = "s3cret"

    def test_scorer_requires_token(self) -> None:
        response = self.client.post(self.scorer("/session"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["redirect"], "/login")

        response = self.client.post(
            self.scorer("/session"), headers={"Authorization": "Bearer wrong"}
        )
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            self.scorer("/session"), headers={"Authorization": "Bearer s3cret"}
        )
        self.assertEqual(response.status_code, 200)

    def test_game_records_stay_public(self) -> None:
        self.assertEqual(self.client.get(f"/api/games/{GAME_ID}").status_code, 200)


if __name__ == "__main__":
    unittest.main()

"""Tests for the game record model and update validation."""

import pytest

from kampfgericht.errors import GameDataError
from kampfgericht.models import GameRecord, GameStatus, GameUpdate, PlayerStatLine, is_valid_game_id

from helpers import ALICE, DANA, GAME_ID, TEAM_A_ID, make_record, oid


def api_document():
    return {
        "_id": GAME_ID,
        "tournamentId": oid(9),
        "teamA": {"_id": TEAM_A_ID, "name": "Falcons", "players": [
            {"_id": ALICE, "name": "Alice", "number": 4},
        ]},
        "teamB": {"_id": oid(200), "name": "Otters", "players": [
            {"_id": DANA, "name": "Dana"},
        ]},
        "scoreA": 0,
        "scoreB": 0,
        "status": "live",
        "playerStats": [
            {"playerId": {"_id": ALICE, "name": "Alice"}, "points1": 1, "points2": 0, "points3": 2, "total": 7},
            {"playerId": DANA, "points1": 0, "points2": 1, "points3": 0},
        ],
        "createdAt": "2024-05-01T10:00:00.000Z",
    }


def test_from_json_accepts_populated_player_references():
    record = GameRecord.from_json(api_document())

    assert record.status is GameStatus.LIVE
    assert record.team_a.players[0].number == 4
    assert record.team_b.players[0].number is None
    assert record.stat_for(ALICE).points3 == 2
    assert record.stat_for(DANA).total == 2
    assert record.stat_for(oid(5)) is None


def test_to_json_uses_api_field_names():
    data = make_record().to_json()

    assert data["_id"] == GAME_ID
    assert data["teamA"]["players"][0] == {"_id": ALICE, "name": "Alice", "number": 4}
    assert data["status"] == "pending"
    assert "scheduledTime" not in data
    assert GameRecord.from_json(data) == make_record()


@pytest.mark.parametrize("missing", ["teamA", "teamB"])
def test_missing_team_is_incomplete(missing):
    document = api_document()
    del document[missing]
    with pytest.raises(GameDataError, match="Incomplete game data"):
        GameRecord.from_json(document)


def test_team_without_player_list_is_incomplete():
    document = api_document()
    del document["teamB"]["players"]
    with pytest.raises(GameDataError):
        GameRecord.from_json(document)


def test_update_parses_known_fields_and_ignores_others():
    update = GameUpdate.from_json({
        "status": "finished",
        "scoreA": 12,
        "scoreB": 9,
        "timeElapsed": 120,
        "playerStats": [{"playerId": ALICE, "points1": 1, "points2": 1, "points3": 0, "total": 3}],
    })

    assert update.status is GameStatus.FINISHED
    assert (update.score_a, update.score_b) == (12, 9)
    assert update.player_stats == [PlayerStatLine(ALICE, 1, 1, 0, 3)]
    assert "timeElapsed" not in update.to_json()


def test_update_collects_every_error():
    with pytest.raises(GameDataError) as excinfo:
        GameUpdate.from_json({
            "status": "paused",
            "scoreA": "ten",
            "scoreB": True,
            "playerStats": [{"points1": 1}, {"playerId": ALICE, "points2": -1}],
        })

    errors = excinfo.value.errors
    assert "status must be one of pending, live, finished" in errors
    assert "scoreA must be an integer" in errors
    assert "scoreB must be an integer" in errors
    assert "playerStats[0].playerId is required" in errors
    assert "playerStats[1].points2 must not be negative" in errors


def test_apply_update_leaves_unset_fields():
    record = make_record(status=GameStatus.LIVE)
    updated = record.apply_update(GameUpdate(score_a=5))

    assert updated.score_a == 5
    assert updated.status is GameStatus.LIVE
    assert record.score_a == 0


def test_game_id_format():
    assert is_valid_game_id("64f1a2b3c4d5e6f708192a3b")
    assert not is_valid_game_id("64f1a2b3c4d5e6f708192a3")
    assert not is_valid_game_id("../../etc/passwd")
    assert not is_valid_game_id(None)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), 2.5])
def test_non_finite_or_fractional_counts_are_rejected(value):
    with pytest.raises(GameDataError) as exc_info:
        GameUpdate.from_json({"scoreA": value, "playerStats": [{"playerId": ALICE, "points1": value}]})
    assert exc_info.value.errors == [
        "scoreA must be an integer",
        "playerStats[0].points1 must be an integer",
    ]

    document = api_document()
    document["scoreB"] = value
    with pytest.raises(GameDataError):
        GameRecord.from_json(document)


def test_non_finite_jersey_number_is_dropped():
    document = api_document()
    document["teamA"]["players"][0]["number"] = float("inf")
    document["teamB"]["players"][0]["number"] = 9.0

    record = GameRecord.from_json(document)
    assert record.team_a.players[0].number is None
    assert record.team_b.players[0].number == 9


def test_teams_sharing_an_id_are_incomplete():
    document = api_document()
    document["teamB"]["_id"] = TEAM_A_ID
    with pytest.raises(GameDataError, match="share the same id"):
        GameRecord.from_json(document)
